import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from app.dependencies import get_store
from app.schemas.payments import WebhookAck
from app.services.reconciliation import handle_notification
from app.services.record_store import RecordStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/webhook",
    response_model=WebhookAck,
    summary="Stripe webhook",
)
async def stripe_webhook(
    request: Request,
    store: Annotated[RecordStore, Depends(get_store)],
):
    """
    Stripe sends events here. We handle checkout.session.completed:
    mark the payment and its order as paid.
    Idempotent: redelivered, unknown and unrelated events are acknowledged
    without changes. Only a bad signature is answered with 400.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")

    # Blocking store I/O and retry sleeps run on a worker thread.
    outcome = await run_in_threadpool(handle_notification, store, payload, sig_header)
    logger.info(f"Stripe webhook processed: {outcome.value}")
    return WebhookAck(received=True)
