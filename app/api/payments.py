from typing import Annotated

from fastapi import APIRouter, Depends

from app.authorization import Action, Identity
from app.dependencies import get_store, require
from app.schemas.payments import CreatePaymentRequest, CreatePaymentResponse
from app.services import checkout
from app.services.record_store import RecordStore

router = APIRouter()


@router.post(
    "/create-payment",
    response_model=CreatePaymentResponse,
    summary="Create a Stripe checkout session for an order",
)
def create_payment(
    body: CreatePaymentRequest,
    identity: Annotated[Identity, Depends(require(Action.CREATE_CHECKOUT))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    """
    Creates a hosted checkout session and records a pending payment.
    The order is marked paid later, when Stripe calls the webhook.
    """
    session = checkout.create_checkout(
        store,
        order_id=body.order_id,
        identity=identity,
        amount=body.amount,
        currency=body.currency,
        success_url=body.success_url,
        cancel_url=body.cancel_url,
    )
    return CreatePaymentResponse(session_id=session.session_id, redirect_url=session.redirect_url)
