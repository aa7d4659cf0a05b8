from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.authorization import Action, Identity
from app.dependencies import get_store, require
from app.models import get_db
from app.schemas.admin import GrantRoleRequest, OrderStatsResponse, UserRoleResponse
from app.schemas.orders import OrderResponse
from app.services import accounts, order_lifecycle
from app.services.record_store import RecordStore

router = APIRouter()


@router.get(
    "/orders",
    response_model=list[OrderResponse],
    summary="List all orders",
)
def all_orders(
    identity: Annotated[Identity, Depends(require(Action.VIEW_ALL_ORDERS))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    return order_lifecycle.list_all_orders(store)


@router.get(
    "/stats",
    response_model=OrderStatsResponse,
    summary="Order and revenue statistics",
)
def stats(
    identity: Annotated[Identity, Depends(require(Action.VIEW_STATS))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    """Revenue is the sum of prices of paid orders."""
    return OrderStatsResponse(**order_lifecycle.order_stats(store))


@router.put(
    "/users/{user_id}/role",
    response_model=UserRoleResponse,
    summary="Grant a role to a user",
)
def grant_role(
    user_id: int,
    body: GrantRoleRequest,
    identity: Annotated[Identity, Depends(require(Action.GRANT_ROLE))],
    db: Annotated[Session, Depends(get_db)],
):
    user = accounts.grant_role(db, user_id, body.role)
    return UserRoleResponse(id=user.id, email=user.email, role=user.role, chef_id=user.chef_id)
