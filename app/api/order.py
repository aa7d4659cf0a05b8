from typing import Annotated

from fastapi import APIRouter, Depends

from app.authorization import Action, Identity
from app.dependencies import get_store, require
from app.schemas.orders import (
    OrderCreateRequest,
    OrderCreateResponse,
    OrderResponse,
    OrderTransitionResponse,
)
from app.services import order_lifecycle
from app.services.record_store import RecordStore

router = APIRouter()


@router.post(
    "",
    response_model=OrderCreateResponse,
    summary="Place an order",
)
def create_order(
    body: OrderCreateRequest,
    identity: Annotated[Identity, Depends(require(Action.PLACE_ORDER))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    """
    Place an order for a chef's meal. The order starts as pending / unpaid.
    `foodName` is accepted as an alias of `mealName`.
    """
    order = order_lifecycle.place_order(
        store,
        customer_email=identity.email,
        meal_id=body.meal_id,
        meal_name=body.meal_name or body.food_name,
        chef_id=body.chef_id,
        chef_name=body.chef_name,
        price=body.price,
    )
    return OrderCreateResponse(id=order.id)


@router.get(
    "/mine",
    response_model=list[OrderResponse],
    summary="List my orders",
)
def my_orders(
    identity: Annotated[Identity, Depends(require(Action.LIST_OWN_ORDERS))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    """Returns the orders placed by the current customer."""
    return order_lifecycle.list_customer_orders(store, identity.email)


@router.get(
    "/incoming",
    response_model=list[OrderResponse],
    summary="List orders for my meals",
)
def incoming_orders(
    identity: Annotated[Identity, Depends(require(Action.LIST_INCOMING_ORDERS))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    return order_lifecycle.list_chef_orders(store, identity.chef_id)


@router.put(
    "/{order_id}/cancel",
    response_model=OrderTransitionResponse,
    summary="Cancel a pending order",
)
def cancel_order(
    order_id: int,
    identity: Annotated[Identity, Depends(require(Action.CANCEL_ORDER))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    modified = order_lifecycle.cancel_order(store, order_id, identity.email)
    return OrderTransitionResponse(modified=modified)


@router.put(
    "/{order_id}/accept",
    response_model=OrderTransitionResponse,
    summary="Accept a pending order",
)
def accept_order(
    order_id: int,
    identity: Annotated[Identity, Depends(require(Action.ACCEPT_ORDER))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    modified = order_lifecycle.accept_order(store, order_id, identity.chef_id)
    return OrderTransitionResponse(modified=modified)


@router.put(
    "/{order_id}/reject",
    response_model=OrderTransitionResponse,
    summary="Reject a pending order",
)
def reject_order(
    order_id: int,
    identity: Annotated[Identity, Depends(require(Action.REJECT_ORDER))],
    store: Annotated[RecordStore, Depends(get_store)],
):
    modified = order_lifecycle.reject_order(store, order_id, identity.chef_id)
    return OrderTransitionResponse(modified=modified)
