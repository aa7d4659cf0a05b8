"""Role and ownership checks evaluated uniformly per endpoint.

``can(identity, action)`` answers the role question; passing the resource as
well adds the ownership question for actions that have one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from app.models import Role


@dataclass(frozen=True)
class Identity:
    subject_id: str
    email: str
    role: Role
    chef_id: str | None = None


class Action(str, Enum):
    PLACE_ORDER = "order:place"
    LIST_OWN_ORDERS = "order:list_own"
    LIST_INCOMING_ORDERS = "order:list_incoming"
    CANCEL_ORDER = "order:cancel"
    ACCEPT_ORDER = "order:accept"
    REJECT_ORDER = "order:reject"
    CREATE_CHECKOUT = "payment:create_checkout"
    VIEW_ALL_ORDERS = "admin:view_orders"
    VIEW_STATS = "admin:view_stats"
    GRANT_ROLE = "admin:grant_role"


ROLE_PERMISSIONS: dict[Role, frozenset[Action]] = {
    Role.CUSTOMER: frozenset(
        {
            Action.PLACE_ORDER,
            Action.LIST_OWN_ORDERS,
            Action.CANCEL_ORDER,
            Action.CREATE_CHECKOUT,
        }
    ),
    Role.CHEF: frozenset(
        {
            Action.LIST_INCOMING_ORDERS,
            Action.ACCEPT_ORDER,
            Action.REJECT_ORDER,
        }
    ),
    Role.ADMIN: frozenset(
        {
            Action.VIEW_ALL_ORDERS,
            Action.VIEW_STATS,
            Action.GRANT_ROLE,
        }
    ),
}


def _is_customer_of(identity: Identity, order: Any) -> bool:
    return order.customer_email == identity.email


def _is_chef_of(identity: Identity, order: Any) -> bool:
    return identity.chef_id is not None and order.chef_id == identity.chef_id


OWNERSHIP_RULES: dict[Action, Callable[[Identity, Any], bool]] = {
    Action.CANCEL_ORDER: _is_customer_of,
    Action.CREATE_CHECKOUT: _is_customer_of,
    Action.ACCEPT_ORDER: _is_chef_of,
    Action.REJECT_ORDER: _is_chef_of,
}


def can(identity: Identity, action: Action, resource: Any = None) -> bool:
    if action not in ROLE_PERMISSIONS.get(identity.role, frozenset()):
        return False
    if resource is None:
        return True
    rule = OWNERSHIP_RULES.get(action)
    return rule is None or rule(identity, resource)
