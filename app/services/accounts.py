import logging
import secrets

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import NotFoundError, StoreError, ValidationError
from app.models import Role, User

logger = logging.getLogger(__name__)


def _new_chef_id() -> str:
    return f"chef-{secrets.token_hex(4)}"


def get_user(db: Session, user_id: int) -> User | None:
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to load user %s: %s", user_id, exc)
        raise StoreError("Record store unavailable while loading user") from exc


def grant_role(db: Session, user_id: int, role: Role | str) -> User:
    """Elevate a user's role. Becoming a chef assigns a chef id once and keeps it."""
    try:
        role = Role(role)
    except ValueError:
        raise ValidationError(f"Unknown role: {role}")

    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    user.role = role.value
    if role == Role.CHEF and not user.chef_id:
        user.chef_id = _new_chef_id()
    try:
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Failed to grant role %s to user %s: %s", role.value, user_id, exc)
        raise StoreError("Record store unavailable while granting role") from exc
    logger.info("User %s granted role %s", user_id, role.value)
    return user
