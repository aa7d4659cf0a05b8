from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.authorization import Action, Identity, can
from app.config import settings
from app.errors import ForbiddenError
from app.models import Role, get_db
from app.services.accounts import get_user
from app.services.record_store import RecordStore

security = HTTPBearer(auto_error=False)


def get_store(db: Annotated[Session, Depends(get_db)]) -> RecordStore:
    return RecordStore(db)


def get_current_identity_optional(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> Identity | None:
    if not credentials:
        return None
    token = credentials.credentials
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        sub = payload.get("sub")
        token_type = payload.get("type")
        if sub is None:
            return None
        if token_type not in {None, "access"}:
            return None
        user_id = int(sub) if not isinstance(sub, int) else sub
    except (JWTError, ValueError):
        return None
    user = get_user(db, user_id)
    if user is None:
        return None
    try:
        role = Role(user.role)
    except ValueError:
        return None
    return Identity(subject_id=str(user.id), email=user.email, role=role, chef_id=user.chef_id)


def get_current_identity(
    identity: Annotated[Identity | None, Depends(get_current_identity_optional)],
) -> Identity:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require(action: Action):
    """Dependency factory: the caller must be authenticated and allowed ``action``."""

    def dependency(identity: Annotated[Identity, Depends(get_current_identity)]) -> Identity:
        if not can(identity, action):
            raise ForbiddenError("Forbidden: insufficient role")
        return identity

    return dependency
