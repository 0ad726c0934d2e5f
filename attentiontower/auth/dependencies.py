"""Request authentication for the tower API."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from attentiontower.database.database import get_db
from attentiontower.database.user_repository import UserRepository
from attentiontower.auth.jwt import get_user_id_from_token
from attentiontower.models.user import User

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to the owning user (401 otherwise)."""
    if not credentials:
        raise _unauthorized("Not authenticated")

    user_id = get_user_id_from_token(credentials.credentials)
    if not user_id:
        raise _unauthorized("Invalid or expired token")

    user = UserRepository(db).get(user_id)
    if not user:
        raise _unauthorized("User not found")
    return user
