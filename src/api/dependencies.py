"""FastAPI dependencies for authentication and services."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.database import get_db
from src.models.user import User
from src.services.auth import read_token
from src.services.brand_service import BrandService
from src.services.guitar_service import GuitarService

# auto_error is off so a missing header gets the same 401 as a bad token
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    if credentials is None:
        raise _unauthorized("Not authenticated")

    user_id = read_token(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Invalid authentication credentials")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise _unauthorized("User not found")

    return user


def get_brand_service(
    db: Annotated[Session, Depends(get_db)],
) -> BrandService:
    """Get brand service with dependencies."""
    return BrandService(db)


def get_guitar_service(
    db: Annotated[Session, Depends(get_db)],
) -> GuitarService:
    """Get guitar service with dependencies."""
    return GuitarService(db, BrandService(db))
