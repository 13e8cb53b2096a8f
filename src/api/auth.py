"""Account endpoints: register, sign in, current user, sign out."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_current_user
from src.database import get_db
from src.models.user import User
from src.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from src.services.auth import EmailTakenError, issue_token, register_user, sign_in

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _signed_in(user: User) -> AuthResponse:
    return AuthResponse(access_token=issue_token(user), user=UserResponse.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
):
    """Create an account and sign it in."""
    try:
        user = register_user(db, user_data.email, user_data.password, user_data.name)
    except EmailTakenError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        ) from None
    return _signed_in(user)


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Exchange email and password for a bearer token."""
    user = sign_in(db, credentials.email, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _signed_in(user)


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    return current_user


@router.post("/logout")
def logout(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Tokens are stateless; the client forgets its copy."""
    return {"message": "Logged out successfully"}
