"""Accounts: password hashing, bearer tokens, registration and sign-in."""

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.config import get_settings
from src.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class EmailTakenError(Exception):
    """An account already exists for this email address."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def check_password(password: str, password_hash: str | None) -> bool:
    return bool(password_hash) and pwd_context.verify(password, password_hash)


def issue_token(user: User) -> str:
    """Signed bearer token naming the user, valid for ``jwt_expiration_minutes``."""
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "exp": datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def read_token(token: str) -> int | None:
    """User id carried by a valid, unexpired token; None for anything else."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = claims.get("sub")
    if subject is None or not str(subject).isdigit():
        return None
    return int(subject)


def find_user(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register_user(db: Session, email: str, password: str, name: str | None = None) -> User:
    """Create an account.

    Raises:
        EmailTakenError: the address is already registered, including when a
            concurrent registration wins the race on the unique email index.
    """
    email = normalize_email(email)
    if find_user(db, email):
        raise EmailTakenError(email)

    user = User(email=email, password_hash=hash_password(password), name=name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise EmailTakenError(email) from None
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return user


def sign_in(db: Session, email: str, password: str) -> User | None:
    """The account for ``email`` if ``password`` matches it."""
    user = find_user(db, email)
    # password_hash is deferred; reading it issues a second SELECT
    if user is None or not check_password(password, user.password_hash):
        return None
    return user
