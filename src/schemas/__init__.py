"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import AuthResponse, UserLogin, UserRegister, UserResponse
from src.schemas.brand import BrandResponse
from src.schemas.guitar import (
    GuitarCreate,
    GuitarPage,
    GuitarResponse,
    GuitarUpdate,
    PageMeta,
    PriceSummaryResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "UserResponse",
    "BrandResponse",
    "GuitarCreate",
    "GuitarUpdate",
    "GuitarResponse",
    "GuitarPage",
    "PageMeta",
    "PriceSummaryResponse",
]
