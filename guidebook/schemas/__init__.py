from .auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from .booking import BookingCancel, BookingCreate, BookingResponse, GuideSummary
from .guide import GuideListResponse, GuideResponse, Pagination

__all__ = [
    "AuthResponse",
    "BookingCancel",
    "BookingCreate",
    "BookingResponse",
    "GuideListResponse",
    "GuideResponse",
    "GuideSummary",
    "LoginRequest",
    "Pagination",
    "RegisterRequest",
    "UserResponse",
]
