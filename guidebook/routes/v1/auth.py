# guidebook/routes/v1/auth.py
"""
Authentication routes - API v1

Endpoints:
    POST /register - Create an account and receive a token
    POST /login - Exchange credentials for a token
"""

import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_auth_service
from ...schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from ...services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    user, token = auth_service.register_user(payload.name, payload.email, payload.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest, auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    user, token = auth_service.authenticate_user(payload.email, payload.password)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))
