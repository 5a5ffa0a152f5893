"""
CityGuide Backend — Authentication Routes
===========================================

What:  POST /api/auth/register, POST /api/auth/login, GET /api/auth/me.
How:   Thin handlers over AuthService; the token and public profile are
       returned inside `data`.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import get_db_session
from cityguide.dependencies import get_current_user
from cityguide.models.user import User
from cityguide.schemas.auth import AuthPayload, LoginRequest, RegisterRequest, UserPublic
from cityguide.schemas.common import ApiResponse, ErrorResponse
from cityguide.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create an account and receive a token",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthPayload]:
    user, token = await auth_service.register(db, body.name, body.email, body.password)
    return ApiResponse(
        message="Registration successful",
        data=AuthPayload(token=token, user=UserPublic.model_validate(user)),
    )


@router.post(
    "/login",
    response_model=ApiResponse[AuthPayload],
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Exchange email and password for a token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[AuthPayload]:
    user, token = await auth_service.login(db, body.email, body.password)
    return ApiResponse(
        message="Login successful",
        data=AuthPayload(token=token, user=UserPublic.model_validate(user)),
    )


@router.get(
    "/me",
    response_model=ApiResponse[UserPublic],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="Current user's profile",
)
async def me(user: User = Depends(get_current_user)) -> ApiResponse[UserPublic]:
    return ApiResponse(data=UserPublic.model_validate(user))
