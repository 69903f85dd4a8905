from __future__ import annotations

from fastapi import APIRouter, Depends, status

from identity_service.api.deps import get_settings, get_user_service
from identity_service.core.config import Settings
from identity_service.dto import UserDTO
from identity_service.schemas.common import ErrorResponse
from identity_service.schemas.user import UserCreateRequest, ValidationErrorResponse
from identity_service.services.users import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get(
    "",
    response_model=list[UserDTO],
    responses={500: {"model": ErrorResponse}},
    summary="List users",
    description="Returns every user ordered by ascending id.",
)
async def list_users(
    svc: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    return await svc.list_users(timeout=settings.timeout_handler_seconds)


async def _create(payload: UserCreateRequest, svc: UserService, settings: Settings) -> UserDTO:
    return await svc.create_user(
        payload.name,
        payload.email,
        timeout=settings.timeout_handler_seconds,
    )


@router.post(
    "",
    response_model=UserDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ValidationErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Create a user",
    description="Validates name and email, rejects duplicate emails (case-insensitive).",
)
async def create_user(
    payload: UserCreateRequest,
    svc: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    return await _create(payload, svc, settings)


# Path kept for clients of the earlier /api/users/create endpoint.
@router.post(
    "/create",
    response_model=UserDTO,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
async def create_user_legacy(
    payload: UserCreateRequest,
    svc: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_settings),
):
    return await _create(payload, svc, settings)
