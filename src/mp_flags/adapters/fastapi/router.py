"""FastAPI adapter – /api/featureflags routes, one per service operation."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from mp_flags.adapters.fastapi.schemas import (
    AddOverrideRequest,
    CreateFlagRequest,
    EvaluateRequest,
    EvaluateResponse,
    FlagResponse,
    GroupOverrideResponse,
    UpdateFlagRequest,
    UpdateOverrideRequest,
    UserOverrideResponse,
)
from mp_flags.application.feature_flags import EvaluationContext, FlagManagementService
from mp_flags.kernel.types import from_nullable


def get_flag_service(request: Request) -> FlagManagementService:
    return request.app.state.flag_service


ServiceDep = Annotated[FlagManagementService, Depends(get_flag_service)]

router = APIRouter(prefix="/api/featureflags", tags=["featureflags"])


@router.get("", response_model=list[FlagResponse])
async def list_flags(service: ServiceDep) -> list[FlagResponse]:
    return [FlagResponse.from_entity(flag) for flag in await service.list_flags()]


@router.get("/{key}", response_model=FlagResponse)
async def get_flag(key: str, service: ServiceDep) -> FlagResponse:
    return FlagResponse.from_entity(await service.get_flag(key))


@router.post("", response_model=FlagResponse, status_code=status.HTTP_201_CREATED)
async def create_flag(body: CreateFlagRequest, service: ServiceDep) -> FlagResponse:
    flag = await service.create_flag(body.key, body.is_enabled, body.description)
    return FlagResponse.from_entity(flag)


@router.put("/{key}", response_model=FlagResponse)
async def update_flag(key: str, body: UpdateFlagRequest, service: ServiceDep) -> FlagResponse:
    flag = await service.update_flag(key, body.is_enabled, from_nullable(body.description))
    return FlagResponse.from_entity(flag)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_flag(key: str, service: ServiceDep) -> Response:
    await service.delete_flag(key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{key}/evaluate", response_model=EvaluateResponse)
async def evaluate_flag(key: str, service: ServiceDep, body: EvaluateRequest | None = None) -> EvaluateResponse:
    context = None
    if body is not None:
        context = EvaluationContext(user_id=body.user_id, group_ids=tuple(body.group_ids))
    return EvaluateResponse(key=key, is_enabled=await service.evaluate(key, context))


@router.post("/{key}/users", response_model=UserOverrideResponse, status_code=status.HTTP_201_CREATED)
async def add_user_override(key: str, body: AddOverrideRequest, service: ServiceDep) -> UserOverrideResponse:
    return UserOverrideResponse.from_entity(await service.add_user_override(key, body.id, body.is_enabled))


@router.put("/{key}/users/{user_id}", response_model=UserOverrideResponse)
async def update_user_override(
    key: str, user_id: str, body: UpdateOverrideRequest, service: ServiceDep
) -> UserOverrideResponse:
    return UserOverrideResponse.from_entity(await service.update_user_override(key, user_id, body.is_enabled))


@router.delete("/{key}/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def remove_user_override(key: str, user_id: str, service: ServiceDep) -> Response:
    await service.remove_user_override(key, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{key}/groups", response_model=GroupOverrideResponse, status_code=status.HTTP_201_CREATED)
async def add_group_override(key: str, body: AddOverrideRequest, service: ServiceDep) -> GroupOverrideResponse:
    return GroupOverrideResponse.from_entity(await service.add_group_override(key, body.id, body.is_enabled))


@router.put("/{key}/groups/{group_id}", response_model=GroupOverrideResponse)
async def update_group_override(
    key: str, group_id: str, body: UpdateOverrideRequest, service: ServiceDep
) -> GroupOverrideResponse:
    return GroupOverrideResponse.from_entity(await service.update_group_override(key, group_id, body.is_enabled))


@router.delete("/{key}/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def remove_group_override(key: str, group_id: str, service: ServiceDep) -> Response:
    await service.remove_group_override(key, group_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["get_flag_service", "router"]
