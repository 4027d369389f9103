# src/sm_admin/api/router.py
"""Admin REST API. The engine rejects callers that are not the current admin."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.sm_admin.application.service import AdminService
from src.sm_common.response import ApiResponse, success_response
from src.sm_gateway.auth.dependencies import get_current_caller
from src.sm_gateway.middleware.request_log import request_id_of
from src.sm_market.application.schemas import (
    PickWinnerRequest,
    TransferAdminRequest,
    WhitelistRequest,
)
from src.sm_market.application.service import get_market_engine
from src.sm_market.engine.engine import StakingMarketEngine

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(
    engine: Annotated[StakingMarketEngine, Depends(get_market_engine)],
) -> AdminService:
    return AdminService(engine)


ServiceDep = Annotated[AdminService, Depends(get_admin_service)]
CallerDep = Annotated[str, Depends(get_current_caller)]


@router.post("/submissions/whitelist")
async def whitelist_submissions(
    body: WhitelistRequest, caller: CallerDep, service: ServiceDep, request: Request
) -> ApiResponse:
    result = await service.whitelist(caller, body.submission_ids)
    return success_response(result, request_id_of(request))


@router.post("/submissions/{submission_id}/ban")
async def ban_submission(
    submission_id: int, caller: CallerDep, service: ServiceDep, request: Request
) -> ApiResponse:
    result = await service.ban(caller, submission_id)
    return success_response(result, request_id_of(request))


@router.post("/winner")
async def pick_winner(
    body: PickWinnerRequest, caller: CallerDep, service: ServiceDep, request: Request
) -> ApiResponse:
    result = await service.pick_winner(caller, body.submission_id)
    return success_response(result, request_id_of(request))


@router.post("/transfer")
async def transfer_admin(
    body: TransferAdminRequest, caller: CallerDep, service: ServiceDep, request: Request
) -> ApiResponse:
    result = await service.transfer_admin(caller, body.new_admin)
    return success_response(result, request_id_of(request))


@router.get("/invariants")
async def verify_invariants(
    caller: CallerDep, service: ServiceDep, request: Request
) -> ApiResponse:
    result = await service.verify_all_invariants(caller)
    return success_response(result, request_id_of(request))
