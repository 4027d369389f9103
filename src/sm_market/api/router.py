"""sm_market REST API: public reads plus authenticated participant actions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.sm_common.response import ApiResponse, success_response
from src.sm_gateway.auth.dependencies import get_current_caller
from src.sm_gateway.middleware.request_log import request_id_of
from src.sm_market.application.schemas import (
    ClaimStatusOut,
    MarketOverviewOut,
    PayoutOut,
    ShareBalanceOut,
    StakeOut,
    SubmissionOut,
    SubmissionPageOut,
    SubmitOut,
    SubmitRequest,
)
from src.sm_market.application.service import get_market_engine
from src.sm_market.engine.engine import StakingMarketEngine

router = APIRouter(prefix="/market", tags=["market"])

EngineDep = Annotated[StakingMarketEngine, Depends(get_market_engine)]
CallerDep = Annotated[str, Depends(get_current_caller)]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("")
async def get_overview(engine: EngineDep, request: Request) -> ApiResponse:
    data = MarketOverviewOut.from_engine(engine)
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/submissions/top")
async def list_top_submissions(
    engine: EngineDep,
    request: Request,
    offset: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    ids = engine.get_top_submissions(offset, limit)
    data = SubmissionPageOut(submission_ids=ids, offset=offset, limit=limit)
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/submissions/pending")
async def list_pending_submissions(
    engine: EngineDep,
    request: Request,
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> ApiResponse:
    ids = engine.get_pending_submissions(offset, limit)
    data = SubmissionPageOut(submission_ids=ids, offset=offset, limit=limit)
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/submissions/{submission_id}")
async def get_submission(
    submission_id: int, engine: EngineDep, request: Request
) -> ApiResponse:
    data = SubmissionOut.from_detail(engine.get_submission(submission_id))
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/submissions/{submission_id}/shares/{address}")
async def get_share_balance(
    submission_id: int, address: str, engine: EngineDep, request: Request
) -> ApiResponse:
    shares = engine.get_share_balance(submission_id, address)
    data = ShareBalanceOut(submission_id=submission_id, address=address, shares=shares)
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/claims/{address}")
async def get_claim_status(address: str, engine: EngineDep, request: Request) -> ApiResponse:
    amount = engine.get_claim_amount(address)
    data = ClaimStatusOut(
        address=address,
        can_claim=engine.can_claim(address),
        claim_amount=amount,
        claim_amount_display=PayoutOut.from_amount(amount).amount_display,
    )
    return success_response(data.model_dump(), request_id_of(request))


# ---------------------------------------------------------------------------
# Participant actions
# ---------------------------------------------------------------------------


@router.post("/submissions")
async def submit(
    body: SubmitRequest, caller: CallerDep, engine: EngineDep, request: Request
) -> ApiResponse:
    submission_id = await engine.submit(caller, body.content)
    return success_response(
        SubmitOut(submission_id=submission_id).model_dump(), request_id_of(request)
    )


@router.post("/submissions/{submission_id}/stake")
async def stake(
    submission_id: int, caller: CallerDep, engine: EngineDep, request: Request
) -> ApiResponse:
    shares = await engine.stake(caller, submission_id)
    return success_response(
        StakeOut(submission_id=submission_id, shares=shares).model_dump(),
        request_id_of(request),
    )


@router.post("/claim")
async def claim(caller: CallerDep, engine: EngineDep, request: Request) -> ApiResponse:
    payout = await engine.claim(caller)
    return success_response(PayoutOut.from_amount(payout).model_dump(), request_id_of(request))


@router.post("/rescue")
async def trigger_rescue(caller: CallerDep, engine: EngineDep, request: Request) -> ApiResponse:
    await engine.trigger_rescue(caller)
    return success_response({"total_pool": engine.total_pool}, request_id_of(request))


@router.post("/submissions/{submission_id}/rescue-withdraw")
async def withdraw_rescued(
    submission_id: int, caller: CallerDep, engine: EngineDep, request: Request
) -> ApiResponse:
    refund = await engine.withdraw_rescued(caller, submission_id)
    return success_response(PayoutOut.from_amount(refund).model_dump(), request_id_of(request))
