# src/sm_admin/application/service.py
"""Admin application service: authority actions and invariant checks."""
import logging
from typing import Any

from src.sm_market.application.schemas import DistributionOut
from src.sm_market.domain.access import require_admin
from src.sm_market.domain.invariants import owed_by_custody, verify_market_invariants
from src.sm_market.engine.engine import StakingMarketEngine

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, engine: StakingMarketEngine) -> None:
        self._engine = engine

    async def whitelist(self, caller: str, submission_ids: list[int]) -> dict[str, Any]:
        await self._engine.whitelist_batch(caller, submission_ids)
        return {"whitelisted": list(submission_ids)}

    async def ban(self, caller: str, submission_id: int) -> dict[str, Any]:
        slashed = await self._engine.ban_and_slash(caller, submission_id)
        return {"submission_id": submission_id, "slashed": slashed}

    async def pick_winner(self, caller: str, submission_id: int) -> dict[str, Any]:
        d = await self._engine.pick_winner(caller, submission_id)
        return DistributionOut(
            submission_id=submission_id,
            pool=d.pool,
            burn=d.burn,
            bonus=d.bonus,
            staker_pool=d.staker_pool,
        ).model_dump()

    async def transfer_admin(self, caller: str, new_admin: str) -> dict[str, Any]:
        await self._engine.transfer_admin(caller, new_admin)
        return {"admin": self._engine.admin}

    async def verify_all_invariants(self, caller: str) -> dict[str, object]:
        """Run market invariants (INV-1..4) and the custody solvency check (INV-C). Admin only."""
        require_admin(self._engine.admin, caller)
        state = self._engine.snapshot()
        ledger_balance = await self._engine.custody_balance()
        violations = verify_market_invariants(state)
        owed = owed_by_custody(state)
        if ledger_balance < owed:
            msg = f"INV-C violated: custody balance={ledger_balance} < owed={owed}"
            logger.error(msg)
            violations.append(msg)
        return {"ok": len(violations) == 0, "violations": violations, "owed": owed}
