"""Pool split at winner selection."""

from src.sm_common.units import bps_of
from src.sm_market.domain.models import Distribution


def compute_distribution(pool: int, burn_bps: int, bonus_bps: int) -> Distribution:
    """Split pool into burn / bonus / staker pool.

    burn and bonus are floored; the staker pool takes the remainder so the
    three parts always sum to pool exactly.
    """
    burn = bps_of(pool, burn_bps)
    bonus = bps_of(pool, bonus_bps)
    return Distribution(pool=pool, burn=burn, bonus=bonus, staker_pool=pool - burn - bonus)
