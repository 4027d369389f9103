"""Emergency recovery math.

Submission totals are never reduced by rescue withdrawals, so every staker on
a submission is refunded against the same denominator. Floor division may
leave dust in custody or refund zero for tiny positions.
"""


def rescue_available_at(deadline: int, rescue_delay: int) -> int:
    return deadline + rescue_delay


def rescue_refund(submission_total_staked: int, shares: int, submission_total_shares: int) -> int:
    if submission_total_shares == 0:
        return 0
    return submission_total_staked * shares // submission_total_shares
