"""Submission registry: lookup, validation and paginated views."""

from src.sm_common.enums import SubmissionStatus
from src.sm_common.errors import (
    AlreadySubmittedError,
    EmptyContentError,
    InvalidSubmissionStatusError,
    SubmissionNotFoundError,
)
from src.sm_market.domain.models import MarketState, Submission


def get_submission(state: MarketState, submission_id: int) -> Submission:
    if not (0 <= submission_id < len(state.submissions)):
        raise SubmissionNotFoundError(submission_id)
    return state.submissions[submission_id]


def require_status(submission: Submission, expected: SubmissionStatus) -> None:
    if submission.status is not expected:
        raise InvalidSubmissionStatusError(
            submission.id, submission.status.value, expected.value
        )


def validate_new_submission(state: MarketState, submitter: str, content: str) -> None:
    if submitter in state.submitted:
        raise AlreadySubmittedError(submitter)
    if not content:
        raise EmptyContentError()


def _paginate(ids: list[int], offset: int, limit: int) -> list[int]:
    if offset < 0 or limit <= 0 or offset >= len(ids):
        return []
    return ids[offset:offset + limit]


def top_submissions(state: MarketState, offset: int, limit: int) -> list[int]:
    """Whitelisted ids by total staked, descending. Ties keep submission order."""
    ranked = sorted(
        (s for s in state.submissions if s.status is SubmissionStatus.WHITELISTED),
        key=lambda s: s.total_staked,
        reverse=True,
    )
    return _paginate([s.id for s in ranked], offset, limit)


def pending_submissions(state: MarketState, offset: int, limit: int) -> list[int]:
    """Pending ids in submission order."""
    ids = [s.id for s in state.submissions if s.status is SubmissionStatus.PENDING]
    return _paginate(ids, offset, limit)
