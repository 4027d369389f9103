"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Authorization / identity
  2xxx: Value transfer (token ledger)
  3xxx: Round lifecycle
  4xxx: Submission
  5xxx: Stake / Claim / Rescue
  9xxx: System

Every error is a synchronous rejection: the engine restores its state before
the exception leaves the operation.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Authorization / identity ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class NotAdminError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(1101, f"Caller {caller} is not the market admin", 403)


class InvalidAdminError(AppError):
    def __init__(self) -> None:
        super().__init__(1102, "New admin address must not be empty", 422)


# --- 2xxx: Value transfer ---

class InsufficientBalanceError(AppError):
    def __init__(self, account: str, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance for {account}: required {required}, available {available}",
            422,
        )


class InsufficientAllowanceError(AppError):
    def __init__(self, account: str, required: int, available: int) -> None:
        super().__init__(
            2002,
            f"Insufficient allowance from {account}: required {required}, approved {available}",
            422,
        )


# --- 3xxx: Round lifecycle ---

class RoundClosedError(AppError):
    def __init__(self) -> None:
        super().__init__(3001, "Round has closed", 422)


class RoundNotClosedError(AppError):
    def __init__(self) -> None:
        super().__init__(3002, "Round is still open", 422)


class WinnerAlreadyPickedError(AppError):
    def __init__(self) -> None:
        super().__init__(3003, "Winner already picked", 409)


class WinnerNotPickedError(AppError):
    def __init__(self) -> None:
        super().__init__(3004, "Winner not picked yet", 422)


class RescueNotAvailableError(AppError):
    def __init__(self, available_at: int) -> None:
        super().__init__(3005, f"Rescue not available until {available_at}", 422)


class RescueAlreadyTriggeredError(AppError):
    def __init__(self) -> None:
        super().__init__(3006, "Rescue already triggered", 409)


class RescueNotTriggeredError(AppError):
    def __init__(self) -> None:
        super().__init__(3007, "Rescue not triggered", 422)


class MarketSettledError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3008, f"Market already settled: {detail}", 409)


# --- 4xxx: Submission ---

class SubmissionNotFoundError(AppError):
    def __init__(self, submission_id: int) -> None:
        super().__init__(4001, f"Submission not found: {submission_id}", 404)


class AlreadySubmittedError(AppError):
    def __init__(self, submitter: str) -> None:
        super().__init__(4002, f"Address {submitter} already submitted", 409)


class EmptyContentError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "Submission content must not be empty", 422)


class InvalidSubmissionStatusError(AppError):
    def __init__(self, submission_id: int, status: str, expected: str) -> None:
        super().__init__(
            4004,
            f"Submission {submission_id} is {status}, expected {expected}",
            422,
        )


# --- 5xxx: Stake / Claim / Rescue ---

class NoSharesError(AppError):
    def __init__(self, submission_id: int) -> None:
        super().__init__(5001, f"No shares on submission {submission_id}", 422)


class AlreadyClaimedError(AppError):
    def __init__(self, staker: str) -> None:
        super().__init__(5002, f"Address {staker} already claimed", 409)


class ZeroPayoutError(AppError):
    def __init__(self) -> None:
        super().__init__(5003, "Computed payout is zero", 422)


class SelfStakeError(AppError):
    def __init__(self, submission_id: int) -> None:
        super().__init__(5004, f"Submitter cannot stake on own submission {submission_id}", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ReentrantCallError(AppError):
    def __init__(self) -> None:
        super().__init__(9003, "Re-entrant call rejected", 409)
