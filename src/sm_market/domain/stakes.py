"""Stake ledger: per-submission, per-staker share balances."""

from dataclasses import dataclass, field


@dataclass
class StakeBook:
    """Share balances plus an append-only, deduplicated staker list per submission.

    A staker is listed only once they hold shares: the winning staker count
    must equal the number of addresses able to claim.
    """

    _balances: dict[tuple[int, str], int] = field(default_factory=dict)
    _stakers: dict[int, list[str]] = field(default_factory=dict)
    _members: dict[int, set[str]] = field(default_factory=dict)

    def add_shares(self, submission_id: int, staker: str, shares: int) -> int:
        """Credit shares and return the staker's new balance."""
        key = (submission_id, staker)
        balance = self._balances.get(key, 0) + shares
        self._balances[key] = balance
        if balance > 0:
            members = self._members.setdefault(submission_id, set())
            if staker not in members:
                members.add(staker)
                self._stakers.setdefault(submission_id, []).append(staker)
        return balance

    def balance_of(self, submission_id: int, staker: str) -> int:
        return self._balances.get((submission_id, staker), 0)

    def stakers(self, submission_id: int) -> list[str]:
        return list(self._stakers.get(submission_id, []))

    def staker_count(self, submission_id: int) -> int:
        return len(self._stakers.get(submission_id, []))

    def total_of(self, submission_id: int) -> int:
        """Sum of current balances on a submission (for invariant checks)."""
        return sum(self.balance_of(submission_id, s) for s in self.stakers(submission_id))

    def clear(self, submission_id: int, staker: str) -> int:
        """Zero a balance (rescue withdrawal). Staker stays listed. Returns the prior balance."""
        key = (submission_id, staker)
        prior = self._balances.get(key, 0)
        if prior:
            self._balances[key] = 0
        return prior

    def positions(self) -> list[tuple[int, str, int]]:
        """(submission_id, staker, shares) for every listed staker, in listing order."""
        return [
            (submission_id, staker, self.balance_of(submission_id, staker))
            for submission_id, stakers in self._stakers.items()
            for staker in stakers
        ]

    @classmethod
    def from_positions(cls, positions: list[tuple[int, str, int]]) -> "StakeBook":
        """Rebuild a book from `positions()`. Cleared balances stay listed."""
        book = cls()
        for submission_id, staker, shares in positions:
            book._balances[(submission_id, staker)] = shares
            book._members.setdefault(submission_id, set()).add(staker)
            book._stakers.setdefault(submission_id, []).append(staker)
        return book
