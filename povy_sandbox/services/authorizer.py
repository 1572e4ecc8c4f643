"""
Payment authorizer — the approve/decline rule.

A pure function of the stored balance and the requested amount. It never
touches a store; the coordinator feeds it the balance it just read and acts
on the decision.
"""

import enum
from dataclasses import dataclass


class Outcome(str, enum.Enum):
    APPROVED = "approved"
    DECLINED = "declined"


@dataclass(frozen=True, slots=True)
class Decision:
    outcome: Outcome
    new_balance_cents: int

    @property
    def approved(self) -> bool:
        return self.outcome is Outcome.APPROVED


def decide(current_balance_cents: int, requested_cents: int) -> Decision:
    """
    Approve a charge if the balance covers it, decline otherwise.

    The caller must have validated requested_cents > 0. Charging exactly
    the full balance is approved and leaves zero; a declined charge leaves
    the balance unchanged.
    """
    if requested_cents > current_balance_cents:
        return Decision(Outcome.DECLINED, current_balance_cents)
    return Decision(Outcome.APPROVED, current_balance_cents - requested_cents)
