from __future__ import annotations

from dataclasses import dataclass

from splitwizard.models import SplitMode

TOLERANCE = 0.01

MATCH_MESSAGES = {
    SplitMode.PER_HEAD: "Contributions match total!",
    SplitMode.INDIVIDUAL_ITEMS: "Contributions match items total!",
}


@dataclass(slots=True, frozen=True)
class ContributionCheck:
    is_valid: bool
    difference: float
    message: str


def check_contributions(total: float, total_contributions: float, mode: SplitMode) -> ContributionCheck:
    difference = abs(total - total_contributions)
    if total > total_contributions:
        message = f"Missing {total - total_contributions:.2f} in contributions"
    elif total < total_contributions:
        message = f"Excess {total_contributions - total:.2f} in contributions"
    else:
        message = MATCH_MESSAGES[mode]
    return ContributionCheck(is_valid=difference < TOLERANCE, difference=difference, message=message)
