"""Validation guards for ledger inputs and state."""
import math
import re

from greenmove.domain.errors import LedgerError, ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Float sums may drift by rounding when activities are re-added in another order.
CARBON_TOLERANCE = 1e-6


def validate_activity_input(category: str, activity_type: str, quantity: float, unit: str) -> None:
    """Raises if an activity submission is malformed. Unknown types are allowed."""
    if not isinstance(category, str) or not category.strip():
        raise ValidationError("Category is required")
    if not isinstance(activity_type, str) or not activity_type.strip():
        raise ValidationError("Activity type is required")
    if not isinstance(unit, str) or not unit.strip():
        raise ValidationError("Unit is required")
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise ValidationError(f"Quantity must be a number, got {quantity!r}")
    if not math.isfinite(quantity) or quantity <= 0:
        raise ValidationError(f"Quantity must be a positive number, got {quantity}")


def validate_email(email: str) -> None:
    if not email or not _EMAIL_RE.match(email.strip()):
        raise ValidationError(f"Invalid email address: {email!r}")


def validate_ledger_consistency(user, activities: list, rewards: list) -> None:
    """Raises LedgerError if the user's totals disagree with the records behind them."""
    expected_points = (
        sum(a.points_earned for a in activities)
        + sum(r.points_awarded for r in rewards)
    )
    if user.total_points != expected_points:
        raise LedgerError(
            f"User {user.id} has {user.total_points} points, records sum to {expected_points}"
        )

    expected_carbon = sum(a.carbon_saved for a in activities)
    if abs(user.total_carbon_saved - expected_carbon) > CARBON_TOLERANCE:
        raise LedgerError(
            f"User {user.id} has {user.total_carbon_saved} kg saved, "
            f"records sum to {expected_carbon}"
        )

    titles = [r.title for r in rewards]
    if len(titles) != len(set(titles)):
        raise LedgerError(f"User {user.id} holds duplicate reward titles")
