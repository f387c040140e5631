"""Scaling of ingredient amounts to a target number of portions."""

import math
import re
from dataclasses import dataclass

from recipekit.normalize.quantity import (
    QUANTITY_PATTERN,
    Quantity,
    format_quantity,
    parse_quantity,
    split_leading_quantity,
)

# "2-3 cloves", "1 – 1 1/2 cups"
_RANGE_RE = re.compile(
    rf"^\s*(?P<low>{QUANTITY_PATTERN})(?P<dash>\s*[-–]\s*)"
    rf"(?P<high>{QUANTITY_PATTERN})(?P<sep>\s*)(?P<rest>.*)$",
    re.DOTALL,
)

CHILD_PORTION = 0.5


def _is_noop(multiplier: float, target_portions: float | None) -> bool:
    if target_portions is not None and target_portions == 0:
        return True
    return multiplier == 1 or multiplier <= 0 or not math.isfinite(multiplier)


def scale_amount(amount: str, multiplier: float, target_portions: float | None = None) -> str:
    """
    Scale the leading amount of ``amount`` by ``multiplier``.

    The input comes back byte-identical when the multiplier is 1, when there
    is nothing to scale to (multiplier or target portions of 0) and when the
    amount is not numeric ("to taste").

    Examples:
        >>> scale_amount("1/2 cup", 3)
        '1½ cup'
        >>> scale_amount("200 g", 0)
        '200 g'
    """
    if not amount or _is_noop(multiplier, target_portions):
        return amount

    if match := _RANGE_RE.match(amount):
        low = parse_quantity(match.group("low"))
        high = parse_quantity(match.group("high"))
        if low.value is not None and high.value is not None:
            scaled = (
                f"{format_quantity(low.value * multiplier)}{match.group('dash')}"
                f"{format_quantity(high.value * multiplier)}"
            )
            return f"{scaled}{match.group('sep')}{match.group('rest')}".strip()

    quantity, sep, rest = split_leading_quantity(amount)
    if quantity.value is None:
        return amount
    return f"{format_quantity(quantity.value * multiplier)}{sep}{rest}".strip()


def scale_quantity(
    quantity: Quantity, multiplier: float, target_portions: float | None = None
) -> Quantity:
    """Quantity counterpart of scale_amount."""
    if quantity.value is None or _is_noop(multiplier, target_portions):
        return quantity
    return quantity.scaled(multiplier)


def household_portions(adults: int, children: int = 0) -> float:
    """Portions eaten by a household; a child eats half an adult portion."""
    return max(adults, 0) + max(children, 0) * CHILD_PORTION


@dataclass(frozen=True)
class ServingScale:
    """
    Target vs. original portion counts for one recipe.

    "Portions" can be servings, discrete units (pancakes) or container
    multiples (cake tins); only the ratio matters.
    """

    target_portions: float
    original_portions: float

    @classmethod
    def for_household(cls, adults: int, children: int, original_portions: float) -> "ServingScale":
        return cls(
            target_portions=household_portions(adults, children),
            original_portions=original_portions,
        )

    @property
    def multiplier(self) -> float:
        if self.original_portions <= 0 or self.target_portions < 0:
            return 1.0
        return self.target_portions / self.original_portions

    def scale(self, amount: str) -> str:
        return scale_amount(amount, self.multiplier, self.target_portions)

    def scale_quantity(self, quantity: Quantity) -> Quantity:
        return scale_quantity(quantity, self.multiplier, self.target_portions)
