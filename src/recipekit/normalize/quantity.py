"""Quantity model: parsing and formatting of cooking amounts."""

import math
import re
from dataclasses import dataclass

from recipekit.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Fraction Tables
# =============================================================================

# Unicode vulgar fractions -> (numerator, denominator)
VULGAR_FRACTIONS: dict[str, tuple[int, int]] = {
    "¼": (1, 4),
    "½": (1, 2),
    "¾": (3, 4),
    "⅓": (1, 3),
    "⅔": (2, 3),
    "⅛": (1, 8),
    "⅜": (3, 8),
    "⅝": (5, 8),
    "⅞": (7, 8),
    "⅕": (1, 5),
    "⅖": (2, 5),
    "⅗": (3, 5),
    "⅘": (4, 5),
    "⅙": (1, 6),
    "⅚": (5, 6),
}

GLYPH_CHARS = "".join(VULGAR_FRACTIONS)

# Output glyphs, checked in this order: quarters, halves, thirds, eighths, sixths
FORMAT_GLYPHS: tuple[tuple[float, str], ...] = (
    (0.25, "¼"),
    (0.75, "¾"),
    (0.5, "½"),
    (1 / 3, "⅓"),
    (2 / 3, "⅔"),
    (0.125, "⅛"),
    (1 / 6, "⅙"),
)

GLYPH_TOLERANCE = 0.01

# A leading amount: mixed number, fraction, integer+glyph, glyph, decimal
QUANTITY_PATTERN = (
    r"(?:\d+\s+\d+\s*/\s*\d+"
    r"|\d+\s*/\s*\d+"
    rf"|\d+\s*[{GLYPH_CHARS}]"
    rf"|[{GLYPH_CHARS}]"
    r"|\d+(?:[.,]\d+)?"
    r"|[.,]\d+)"
)

_LEADING_QUANTITY_RE = re.compile(
    rf"^\s*(?P<amount>{QUANTITY_PATTERN})(?P<sep>\s*)(?P<rest>.*)$", re.DOTALL
)
_DECIMAL_RE = re.compile(r"^(?:\d+(?:[.,]\d+)?|[.,]\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)\s*/\s*(\d+)$")
_MIXED_RE = re.compile(r"^(\d+)\s+(\d+)\s*/\s*(\d+)$")
_GLYPH_RE = re.compile(rf"^(\d+)?\s*([{GLYPH_CHARS}])$")
_GLYPH_WITH_WHOLE_RE = re.compile(rf"(\d)\s*([{GLYPH_CHARS}])")


@dataclass(frozen=True)
class Quantity:
    """A cooking amount: resolved magnitude plus its human-readable form."""

    value: float | None
    display: str

    @classmethod
    def empty(cls) -> "Quantity":
        return cls(value=None, display="")

    @classmethod
    def from_value(cls, value: float) -> "Quantity":
        return cls(value=value, display=format_quantity(value))

    @property
    def is_numeric(self) -> bool:
        return self.value is not None

    @property
    def is_empty(self) -> bool:
        return not self.display

    def scaled(self, multiplier: float) -> "Quantity":
        """Return a new Quantity multiplied by ``multiplier`` (no-op if not numeric)."""
        if self.value is None:
            return self
        return Quantity.from_value(self.value * multiplier)

    def __str__(self) -> str:
        return self.display


# =============================================================================
# Parsing
# =============================================================================


def _fraction_value(numerator: str, denominator: str) -> float | None:
    denom = int(denominator)
    if denom == 0:
        return None
    return int(numerator) / denom


def _glyph_value(glyph: str) -> float:
    num, denom = VULGAR_FRACTIONS[glyph]
    return num / denom


def parse_quantity(text: str) -> Quantity:
    """
    Parse a cooking amount into a Quantity.

    Accepts integers ("2"), decimals ("1.5", "1,5"), fractions ("3/4"),
    mixed numbers ("1 1/2"), vulgar fraction glyphs ("¾") and an integer
    followed by a glyph ("1½"). Anything else yields ``value=None`` with the
    trimmed original text as ``display``; this function never raises.
    """
    display = (text or "").strip()
    if not display:
        return Quantity.empty()

    value: float | None = None
    compact = " ".join(display.split())

    if _DECIMAL_RE.match(compact):
        value = float(compact.replace(",", "."))
    elif match := _FRACTION_RE.match(compact):
        value = _fraction_value(match.group(1), match.group(2))
    elif match := _MIXED_RE.match(compact):
        fraction = _fraction_value(match.group(2), match.group(3))
        if fraction is not None:
            value = int(match.group(1)) + fraction
    elif match := _GLYPH_RE.match(compact):
        whole = int(match.group(1)) if match.group(1) else 0
        value = whole + _glyph_value(match.group(2))

    if value is None:
        logger.debug(f"Unparseable quantity: {display!r}")

    return Quantity(value=value, display=display)


def split_leading_quantity(text: str) -> tuple[Quantity, str, str]:
    """
    Split a leading amount off a string such as "1/2 cup" or "200g".

    Returns:
        Tuple of (quantity, separator, rest). When the text does not start
        with an amount, the quantity is empty and ``rest`` is the input.
    """
    match = _LEADING_QUANTITY_RE.match(text or "")
    if not match:
        return Quantity.empty(), "", text or ""

    quantity = parse_quantity(match.group("amount"))
    if quantity.value is None:
        return Quantity.empty(), "", text
    return quantity, match.group("sep"), match.group("rest")


def normalize_amount(amount: str) -> str:
    """
    Rewrite vulgar fraction glyphs as ASCII fractions.

    Examples:
        "⅔" -> "2/3"
        "1½" -> "1 1/2"
    """
    if not amount:
        return ""

    def _mixed(match: re.Match[str]) -> str:
        num, denom = VULGAR_FRACTIONS[match.group(2)]
        return f"{match.group(1)} {num}/{denom}"

    text = _GLYPH_WITH_WHOLE_RE.sub(_mixed, amount)
    for glyph, (num, denom) in VULGAR_FRACTIONS.items():
        text = text.replace(glyph, f"{num}/{denom}")
    return " ".join(text.split())


# =============================================================================
# Formatting
# =============================================================================


def format_quantity(value: float | None) -> str:
    """
    Format a magnitude for display.

    Whole numbers render without decimals, values whose fractional part lies
    within 0.01 of a common fraction render as a glyph ("1½"), everything
    else renders with at most two decimals and no trailing zeros.
    """
    if value is None or not math.isfinite(value):
        return ""
    if value < 0:
        return "-" + format_quantity(-value)
    if float(value).is_integer():
        return str(int(value))

    whole = math.floor(value)
    fraction = value - whole
    for target, glyph in FORMAT_GLYPHS:
        if abs(fraction - target) <= GLYPH_TOLERANCE:
            return f"{whole}{glyph}" if whole >= 1 else glyph

    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return text or "0"
