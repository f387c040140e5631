"""Heuristic parser turning raw ingredient lines into ParsedIngredient records."""

import re
from collections.abc import Iterable

from recipekit.ingest.schemas import AlternativeIngredient, ParsedIngredient
from recipekit.logging_config import get_logger
from recipekit.normalize.quantity import (
    QUANTITY_PATTERN,
    Quantity,
    normalize_amount,
    parse_quantity,
    split_leading_quantity,
)
from recipekit.normalize.units import UnitTables

logger = get_logger(__name__)


# "**Filling**" or "**Filling:**"
BOLD_HEADER_RE = re.compile(r"^\*\*\s*(?P<label>.+?)\s*:?\s*\*\*\s*:?$")

# "For the base:", "For garnish", "Para la masa:", "Para el relleno"
SECTION_HEADER_RE = re.compile(
    r"^(?:for\s+(?:the\s+)?|para\s+(?:la|el|los|las)\s+)(?P<label>\S.*?)\s*:?\s*$",
    re.IGNORECASE,
)

_TRAILING_PAREN_RE = re.compile(r"\s*\((?P<content>[^()]*)\)\s*$")
_ALTERNATIVE_RE = re.compile(rf"\s+(?:or|o)\s+(?={QUANTITY_PATTERN})", re.IGNORECASE)
_NAME_PREFIX_RE = re.compile(r"^(?:of|de)\s+", re.IGNORECASE)


def _normalized(amount_text: str) -> Quantity:
    return parse_quantity(normalize_amount(amount_text))


def _matched_amount(match: re.Match[str]) -> Quantity | None:
    """Amount of a line pattern match, or None when it is not a number ("1/0")."""
    amount = _normalized(match.group("amount"))
    return amount if amount.value is not None else None


def _clean_name(name: str) -> str:
    return " ".join(name.split()).strip(" ,;")


class IngredientParser:
    """
    Parses ingredient lines such as "100 g flour (⅔ cup)".

    Unit spellings come from the injected UnitTables so alternate locales can
    be tested without touching module globals. Parsing never raises; the
    worst case is the whole line returned as the ingredient name.
    """

    def __init__(self, tables: UnitTables | None = None):
        self.tables = tables or UnitTables()
        units = "|".join(re.escape(token) for token in self.tables.unit_tokens)
        self._with_unit_re = re.compile(
            rf"^(?P<amount>{QUANTITY_PATTERN})\s*(?P<unit>{units})\.?\s+(?P<name>.+)$",
            re.IGNORECASE | re.DOTALL,
        )
        self._without_unit_re = re.compile(
            rf"^(?P<amount>{QUANTITY_PATTERN})\s+(?P<name>.+)$", re.DOTALL
        )
        self._unit_only_re = re.compile(rf"^(?P<unit>{units})\.?(?=\s|$)", re.IGNORECASE)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def parse(self, text: str) -> ParsedIngredient:
        """Parse one raw ingredient line."""
        raw = " ".join((text or "").split())
        if not raw:
            return ParsedIngredient(name="")

        header = self.parse_header(raw)
        if header is not None:
            return header

        main_text, alternative = self._split_alternative(raw)
        ingredient = self._parse_measured(main_text)
        if ingredient is None:
            logger.debug(f"Could not extract ingredient parts from {raw!r}")
            return ParsedIngredient(name=raw)

        if alternative is not None:
            return ParsedIngredient(
                name=ingredient.name,
                amount=ingredient.amount,
                unit=ingredient.unit,
                amount2=ingredient.amount2,
                unit2=ingredient.unit2,
                alternative=alternative,
            )
        return ingredient

    def parse_many(self, lines: Iterable[str]) -> list[ParsedIngredient]:
        """Parse several lines, dropping lines that yield nothing usable."""
        parsed = (self.parse(line) for line in lines)
        return [ingredient for ingredient in parsed if not ingredient.is_empty]

    def parse_header(self, text: str) -> ParsedIngredient | None:
        """Return a header entry if ``text`` is a section label."""
        if match := BOLD_HEADER_RE.match(text):
            return ParsedIngredient.header(match.group("label"))
        if SECTION_HEADER_RE.match(text):
            return ParsedIngredient.header(text.rstrip(":").strip())
        return None

    def parse_measure(self, text: str) -> tuple[Quantity, str] | None:
        """Parse "⅔ cup" style text into (amount, unit); None if it has no leading amount."""
        quantity, _, rest = split_leading_quantity(text)
        if quantity.is_empty:
            return None

        rest = rest.strip()
        if match := self._unit_only_re.match(rest):
            unit = match.group("unit")
        else:
            unit = rest
        return _normalized(quantity.display), unit

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _split_alternative(self, text: str) -> tuple[str, AlternativeIngredient | None]:
        match = _ALTERNATIVE_RE.search(text)
        if not match:
            return text, None

        left, right = text[: match.start()], text[match.end() :]
        # "2 or 3 eggs" is a range, not a substitute
        _, _, left_name = split_leading_quantity(left)
        if not left_name.strip():
            return text, None

        parsed = self._parse_measured(right)
        if parsed is None or parsed.amount.is_empty:
            return text, None

        alternative = AlternativeIngredient(
            name=parsed.name,
            amount=parsed.amount,
            unit=parsed.unit,
            amount2=parsed.amount2,
            unit2=parsed.unit2,
        )
        return left, alternative

    def _parse_measured(self, text: str) -> ParsedIngredient | None:
        main_text = text.strip()
        amount2: Quantity | None = None
        unit2: str | None = None

        paren = _TRAILING_PAREN_RE.search(main_text)
        if paren and paren.start() > 0:
            secondary = self.parse_measure(paren.group("content"))
            if secondary is not None:
                amount2, unit2 = secondary
                main_text = main_text[: paren.start()].strip()

        with_unit = self._with_unit_re.match(main_text)
        without_unit = self._without_unit_re.match(main_text)
        if with_unit and (amount := _matched_amount(with_unit)) is not None:
            name = _clean_name(_NAME_PREFIX_RE.sub("", with_unit.group("name").strip()))
            unit = with_unit.group("unit")
        elif without_unit and (amount := _matched_amount(without_unit)) is not None:
            name = _clean_name(without_unit.group("name"))
            unit = ""
        else:
            name = _clean_name(main_text)
            amount = Quantity.empty()
            unit = ""

        if not name:
            return None

        return ParsedIngredient(
            name=name,
            amount=amount,
            unit=unit,
            amount2=amount2,
            unit2=unit2,
        )


_default_parser = IngredientParser()


def parse_ingredient_line(text: str) -> ParsedIngredient:
    """Parse a raw ingredient line with the default unit tables."""
    return _default_parser.parse(text)


def parse_ingredient_lines(lines: Iterable[str]) -> list[ParsedIngredient]:
    return _default_parser.parse_many(lines)
