"""
Variant-block ingestion.

Some recipes list every ingredient twice, once per container size:

    MOLDE 20 cm:
    200 g harina
    MOLDE 26 cm:
    350 g harina

The two blocks are merged into one list where block 1 fills ``amount``/``unit``
and block 2 fills ``amount2``/``unit2``.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from recipekit.ingest.parser import IngredientParser, parse_ingredient_line
from recipekit.ingest.schemas import ParsedIngredient, ParsedIngredientList, RawIngredientItem
from recipekit.logging_config import get_logger
from recipekit.normalize.quantity import Quantity
from recipekit.normalize.text import name_key

logger = get_logger(__name__)

# Container keywords that introduce a variant block
VARIANT_LABEL_RE = re.compile(
    r"^(?:MOLDES?|MOLDS?|PAN|BANDEJA|FUENTE|RECIPIENTE|TRAY)\s+(?P<size>.+?)\s*:?$",
    re.IGNORECASE,
)


@dataclass
class VariantBlock:
    """Ingredients listed under one container label."""

    label: str
    start: int  # index of the label item in the source list
    items: list[RawIngredientItem] = field(default_factory=list)


def _clean_label(text: str) -> str:
    return text.strip().strip("*").strip().rstrip(":").strip()


def variant_label(text: str) -> str | None:
    """Return the cleaned label if ``text`` names a container variant."""
    label = _clean_label(text)
    if VARIANT_LABEL_RE.match(label):
        return label
    return None


def detect_variant_blocks(items: Sequence[RawIngredientItem]) -> list[VariantBlock]:
    """
    Split an ingredient list into variant blocks.

    Only subheaders can open a block, and blocks are reported only when
    exactly two are found; any other count means the list is not a
    two-variant recipe and an empty list is returned.
    """
    starts = [
        (index, label)
        for index, item in enumerate(items)
        if item.is_subheader and (label := variant_label(item.text)) is not None
    ]
    if len(starts) != 2:
        if len(starts) > 2:
            logger.debug(f"Found {len(starts)} container labels, not treating as variants")
        return []

    (first, first_label), (second, second_label) = starts
    return [
        VariantBlock(label=first_label, start=first, items=list(items[first + 1 : second])),
        VariantBlock(label=second_label, start=second, items=list(items[second + 1 :])),
    ]


def merge_variant_blocks(
    first: Sequence[ParsedIngredient],
    second: Sequence[ParsedIngredient],
) -> list[ParsedIngredient]:
    """
    Merge two parsed variant blocks into one ingredient list.

    Ingredients pair up one-to-one by name key. Block 1 order is kept and
    paired entries receive block 2's amount as ``amount2``. Whatever remains
    of block 2 follows: headers always (they are local to their block) and
    unmatched ingredients with only their ``amount2``/``unit2`` slots filled.
    """
    pool: dict[str, list[int]] = {}
    for index, ingredient in enumerate(second):
        if not ingredient.is_header:
            pool.setdefault(name_key(ingredient.name), []).append(index)

    used: set[int] = set()
    merged: list[ParsedIngredient] = []

    for ingredient in first:
        candidates = None if ingredient.is_header else pool.get(name_key(ingredient.name))
        if not candidates:
            merged.append(ingredient)
            continue
        index = candidates.pop(0)
        used.add(index)
        partner = second[index]
        merged.append(ingredient.with_variant(partner.amount, partner.unit))

    for index, ingredient in enumerate(second):
        if index in used:
            continue
        if ingredient.is_header:
            merged.append(ingredient)
        else:
            merged.append(
                ParsedIngredient(
                    name=ingredient.name,
                    amount=Quantity.empty(),
                    unit="",
                    amount2=ingredient.amount,
                    unit2=ingredient.unit,
                    alternative=ingredient.alternative,
                )
            )

    return merged


def _parse_items(
    items: Sequence[RawIngredientItem],
    parser: IngredientParser | None,
) -> list[ParsedIngredient]:
    parsed: list[ParsedIngredient] = []
    for item in items:
        if item.is_subheader:
            label = _clean_label(item.text)
            if label:
                parsed.append(ParsedIngredient.header(label))
            continue
        ingredient = parser.parse(item.text) if parser else parse_ingredient_line(item.text)
        if not ingredient.is_empty:
            parsed.append(ingredient)
    return parsed


def parse_ingredient_items(
    items: Sequence[RawIngredientItem],
    parser: IngredientParser | None = None,
) -> ParsedIngredientList:
    """
    Parse extracted ingredient items, merging variant blocks when present.

    Items before the first container label are shared by both variants and
    are kept at the top of the list unchanged.
    """
    blocks = detect_variant_blocks(items)
    if not blocks:
        return ParsedIngredientList(ingredients=_parse_items(items, parser))

    first, second = blocks
    shared = _parse_items(items[: first.start], parser)
    merged = merge_variant_blocks(
        _parse_items(first.items, parser),
        _parse_items(second.items, parser),
    )
    logger.debug(f"Merged variant blocks {first.label!r} and {second.label!r}")

    return ParsedIngredientList(
        ingredients=shared + merged,
        variant_1_label=first.label,
        variant_2_label=second.label,
    )
