"""Normalisation of recipe instructions from strings, legacy dicts and JSON-LD."""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from recipekit.ingest.schemas import Instruction
from recipekit.logging_config import get_logger

logger = get_logger(__name__)

_STEP_NUMBER_RE = re.compile(r"^\s*(?:step\s+|paso\s+)?\d+\s*[.):-](?!\d)\s*", re.IGNORECASE)
_BOLD_RE = re.compile(r"^\*\*\s*(?P<label>.+?)\s*\*\*\s*:?$")


def _from_text(text: str) -> Instruction | None:
    text = text.strip()
    if not text:
        return None
    if match := _BOLD_RE.match(text):
        return Instruction(text=match.group("label").rstrip(":").strip(), is_header=True)
    text = _STEP_NUMBER_RE.sub("", text, count=1).strip()
    return Instruction(text=text) if text else None


def _indices(data: Mapping[str, Any]) -> tuple[int, ...]:
    raw = data.get("ingredient_indices", data.get("ingredientIndices")) or ()
    return tuple(i for i in raw if isinstance(i, int) and i >= 0)


def _from_mapping(data: Mapping[str, Any]) -> list[Instruction]:
    kind = data.get("@type")
    items = data.get("itemListElement")

    if kind == "HowToSection" or isinstance(items, list):
        steps: list[Instruction] = []
        name = data.get("name")
        if isinstance(name, str) and name.strip():
            steps.append(Instruction(text=name.strip(), is_header=True))
        steps.extend(normalize_instructions(items or []))
        return steps

    text = data.get("text")
    if not isinstance(text, str):
        logger.debug(f"Skipping instruction without text: {kind or sorted(data)!r}")
        return []

    if data.get("is_header", data.get("isHeader")):
        return [Instruction(text=text.strip().rstrip(":").strip(), is_header=True)]

    step = _from_text(text)
    if step is None:
        return []
    indices = _indices(data)
    if indices and not step.is_header:
        step = Instruction(text=step.text, ingredient_indices=indices)
    return [step]


def normalize_instructions(raw: Iterable[Any]) -> list[Instruction]:
    """
    Turn heterogeneous instruction input into Instruction records.

    Accepts plain strings, ``Instruction`` objects, legacy
    ``{"text", "ingredientIndices", "isHeader"}`` dicts and JSON-LD
    ``HowToStep``/``HowToSection`` objects. Leading step numbers ("1.",
    "2)") are stripped; ``**Label**`` strings and section names become
    header instructions. Anything unrecognised is skipped.
    """
    steps: list[Instruction] = []
    for item in raw or ():
        if isinstance(item, Instruction):
            steps.append(item)
        elif isinstance(item, str):
            if (step := _from_text(item)) is not None:
                steps.append(step)
        elif isinstance(item, Mapping):
            steps.extend(_from_mapping(item))
        else:
            logger.debug(f"Skipping unsupported instruction type {type(item).__name__}")
    return steps
