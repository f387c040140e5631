"""Locate ingredient mentions inside free-text recipe steps."""

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from recipekit.ingest.schemas import ParsedIngredient
from recipekit.logging_config import get_logger
from recipekit.normalize.text import FoldedText, fold_text

logger = get_logger(__name__)

# amount text -> scaled amount text
ScaleFn = Callable[[str], str]
# (amount, unit, ingredient name) -> (amount, unit)
ConvertFn = Callable[[str, str, str], tuple[str, str]]


# Words that never identify an ingredient on their own (accent-free)
STOP_WORDS = frozenset(
    {
        # Articles, prepositions
        "the", "and", "with", "for", "from", "into", "some", "any",
        "el", "la", "los", "las", "un", "una", "unos", "unas", "del", "con",
        "para", "por", "sin", "al",
        # Size and amount adjectives
        "small", "medium", "large", "big", "extra", "few", "more", "less",
        "pequeno", "pequena", "mediano", "mediana", "grande", "grandes", "poco",
        # Cooking verbs
        "bake", "chop", "cook", "cut", "mix", "stir", "add", "boil", "fry",
        "heat", "serve", "pour", "whisk", "beat", "slice", "dice", "mince",
        "hornear", "picar", "cocinar", "cortar", "mezclar", "remover", "anadir",
        "agregar", "hervir", "freir", "calentar", "servir", "verter", "batir",
        # Preparation descriptors
        "fresh", "freshly", "finely", "roughly", "chopped", "minced", "diced",
        "sliced", "grated", "melted", "ground", "optional", "taste", "needed",
        "fresco", "fresca", "picado", "picada", "finamente", "rallado", "molido",
        "opcional", "gusto",
    }
)

_WORD_RE = re.compile(r"[^\W\d_]+")
_PAREN_RE = re.compile(r"\([^)]*\)")


@dataclass(frozen=True)
class MatcherConfig:
    """Lookup data for keyword derivation."""

    stop_words: frozenset[str] = STOP_WORDS
    min_word_length: int = 3


@dataclass(frozen=True)
class EnrichedPart:
    """A segment of a step: plain text, or an ingredient mention."""

    type: Literal["text", "ingredient"]
    content: str
    formatted_quantity: str | None = None
    ingredient_index: int | None = None


@dataclass(frozen=True)
class _Mention:
    start: int
    end: int
    index: int


@dataclass
class MentionMatcher:
    """
    Finds where known ingredients are mentioned in a step.

    Matching is done on an accent-folded, lower-cased copy of the text, and
    spans are mapped back to the original so accents and casing survive in
    the output. A keyword must start on a word boundary and may only be
    extended by a plural suffix ("onion" -> "onions").
    """

    config: MatcherConfig = field(default_factory=MatcherConfig)

    def keywords(self, name: str) -> list[str]:
        """Search keywords for an ingredient name, longest first."""
        folded = " ".join(fold_text(name).split())
        if not folded:
            return []

        candidates = {folded}
        base = folded.split(",")[0].strip()
        candidates.add(base)
        candidates.add(" ".join(_PAREN_RE.sub(" ", base).split()))

        for word in _WORD_RE.findall(folded):
            if len(word) < self.config.min_word_length or word in self.config.stop_words:
                continue
            candidates.add(word)
            if word.endswith("es") and len(word) - 2 >= self.config.min_word_length:
                candidates.add(word[:-2])
            if word.endswith("s") and len(word) - 1 >= self.config.min_word_length:
                candidates.add(word[:-1])

        keywords = {k for k in candidates if k and k not in self.config.stop_words}
        return sorted(keywords, key=lambda k: (-len(k), k))

    def find_mentions(
        self,
        step_text: str,
        ingredients: Sequence[ParsedIngredient],
        ingredient_indices: Iterable[int] | None = None,
    ) -> list[_Mention]:
        folded = FoldedText.build(step_text)
        accepted: list[_Mention] = []

        allowed = set(ingredient_indices or ())
        for index, ingredient in enumerate(ingredients):
            if allowed and index not in allowed:
                continue
            if ingredient.is_header or not ingredient.name.strip():
                continue

            mention = self._first_free_match(folded, ingredient.name, index, accepted)
            if mention is not None:
                accepted.append(mention)

        return sorted(accepted, key=lambda m: m.start)

    def _first_free_match(
        self,
        folded: FoldedText,
        name: str,
        index: int,
        accepted: list[_Mention],
    ) -> _Mention | None:
        for keyword in self.keywords(name):
            pattern = re.compile(rf"(?<!\w){re.escape(keyword)}(?:es|s)?(?!\w)")
            for _, start, end in folded.finditer(pattern):
                if any(start < m.end and m.start < end for m in accepted):
                    continue
                return _Mention(start=start, end=end, index=index)
        return None


def format_mention_quantity(
    ingredient: ParsedIngredient,
    scale_fn: ScaleFn | None = None,
    use_variant: bool = False,
    convert_fn: ConvertFn | None = None,
) -> str | None:
    """Display quantity for a mentioned ingredient; None when it has no amount."""
    name, amount, unit = ingredient.select(variant=2 if use_variant else 1)
    if amount.is_empty:
        return None

    amount_text = amount.display
    if scale_fn is not None:
        amount_text = scale_fn(amount_text)
    if convert_fn is not None:
        amount_text, unit = convert_fn(amount_text, unit, name)
    return f"{amount_text} {unit}".strip() or None


def enrich_step_with_ingredients(
    step_text: str,
    ingredients: Sequence[ParsedIngredient],
    scale_fn: ScaleFn | None = None,
    use_variant: bool = False,
    convert_fn: ConvertFn | None = None,
    ingredient_indices: Iterable[int] | None = None,
    matcher: MentionMatcher | None = None,
) -> list[EnrichedPart]:
    """
    Split a step into text and ingredient segments.

    Concatenating ``content`` of the returned parts always reproduces
    ``step_text``. Each ingredient is annotated at most once; when two
    candidates overlap, the ingredient listed first wins.

    Args:
        step_text: Instruction text as shown to the user.
        ingredients: The recipe's parsed ingredients.
        scale_fn: Applied to the amount before display.
        use_variant: Show the variant-2 amount where one exists.
        convert_fn: Applied after scaling to change the display unit.
        ingredient_indices: Restrict matching to these ingredients.

    Returns:
        Ordered EnrichedPart segments.
    """
    if not step_text:
        return []

    matcher = matcher or MentionMatcher()
    mentions = matcher.find_mentions(step_text, ingredients, ingredient_indices)

    parts: list[EnrichedPart] = []
    cursor = 0
    for mention in mentions:
        if mention.start > cursor:
            parts.append(EnrichedPart(type="text", content=step_text[cursor : mention.start]))
        ingredient = ingredients[mention.index]
        parts.append(
            EnrichedPart(
                type="ingredient",
                content=step_text[mention.start : mention.end],
                formatted_quantity=format_mention_quantity(
                    ingredient, scale_fn, use_variant, convert_fn
                ),
                ingredient_index=mention.index,
            )
        )
        cursor = mention.end

    if cursor < len(step_text):
        parts.append(EnrichedPart(type="text", content=step_text[cursor:]))

    logger.debug(f"Annotated {len(mentions)} ingredient mentions")
    return parts
