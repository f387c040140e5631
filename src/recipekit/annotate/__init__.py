"""Annotation of instruction text with ingredient mentions."""

from recipekit.annotate.mentions import (
    EnrichedPart,
    MatcherConfig,
    MentionMatcher,
    enrich_step_with_ingredients,
    format_mention_quantity,
)

__all__ = [
    "EnrichedPart",
    "MatcherConfig",
    "MentionMatcher",
    "enrich_step_with_ingredients",
    "format_mention_quantity",
]
