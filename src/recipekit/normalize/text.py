"""Accent folding with original-index mapping.

Matching happens on a lower-cased, diacritic-free copy of the text; the index
map lets callers translate a span found in the folded copy back to the exact
characters of the original string.
"""

import re
import unicodedata
from dataclasses import dataclass


def fold_text(text: str) -> str:
    """Lower-case and strip diacritics ("Calabacín" -> "calabacin")."""
    return FoldedText.build(text).folded


def name_key(name: str) -> str:
    """Normalized key used to match the same ingredient across lists."""
    return " ".join(fold_text(name).split())


@dataclass(frozen=True)
class FoldedText:
    """A folded copy of ``original`` plus a folded-index -> original-index map."""

    original: str
    folded: str
    index_map: tuple[int, ...]

    @classmethod
    def build(cls, text: str) -> "FoldedText":
        folded_chars: list[str] = []
        index_map: list[int] = []

        for i, char in enumerate(text):
            for part in unicodedata.normalize("NFD", char):
                if unicodedata.combining(part):
                    continue
                for lowered in part.lower():
                    folded_chars.append(lowered)
                    index_map.append(i)

        # Sentinel so an end offset equal to len(folded) maps to len(original)
        index_map.append(len(text))
        return cls(original=text, folded="".join(folded_chars), index_map=tuple(index_map))

    def original_span(self, start: int, end: int) -> tuple[int, int]:
        """Map a folded ``[start, end)`` span to the original string."""
        if end <= start:
            pos = self.index_map[start]
            return pos, pos
        return self.index_map[start], self.index_map[end - 1] + 1

    def finditer(self, pattern: re.Pattern[str]):
        """Yield ``(match, original_start, original_end)`` for matches in the folded text."""
        for match in pattern.finditer(self.folded):
            start, end = self.original_span(match.start(), match.end())
            yield match, start, end
