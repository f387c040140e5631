"""
Language detection and best-effort translation for recipe import.

The actual translation service is injected as an async ``translate(text)``
callable; this module only bounds it with a timeout, retries it with tenacity
and falls back to the original text when it keeps failing.
"""

import asyncio
import re
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Literal

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from recipekit.config import get_settings
from recipekit.ingest.schemas import Instruction, ParsedIngredient
from recipekit.logging_config import get_logger

logger = get_logger(__name__)

Language = Literal["en", "es", "unknown"]
Translate = Callable[[str], Awaitable[str]]


# =============================================================================
# Language Detection
# =============================================================================

ENGLISH_INDICATORS = frozenset(
    {
        # Recipe words
        "cup", "cups", "tablespoon", "tablespoons", "teaspoon", "teaspoons",
        "tbsp", "tsp", "ounce", "ounces", "pound", "pounds", "oz", "lb", "lbs",
        "chopped", "minced", "diced", "sliced", "grated", "melted", "beaten",
        "fresh", "dried", "ground", "large", "medium", "small", "optional",
        # Instruction words
        "preheat", "oven", "bake", "cook", "stir", "mix", "combine", "add",
        "pour", "heat", "boil", "simmer", "fry", "sauté", "serve", "let",
        "minutes", "hours", "until", "about", "degrees", "temperature",
        # Ingredients
        "butter", "sugar", "flour", "salt", "pepper", "water", "milk", "cream",
        "eggs", "egg", "chicken", "beef", "pork", "fish", "onion", "garlic",
        "oil", "olive", "vegetable", "cheese", "bread", "rice", "pasta",
        # Articles and prepositions
        "the", "and", "with", "into", "from", "for", "then", "when",
    }
)

SPANISH_INDICATORS = frozenset(
    {
        "taza", "tazas", "cucharada", "cucharadas", "cucharadita", "cucharaditas",
        "gramos", "litros", "mililitros", "picado", "picada", "cortado", "rallado",
        "fresco", "seco", "molido", "grande", "mediano", "pequeño", "opcional",
        "precalentar", "horno", "hornear", "cocinar", "mezclar", "añadir", "agregar",
        "verter", "calentar", "hervir", "freír", "servir", "dejar", "minutos",
        "horas", "hasta", "grados", "temperatura", "mantequilla", "azúcar", "harina",
        "sal", "pimienta", "agua", "leche", "nata", "huevos", "huevo", "pollo",
        "carne", "cerdo", "pescado", "cebolla", "ajo", "aceite", "queso", "pan",
        "arroz", "el", "la", "los", "las", "con", "para", "luego", "cuando", "sobre",
    }
)

MIN_INDICATORS = 3
DOMINANCE_RATIO = 1.5

_PUNCTUATION_RE = re.compile(r"[.,!?;:'\"()]")


def detect_language(text: str) -> Language:
    """
    Guess whether ``text`` is English or Spanish from indicator words.

    At least three indicator words are needed, and one language must
    outscore the other by 1.5x; otherwise the result is "unknown".
    """
    english = spanish = 0
    for word in (text or "").lower().split():
        word = _PUNCTUATION_RE.sub("", word)
        english += word in ENGLISH_INDICATORS
        spanish += word in SPANISH_INDICATORS

    if english + spanish < MIN_INDICATORS:
        return "unknown"
    if english > spanish * DOMINANCE_RATIO:
        return "en"
    if spanish > english * DOMINANCE_RATIO:
        return "es"
    return "unknown"


def detect_recipe_language(
    title: str,
    ingredients: Iterable[ParsedIngredient | str] = (),
    instructions: Iterable[Instruction | str] = (),
    description: str | None = None,
) -> Language:
    """Detect the language of a whole recipe from all of its text."""
    parts = [title or "", description or ""]
    parts.extend(i.name if isinstance(i, ParsedIngredient) else i for i in ingredients)
    parts.extend(s.text if isinstance(s, Instruction) else s for s in instructions)
    return detect_language(" ".join(parts))


# =============================================================================
# Dictionary Fallback
# =============================================================================

COOKING_TRANSLATIONS: dict[str, str] = {
    # Measurements
    "cup": "taza",
    "cups": "tazas",
    "tablespoon": "cucharada",
    "tablespoons": "cucharadas",
    "teaspoon": "cucharadita",
    "teaspoons": "cucharaditas",
    "ounce": "onza",
    "ounces": "onzas",
    "pound": "libra",
    "pounds": "libras",
    "pinch": "pizca",
    "dash": "pizca",
    # Ingredients
    "butter": "mantequilla",
    "sugar": "azúcar",
    "flour": "harina",
    "salt": "sal",
    "pepper": "pimienta",
    "black pepper": "pimienta negra",
    "water": "agua",
    "milk": "leche",
    "cream": "nata",
    "heavy cream": "nata para montar",
    "egg": "huevo",
    "eggs": "huevos",
    "chicken": "pollo",
    "chicken breast": "pechuga de pollo",
    "beef": "carne de res",
    "pork": "cerdo",
    "fish": "pescado",
    "onion": "cebolla",
    "onions": "cebollas",
    "garlic": "ajo",
    "garlic cloves": "dientes de ajo",
    "olive oil": "aceite de oliva",
    "vegetable oil": "aceite vegetal",
    "oil": "aceite",
    "cheese": "queso",
    "bread": "pan",
    "rice": "arroz",
    "tomato": "tomate",
    "tomatoes": "tomates",
    "potato": "patata",
    "potatoes": "patatas",
    "carrot": "zanahoria",
    "carrots": "zanahorias",
    "celery": "apio",
    "bell pepper": "pimiento",
    "mushroom": "champiñón",
    "mushrooms": "champiñones",
    "spinach": "espinacas",
    "lemon": "limón",
    "lemon juice": "zumo de limón",
    "orange": "naranja",
    "apple": "manzana",
    "banana": "plátano",
    "strawberries": "fresas",
    "vanilla extract": "extracto de vainilla",
    "cinnamon": "canela",
    "baking powder": "polvo de hornear",
    "baking soda": "bicarbonato de sodio",
    "yeast": "levadura",
    "honey": "miel",
    "cocoa powder": "cacao en polvo",
    "almonds": "almendras",
    "walnuts": "nueces",
    "soy sauce": "salsa de soja",
    "vinegar": "vinagre",
    "white wine": "vino blanco",
    "red wine": "vino tinto",
    "chicken broth": "caldo de pollo",
    "broth": "caldo",
    # Actions
    "preheat": "precalentar",
    "bake": "hornear",
    "cook": "cocinar",
    "fry": "freír",
    "boil": "hervir",
    "simmer": "cocer a fuego lento",
    "stir": "remover",
    "mix": "mezclar",
    "add": "añadir",
    "pour": "verter",
    "heat": "calentar",
    "chop": "picar",
    "whisk": "batir",
    "knead": "amasar",
    "serve": "servir",
    "drain": "escurrir",
    # Descriptors
    "chopped": "picado",
    "minced": "picado finamente",
    "grated": "rallado",
    "melted": "derretido",
    "fresh": "fresco",
    "ground": "molido",
    "large": "grande",
    "small": "pequeño",
    "to taste": "al gusto",
    # Time, temperature and equipment
    "minutes": "minutos",
    "hours": "horas",
    "degrees": "grados",
    "oven": "horno",
    "bowl": "bol",
    "skillet": "sartén",
}

# Single pass, longest phrase first, so "olive oil" is never split into "olive aceite"
_DICTIONARY_RE = re.compile(
    r"\b(?:"
    + "|".join(re.escape(term) for term in sorted(COOKING_TRANSLATIONS, key=len, reverse=True))
    + r")\b",
    re.IGNORECASE,
)


def translate_with_dictionary(text: str) -> str:
    """Translate common English cooking terms to Spanish, preserving capitalization."""
    if not text:
        return text

    def _replace(match: re.Match[str]) -> str:
        word = match.group(0)
        spanish = COOKING_TRANSLATIONS[word.lower()]
        if word[0].isupper():
            return spanish[0].upper() + spanish[1:]
        return spanish

    return _DICTIONARY_RE.sub(_replace, text)


# =============================================================================
# Best-effort Translation
# =============================================================================


class TranslationError(Exception):
    """Raised when a single translation attempt fails or times out."""

    def __init__(self, message: str, text: str | None = None):
        super().__init__(message)
        self.text = text


class BestEffortTranslator:
    """
    Bounded, retrying wrapper around an injected translation capability.

    Every call resolves to a string: when all attempts fail (timeout, error,
    empty output) the original text comes back and a warning is logged.
    """

    BACKOFF_BASE = 0.5

    def __init__(
        self,
        translate: Translate,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        backoff_max: float | None = None,
        batch_size: int | None = None,
    ):
        settings = get_settings()
        self._translate = translate
        self.timeout = timeout if timeout is not None else settings.translation_timeout
        self.max_retries = max_retries or settings.translation_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else self.BACKOFF_BASE
        if backoff_max is None:
            backoff_max = settings.translation_backoff_max
        self.backoff_max = backoff_max
        self.batch_size = max(1, batch_size or settings.translation_batch_size)

    async def _attempt(self, text: str) -> str:
        try:
            translated = await asyncio.wait_for(self._translate(text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise TranslationError(f"Timed out after {self.timeout}s", text=text) from e
        except TranslationError:
            raise
        except Exception as e:
            raise TranslationError(f"Translation call failed: {e}", text=text) from e

        if not translated or not translated.strip():
            raise TranslationError("Empty translation", text=text)
        return translated

    async def translate_text(self, text: str) -> str:
        """Translate one text, returning it unchanged if translation fails."""
        if not text or not text.strip():
            return text

        @retry(
            retry=retry_if_exception_type(TranslationError),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_base, max=self.backoff_max),
            reraise=True,
        )
        async def _do_translate() -> str:
            return await self._attempt(text)

        try:
            return await _do_translate()
        except TranslationError as e:
            logger.warning(f"Translation failed after {self.max_retries} attempts: {e}")
            return text

    async def translate_texts(self, texts: Sequence[str]) -> list[str]:
        """
        Translate several texts in small concurrent batches.

        Positions are preserved and empty strings pass through untouched.
        """
        results = list(texts)
        pending = [(index, text) for index, text in enumerate(texts) if text and text.strip()]

        for start in range(0, len(pending), self.batch_size):
            batch = pending[start : start + self.batch_size]
            translated = await asyncio.gather(*(self.translate_text(text) for _, text in batch))
            for (index, _), value in zip(batch, translated):
                results[index] = value

        return results
