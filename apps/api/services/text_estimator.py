"""
Free-Text Estimation

Turns short free-text entries (a meal, a workout, a craving) into rough
structured estimates:

    estimate_food        calorie range + macros
    estimate_movement    duration + burn range
    suggest_for_craving  alternatives + an "honor it" option

Two interchangeable strategies:
- KeywordEstimator: local keyword tables, no network
- OpenAIEstimator: external model with JSON output

Estimates are best-effort and body-neutral, never medical-grade. Failures
raise EstimationError so the caller can fall back (FallbackEstimator) or
let the user enter numbers manually. The rollup and insight code never
imports this module; it only sees the numbers stored on events.
"""

import json
import logging
import random
import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from openai import OpenAI

from core.config import settings

logger = logging.getLogger(__name__)


class EstimationError(Exception):
    """The estimator could not produce a usable estimate."""


@dataclass
class FoodEstimate:
    calories_min: int
    calories_max: int
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    confidence: str = "medium"
    supportive_note: str = ""
    optional_followup_question: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MovementEstimate:
    activity_type: str
    duration_min: float
    estimated_burn_min: int
    estimated_burn_max: int
    supportive_note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CravingSuggestion:
    alternatives: List[str] = field(default_factory=list)
    honor_option: str = ""
    suggestion: str = ""
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TextEstimator(ABC):
    name = "base"

    @abstractmethod
    def estimate_food(
        self,
        text: str,
        meal_tag: Optional[str] = None,
        is_restaurant: bool = False,
        unsure_portions: bool = False,
    ) -> FoodEstimate:
        ...

    @abstractmethod
    def estimate_movement(self, text: str, intensity: Optional[str] = None) -> MovementEstimate:
        ...

    @abstractmethod
    def suggest_for_craving(
        self,
        text: str,
        intensity: Optional[int] = None,
        category: Optional[str] = None,
    ) -> CravingSuggestion:
        ...


def _require_text(text: Optional[str]) -> str:
    if not text or not text.strip():
        raise EstimationError("text is required")
    return text.strip()


# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

# (keywords, (cal_min, cal_max, protein, carbs, fat, fiber)); first match wins
FOOD_TABLE: Sequence[Tuple[Tuple[str, ...], Tuple[int, int, float, float, float, float]]] = (
    (("burrito", "bowl"), (450, 650, 25, 60, 18, 12)),
    (("salad",), (200, 400, 15, 20, 12, 8)),
    (("pizza",), (500, 800, 20, 65, 25, 4)),
    (("sandwich", "wrap"), (350, 550, 22, 45, 15, 6)),
    (("smoothie", "shake"), (200, 400, 10, 50, 5, 5)),
    (("oatmeal", "oats"), (250, 400, 12, 55, 8, 10)),
    (("eggs",), (150, 300, 18, 5, 12, 1)),
    (("yogurt",), (120, 250, 15, 25, 5, 2)),
    (("pasta",), (400, 700, 18, 75, 15, 5)),
    (("rice", "grain bowl"), (350, 550, 15, 65, 10, 7)),
    (("snack", "bar"), (150, 250, 5, 25, 8, 3)),
)
DEFAULT_FOOD = (200, 300, 10, 30, 8, 3)

RESTAURANT_MIN_FACTOR = 1.3
RESTAURANT_MAX_FACTOR = 1.5
UNSURE_WIDEN = 0.2

# (keywords, activity_type, kcal per minute); first match wins
ACTIVITY_TABLE: Sequence[Tuple[Tuple[str, ...], str, float]] = (
    (("walk",), "walking", 3.5),
    (("run", "jog"), "running", 10.0),
    (("strength", "weight", "lift"), "strength training", 6.0),
    (("yoga",), "yoga", 3.0),
    (("bike", "cycl"), "cycling", 8.0),
    (("swim",), "swimming", 9.0),
    (("hiit", "cardio"), "HIIT", 12.0),
)
DEFAULT_ACTIVITY = ("general", 4.0)
DEFAULT_DURATION_MIN = 30
INTENSITY_FACTORS = {"easy": 0.7, "moderate": 1.0, "hard": 1.3}
BURN_LOW_FACTOR = 0.8
BURN_HIGH_FACTOR = 1.2

DURATION_RE = re.compile(r"(\d+)\s*(min|minute|minutes|hour|hours)", re.IGNORECASE)

# category -> (keywords, alternatives, honor option); first match wins
CRAVING_TABLE: Sequence[Tuple[str, Tuple[str, ...], Tuple[str, ...], str]] = (
    (
        "sweet",
        ("sweet", "sugar", "chocolate", "candy"),
        (
            "Fresh berries with a drizzle of honey",
            "Greek yogurt with cinnamon and a few dark chocolate chips",
            "Sliced apple with almond butter",
            "A small handful of dates",
        ),
        "Have a small piece of your favorite chocolate mindfully",
    ),
    (
        "salty",
        ("salty", "chips", "crispy"),
        (
            "Roasted chickpeas with sea salt",
            "Handful of lightly salted nuts",
            "Popcorn with nutritional yeast",
            "Veggie sticks with hummus",
        ),
        "Have a small bowl of chips, eaten slowly",
    ),
    (
        "creamy",
        ("creamy", "rich"),
        (
            "Full-fat Greek yogurt with berries",
            "Avocado on toast",
            "Smoothie with banana and nut butter",
            "Cottage cheese with fruit",
        ),
        "Have a small portion of ice cream or your creamy favorite",
    ),
    (
        "crunchy",
        ("crunchy",),
        (
            "Carrot and celery sticks",
            "Apple slices",
            "Rice cakes with toppings",
            "Cucumber with lime and tajin",
        ),
        "Have your crunchy snack of choice in a small portion",
    ),
)
DEFAULT_CRAVING = (
    (
        "Handful of trail mix",
        "Sliced veggies with guacamole",
        "A piece of fruit you enjoy",
    ),
    "Honor what you're truly craving in a mindful portion",
)

FOOD_NOTES = (
    "Thanks for logging. Data, not drama.",
    "You're building awareness. That's what matters.",
    "Great job adding this entry. Every bit of data helps you notice patterns.",
    "Logged. Remember, these are rough estimates, not exact science.",
    "Nice work tracking. You're learning what works for your body.",
)

MOVEMENT_NOTES = (
    "Movement logged. Your body will thank you for listening to it.",
    "Nice work. Rest is just as important as movement.",
    "You showed up for yourself today. That counts.",
    "Logged. Remember, all movement is beneficial movement.",
    "Great job moving today. You're building sustainable habits.",
)

CRAVING_NOTES = (
    "Cravings are just information. You might be noticing a pattern here.",
    "It's okay to feel this. Sometimes our bodies are asking for specific nutrients, or just comfort.",
    "If you'd like, try one of these options. Or honor the craving. Both are valid.",
    "Your body is communicating. These alternatives might satisfy the same need.",
)


def parse_duration_minutes(text: str, default: int = DEFAULT_DURATION_MIN) -> int:
    """'45 min' -> 45, '1 hour' -> 60; default when no duration is mentioned."""
    match = DURATION_RE.search(text)
    if not match:
        return default
    minutes = int(match.group(1))
    if match.group(2).lower().startswith("hour"):
        minutes *= 60
    return minutes


class KeywordEstimator(TextEstimator):
    """Local keyword-table estimates. Deterministic apart from the note pick."""

    name = "keyword"

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def estimate_food(self, text, meal_tag=None, is_restaurant=False, unsure_portions=False):
        lower = _require_text(text).lower()

        values = DEFAULT_FOOD
        for keywords, row in FOOD_TABLE:
            if any(k in lower for k in keywords):
                values = row
                break
        cal_min, cal_max, protein, carbs, fat, fiber = values
        confidence = "medium"

        if is_restaurant:
            cal_min = round(cal_min * RESTAURANT_MIN_FACTOR)
            cal_max = round(cal_max * RESTAURANT_MAX_FACTOR)
            confidence = "low"

        if unsure_portions:
            spread = cal_max - cal_min
            cal_min = round(cal_min - spread * UNSURE_WIDEN)
            cal_max = round(cal_max + spread * UNSURE_WIDEN)
            confidence = "low"

        return FoodEstimate(
            calories_min=int(cal_min),
            calories_max=int(cal_max),
            protein_g=float(round(protein)),
            carbs_g=float(round(carbs)),
            fat_g=float(round(fat)),
            fiber_g=float(round(fiber)),
            confidence=confidence,
            supportive_note=self.rng.choice(FOOD_NOTES),
        )

    def estimate_movement(self, text, intensity=None):
        raw = _require_text(text)
        lower = raw.lower()
        duration = parse_duration_minutes(raw)

        activity_type, per_min = DEFAULT_ACTIVITY
        for keywords, activity, rate in ACTIVITY_TABLE:
            if any(k in lower for k in keywords):
                activity_type, per_min = activity, rate
                break

        per_min *= INTENSITY_FACTORS.get((intensity or "").lower(), 1.0)

        return MovementEstimate(
            activity_type=activity_type,
            duration_min=float(duration),
            estimated_burn_min=round(duration * per_min * BURN_LOW_FACTOR),
            estimated_burn_max=round(duration * per_min * BURN_HIGH_FACTOR),
            supportive_note=self.rng.choice(MOVEMENT_NOTES),
        )

    def suggest_for_craving(self, text, intensity=None, category=None):
        lower = _require_text(text).lower()

        matched = None
        for row in CRAVING_TABLE:
            if any(k in lower for k in row[1]):
                matched = row
                break
        if matched is None and category:
            matched = next((row for row in CRAVING_TABLE if row[0] == category.lower()), None)

        if matched is None:
            alternatives, honor = DEFAULT_CRAVING
            found_category = None
        else:
            found_category, _, alternatives, honor = matched

        return CravingSuggestion(
            alternatives=list(alternatives),
            honor_option=honor,
            suggestion=self.rng.choice(CRAVING_NOTES),
            category=found_category,
        )


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

BASE_SYSTEM = (
    "You are a supportive, body-neutral wellness assistant. "
    "Never use moral language (good, bad, clean, junk, cheat). Be gentle and neutral. "
    "Return ONLY valid JSON. No markdown, no commentary."
)

FOOD_PROMPT = """Estimate nutrition for this food description.

{description}

Return a JSON object with these keys:
{{
  "calories_min": number,
  "calories_max": number,
  "protein_g": number,
  "carbs_g": number,
  "fat_g": number,
  "fiber_g": number,
  "confidence": "low"|"medium"|"high",
  "optional_followup_question": string|null,
  "supportive_note": string
}}

Rules:
- Always give a rough RANGE for calories.
- supportive_note is 1-2 short supportive sentences, no judgment."""

MOVEMENT_PROMPT = """Parse this movement description into structured data.

{description}

Return a JSON object with these keys:
{{
  "activity_type": string,
  "duration_min": number,
  "estimated_burn_min": number,
  "estimated_burn_max": number,
  "supportive_note": string
}}

Rules:
- Estimate calorie burn as a RANGE. Never shame or pressure."""

CRAVING_PROMPT = """The user shared a craving. Offer alternatives without judgment.

{description}

Return a JSON object with these keys:
{{
  "alternatives": [string, ...],
  "honor_option": string,
  "suggestion": string
}}

Rules:
- 2-4 alternatives, 1 "honor the craving" option, 1 short supportive sentence."""


def _coerce_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        v = value.strip()
        if v == "":
            return None
        try:
            return float(v)
        except ValueError:
            return None
    return None


def _extract_json_object(text: str) -> Dict[str, Any]:
    """Extract the first JSON object from model output."""
    if not text:
        raise ValueError("Empty model response")

    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("No JSON object found in model response")

    parsed = json.loads(text[start : end + 1])
    if not isinstance(parsed, dict):
        raise ValueError("Model response JSON is not an object")
    return parsed


def _required_number(data: Dict[str, Any], key: str) -> float:
    value = _coerce_float(data.get(key))
    if value is None or value < 0:
        raise EstimationError(f"Model response missing {key}")
    return value


class OpenAIEstimator(TextEstimator):
    """Estimates from the OpenAI chat completions API."""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Any = None,
    ):
        self.model = model or settings.OPENAI_MODEL
        if client is not None:
            self.client = client
            return
        api_key = api_key or settings.OPENAI_API_KEY
        if not api_key:
            raise EstimationError("OPENAI_API_KEY not configured")
        self.client = OpenAI(api_key=api_key, timeout=timeout or settings.EXTERNAL_API_TIMEOUT)

    def _complete(self, prompt: str) -> Dict[str, Any]:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": BASE_SYSTEM},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,
                max_tokens=400,
            )
            content = response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"OpenAI estimate request failed: {e}")
            raise EstimationError("OpenAI request failed") from e

        try:
            return _extract_json_object(content)
        except ValueError as e:
            logger.warning(f"OpenAI estimate returned unreadable JSON: {e}")
            raise EstimationError("Invalid model response") from e

    def estimate_food(self, text, meal_tag=None, is_restaurant=False, unsure_portions=False):
        description = _require_text(text)
        if meal_tag:
            description = f"Meal: {meal_tag}. Description: {description}"
        if is_restaurant:
            description += "\n(Restaurant portion.)"
        if unsure_portions:
            description += "\n(The user is unsure about portion sizes; widen the range.)"

        data = self._complete(FOOD_PROMPT.format(description=description))

        cal_min = _required_number(data, "calories_min")
        cal_max = _required_number(data, "calories_max")
        if cal_max < cal_min:
            cal_min, cal_max = cal_max, cal_min

        confidence = data.get("confidence")
        if confidence not in ("low", "medium", "high"):
            confidence = "medium"
        followup = data.get("optional_followup_question")
        note = data.get("supportive_note")

        return FoodEstimate(
            calories_min=int(round(cal_min)),
            calories_max=int(round(cal_max)),
            protein_g=_coerce_float(data.get("protein_g")) or 0.0,
            carbs_g=_coerce_float(data.get("carbs_g")) or 0.0,
            fat_g=_coerce_float(data.get("fat_g")) or 0.0,
            fiber_g=_coerce_float(data.get("fiber_g")) or 0.0,
            confidence=confidence,
            supportive_note=note.strip() if isinstance(note, str) else "",
            optional_followup_question=followup if isinstance(followup, str) and followup.strip() else None,
        )

    def estimate_movement(self, text, intensity=None):
        description = _require_text(text)
        if intensity:
            description += f"\nIntensity: {intensity}"

        data = self._complete(MOVEMENT_PROMPT.format(description=description))

        burn_min = _required_number(data, "estimated_burn_min")
        burn_max = _required_number(data, "estimated_burn_max")
        if burn_max < burn_min:
            burn_min, burn_max = burn_max, burn_min
        activity = data.get("activity_type")
        note = data.get("supportive_note")

        return MovementEstimate(
            activity_type=activity.strip() if isinstance(activity, str) and activity.strip() else "general",
            duration_min=_required_number(data, "duration_min"),
            estimated_burn_min=int(round(burn_min)),
            estimated_burn_max=int(round(burn_max)),
            supportive_note=note.strip() if isinstance(note, str) else "",
        )

    def suggest_for_craving(self, text, intensity=None, category=None):
        description = _require_text(text)
        if intensity:
            description += f"\nIntensity (1-5): {intensity}"
        if category:
            description += f"\nCategory: {category}"

        data = self._complete(CRAVING_PROMPT.format(description=description))

        alternatives = [a.strip() for a in data.get("alternatives") or [] if isinstance(a, str) and a.strip()]
        if not alternatives:
            raise EstimationError("Model response missing alternatives")
        honor = data.get("honor_option")
        suggestion = data.get("suggestion")

        return CravingSuggestion(
            alternatives=alternatives[:4],
            honor_option=honor.strip() if isinstance(honor, str) else "",
            suggestion=suggestion.strip() if isinstance(suggestion, str) else "",
            category=category,
        )


class FallbackEstimator(TextEstimator):
    """Try the primary estimator; on EstimationError use the fallback."""

    def __init__(self, primary: TextEstimator, fallback: TextEstimator):
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}+{fallback.name}"

    def _call(self, method: str, *args, **kwargs):
        try:
            return getattr(self.primary, method)(*args, **kwargs)
        except EstimationError as e:
            logger.warning(f"{self.primary.name} {method} failed ({e}); using {self.fallback.name}")
            return getattr(self.fallback, method)(*args, **kwargs)

    def estimate_food(self, text, meal_tag=None, is_restaurant=False, unsure_portions=False):
        _require_text(text)
        return self._call("estimate_food", text, meal_tag, is_restaurant, unsure_portions)

    def estimate_movement(self, text, intensity=None):
        _require_text(text)
        return self._call("estimate_movement", text, intensity)

    def suggest_for_craving(self, text, intensity=None, category=None):
        _require_text(text)
        return self._call("suggest_for_craving", text, intensity, category)


def get_estimator() -> TextEstimator:
    """
    The configured estimator.

    TEXT_ESTIMATOR=openai uses OpenAI with the keyword tables as fallback;
    anything else (or a missing API key) uses the keyword tables alone.
    """
    if settings.TEXT_ESTIMATOR == "openai":
        try:
            return FallbackEstimator(OpenAIEstimator(), KeywordEstimator())
        except EstimationError as e:
            logger.warning(f"OpenAI estimator unavailable ({e}); using keyword estimator")
    return KeywordEstimator()
