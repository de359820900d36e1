"""
Event records and the per-user EventSet.

Records are supplied by the event store already typed and validated. They are
immutable once created; the store assigns id and user_id on insert.
Numeric estimate fields are Optional: None means the text estimate is still
pending (or failed) and the record contributes 0 to sums until populated.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple


class EventKind(str, Enum):
    """The six event collections."""
    FOOD = "food"
    WATER = "water"
    CRAVING = "craving"
    MOVEMENT = "movement"
    SLEEP = "sleep"
    STRESS = "stress"


class MealTag(str, Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MovementIntensity(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


@dataclass(frozen=True)
class FoodEvent:
    timestamp: datetime
    text: str
    meal_tag: Optional[MealTag] = None
    calories_min: Optional[int] = None
    calories_max: Optional[int] = None
    protein_g: Optional[float] = None
    carbs_g: Optional[float] = None
    fat_g: Optional[float] = None
    fiber_g: Optional[float] = None
    sugar_g: Optional[float] = None
    confidence: Optional[Confidence] = None
    supportive_note: Optional[str] = None
    id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class WaterEvent:
    timestamp: datetime
    ounces: float
    id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class CravingEvent:
    timestamp: datetime
    text: str
    intensity: Optional[int] = None           # 1-5
    category: Optional[str] = None
    suggestion_text: Optional[str] = None
    alternatives: Optional[Tuple[str, ...]] = None
    id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class MovementEvent:
    timestamp: datetime
    activity_type: str
    duration_min: Optional[float] = None
    intensity: Optional[MovementIntensity] = None
    estimated_burn_min: Optional[float] = None
    estimated_burn_max: Optional[float] = None
    raw_text: Optional[str] = None
    supportive_note: Optional[str] = None
    id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class SleepEvent:
    timestamp: datetime
    sleep_quality: int                        # 1-5
    hours_slept: Optional[float] = None       # 0-24
    notes: Optional[str] = None
    id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class StressEvent:
    timestamp: datetime
    stress_level: int                         # 1-5
    notes: Optional[str] = None
    id: Optional[str] = None
    user_id: Optional[str] = None


EVENT_TYPES: Dict[EventKind, type] = {
    EventKind.FOOD: FoodEvent,
    EventKind.WATER: WaterEvent,
    EventKind.CRAVING: CravingEvent,
    EventKind.MOVEMENT: MovementEvent,
    EventKind.SLEEP: SleepEvent,
    EventKind.STRESS: StressEvent,
}

# EventSet attribute per kind
_KIND_FIELDS: Dict[EventKind, str] = {
    EventKind.FOOD: "food",
    EventKind.WATER: "water",
    EventKind.CRAVING: "cravings",
    EventKind.MOVEMENT: "movement",
    EventKind.SLEEP: "sleep",
    EventKind.STRESS: "stress",
}


def kind_of(event: Any) -> EventKind:
    """Return the EventKind for an event record."""
    for kind, cls in EVENT_TYPES.items():
        if isinstance(event, cls):
            return kind
    raise TypeError(f"Not an event record: {type(event).__name__}")


@dataclass
class EventSet:
    """The six typed collections of one user's events."""
    food: List[FoodEvent] = field(default_factory=list)
    water: List[WaterEvent] = field(default_factory=list)
    cravings: List[CravingEvent] = field(default_factory=list)
    movement: List[MovementEvent] = field(default_factory=list)
    sleep: List[SleepEvent] = field(default_factory=list)
    stress: List[StressEvent] = field(default_factory=list)

    @staticmethod
    def kinds() -> Tuple[EventKind, ...]:
        return tuple(_KIND_FIELDS)

    def for_kind(self, kind: EventKind) -> list:
        return getattr(self, _KIND_FIELDS[EventKind(kind)])

    def add(self, event: Any) -> None:
        self.for_kind(kind_of(event)).append(event)

    def all_events(self) -> Iterator[Any]:
        for kind in self.kinds():
            yield from self.for_kind(kind)

    def total_count(self) -> int:
        return sum(len(self.for_kind(kind)) for kind in self.kinds())

    def is_empty(self) -> bool:
        return self.total_count() == 0

    def filter(self, predicate: Callable[[Any], bool]) -> "EventSet":
        """Return a new EventSet holding only events for which predicate is true."""
        return EventSet(**{
            name: [e for e in getattr(self, name) if predicate(e)]
            for name in _KIND_FIELDS.values()
        })
