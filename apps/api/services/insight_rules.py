"""
Ordered rule tables.

A rule is a (predicate, output) pair evaluated against a subject (rolling
stats or a day's rollup). Two traversals:

    evaluate_all  every firing rule contributes its message, in table order
    first_match   the first firing rule wins; a default covers no match

Threshold values live in the tables that use these traversals
(insight_generator, daily_snapshot); nothing here knows about them.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

Message = Union[str, Callable[[Any], str]]


@dataclass(frozen=True)
class Rule(Generic[T]):
    """A named predicate with the statement it emits when it fires."""
    rule_id: str
    predicate: Callable[[T], bool]
    message: Message

    def fires(self, subject: T) -> bool:
        return bool(self.predicate(subject))

    def render(self, subject: T) -> str:
        if callable(self.message):
            return self.message(subject)
        return self.message


def evaluate_all(rules: Sequence[Rule], subject: Any, limit: Optional[int] = None) -> List[str]:
    """Messages of every rule that fires, in order, up to `limit`."""
    messages: List[str] = []
    for rule in rules:
        if limit is not None and len(messages) >= limit:
            break
        if rule.fires(subject):
            messages.append(rule.render(subject))
    return messages


def fired_rule_ids(rules: Sequence[Rule], subject: Any) -> List[str]:
    """Ids of every rule that fires, in order."""
    return [rule.rule_id for rule in rules if rule.fires(subject)]


def first_match(rules: Sequence[Rule], subject: Any, default: Message) -> str:
    """Message of the first rule that fires, else the default."""
    for rule in rules:
        if rule.fires(subject):
            return rule.render(subject)
    return default(subject) if callable(default) else default


# --- Predicate helpers: a missing value (None) never satisfies a threshold ---

def below(value: Optional[float], threshold: float) -> bool:
    return value is not None and value < threshold


def above(value: Optional[float], threshold: float) -> bool:
    return value is not None and value > threshold
