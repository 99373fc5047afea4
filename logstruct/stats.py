"""Per-field summary statistics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import numpy as np

from .mapping import is_numeric_value, parse_number
from .values import flatten_values, value_to_text


DEFAULT_NUM_TOP_HITS = 10


@dataclass(slots=True, frozen=True)
class FieldStats:
    count: int
    cardinality: int
    top_hits: list[dict[str, Any]] = field(default_factory=list)
    min_value: Optional[int | float] = None
    max_value: Optional[int | float] = None
    mean_value: Optional[float] = None
    median_value: Optional[int | float] = None

    @property
    def is_numeric(self) -> bool:
        return self.min_value is not None

    def to_dict(self) -> dict[str, Any]:
        summary: dict[str, Any] = {"count": self.count, "cardinality": self.cardinality}
        if self.is_numeric:
            summary["min_value"] = self.min_value
            summary["max_value"] = self.max_value
            summary["mean_value"] = self.mean_value
            summary["median_value"] = self.median_value
        summary["top_hits"] = [dict(hit) for hit in self.top_hits]
        return summary


class FieldStatsCalculator:
    """Accumulate the values of one field and summarise them.

    Values are counted by their text form unless every value seen is a number,
    in which case they are counted by numeric value so that ``1``, ``1.0`` and
    ``"1"`` are the same distinct value. Whole numbers stay integers, so long
    values beyond float precision keep distinct counts and exact extremes.
    """

    def __init__(self) -> None:
        self.count = 0
        self.by_text: Counter[str] = Counter()
        self.by_number: Optional[Counter[int | float]] = Counter()
        self.numbers: list[int | float] = []

    def accept(self, values: Iterable[Any]) -> None:
        for value in flatten_values(values):
            self.count += 1
            self.by_text[value_to_text(value)] += 1
            if self.by_number is None:
                continue
            if is_numeric_value(value):
                number = parse_number(value)
                self.by_number[number] += 1
                self.numbers.append(number)
            else:
                self.by_number = None
                self.numbers = []

    def calculate(self, num_top_hits: int = DEFAULT_NUM_TOP_HITS) -> FieldStats:
        if self.by_number is not None and self.numbers:
            ordered = sorted(self.numbers)
            return FieldStats(
                count=self.count,
                cardinality=len(self.by_number),
                top_hits=[
                    {"value": _render_number(hit["value"]), "count": hit["count"]}
                    for hit in _top_hits(self.by_number, num_top_hits)
                ],
                min_value=_render_number(ordered[0]),
                max_value=_render_number(ordered[-1]),
                mean_value=float(np.mean(np.array(ordered, dtype=float))),
                median_value=_median(ordered),
            )
        return FieldStats(
            count=self.count,
            cardinality=len(self.by_text),
            top_hits=_top_hits(self.by_text, num_top_hits),
        )


def _top_hits(counts: Counter[Any], limit: int) -> list[dict[str, Any]]:
    # most_common keeps first-seen order among equal counts
    return [{"value": value, "count": count} for value, count in counts.most_common(limit)]


def _render_number(number: int | float) -> int | float:
    # Floats unless the integer has no exact float form
    as_float = float(number)
    if isinstance(number, int) and int(as_float) != number:
        return number
    return as_float


def _median(ordered: list[int | float]) -> int | float:
    middle = len(ordered) // 2
    if len(ordered) % 2:
        return _render_number(ordered[middle])
    return (ordered[middle - 1] + ordered[middle]) / 2


def calculate_field_stats(values: Iterable[Any], num_top_hits: int = DEFAULT_NUM_TOP_HITS) -> FieldStats:
    """Summarise the non-null values of one field."""

    calculator = FieldStatsCalculator()
    calculator.accept(values)
    return calculator.calculate(num_top_hits)
