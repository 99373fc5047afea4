"""Structure inference over a batch of parsed samples."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from .config import DEFAULT_CONFIG, InferenceConfig
from .explain import Explanation
from .mapping import FieldMapping, guess_mapping
from .stats import FieldStats, FieldStatsCalculator
from .timestamp import TimestampMatch, guess_timestamp_field


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StructureAnalysis:
    """Mappings and statistics keyed, and ordered, by field name."""

    field_mappings: dict[str, FieldMapping] = field(default_factory=dict)
    field_stats: dict[str, FieldStats] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field_mappings": {name: mapping.to_dict() for name, mapping in self.field_mappings.items()},
            "field_stats": {name: stats.to_dict() for name, stats in self.field_stats.items()},
        }


@dataclass(slots=True)
class StructureReport:
    """Everything inferred about one sample batch."""

    num_samples: int
    timestamp_field: Optional[str]
    timestamp: Optional[TimestampMatch]
    field_mappings: dict[str, FieldMapping]
    field_stats: dict[str, FieldStats]
    explanation: list[str]

    @property
    def need_client_timezone(self) -> bool:
        return self.timestamp is not None and not self.timestamp.has_timezone

    def to_dict(self, include_explanation: bool = True) -> dict[str, Any]:
        report: dict[str, Any] = {
            "num_samples": self.num_samples,
            "timestamp_field": self.timestamp_field,
            "timestamp": self.timestamp.to_dict() if self.timestamp is not None else None,
            "need_client_timezone": self.need_client_timezone,
            "field_mappings": {name: mapping.to_dict() for name, mapping in self.field_mappings.items()},
            "field_stats": {name: stats.to_dict() for name, stats in self.field_stats.items()},
        }
        if include_explanation:
            report["explanation"] = list(self.explanation)
        return report


def guess_mapping_and_calculate_field_stats(
    explanation: Explanation,
    field_name: str,
    values: Iterable[Any],
    config: Optional[InferenceConfig] = None,
) -> Optional[tuple[FieldMapping, Optional[FieldStats]]]:
    """Infer one field's mapping and statistics.

    Object fields get a mapping but no statistics.
    """

    config = config or DEFAULT_CONFIG
    values = list(values)
    mapping = guess_mapping(explanation, field_name, values, config)
    if mapping is None:
        return None
    if mapping.type == "object":
        return mapping, None

    calculator = FieldStatsCalculator()
    calculator.accept(values)
    return mapping, calculator.calculate(config.num_top_hits)


def _collect_field_values(samples: Sequence[Mapping[str, Any]]) -> dict[str, list[Any]]:
    values_by_field: dict[str, list[Any]] = {}
    for sample in samples:
        for name, value in sample.items():
            bucket = values_by_field.setdefault(name, [])
            if value is not None:
                bucket.append(value)
    return values_by_field


def guess_mappings_and_calculate_field_stats(
    explanation: Explanation,
    samples: Sequence[Mapping[str, Any]],
    config: Optional[InferenceConfig] = None,
) -> StructureAnalysis:
    """Infer mappings and statistics for every field seen in ``samples``.

    Fields without any non-null value are left out of both results.
    """

    mappings: dict[str, FieldMapping] = {}
    stats: dict[str, FieldStats] = {}

    for name, values in _collect_field_values(samples).items():
        result = guess_mapping_and_calculate_field_stats(explanation, name, values, config)
        if result is None:
            continue
        mapping, field_stats = result
        mappings[name] = mapping
        if field_stats is not None:
            stats[name] = field_stats

    return StructureAnalysis(
        field_mappings=dict(sorted(mappings.items())),
        field_stats=dict(sorted(stats.items())),
    )


def find_structure(
    samples: Sequence[Mapping[str, Any]],
    config: Optional[InferenceConfig] = None,
) -> StructureReport:
    """Detect the timestamp field and infer mappings for a sample batch."""

    explanation = Explanation()
    explanation.add(f"Analysing {len(samples)} sample(s)")

    timestamp_field: Optional[str] = None
    timestamp: Optional[TimestampMatch] = None
    guessed = guess_timestamp_field(explanation, samples)
    if guessed is not None:
        timestamp_field, timestamp = guessed

    analysis = guess_mappings_and_calculate_field_stats(explanation, samples, config)

    mappings = dict(analysis.field_mappings)
    if timestamp_field is not None and timestamp is not None:
        # The timestamp field always carries the detected format
        mappings[timestamp_field] = FieldMapping("date", timestamp.date_formats[0])

    logger.debug(
        "Inferred %d mapping(s) from %d sample(s); timestamp field is %s",
        len(mappings),
        len(samples),
        timestamp_field,
    )
    return StructureReport(
        num_samples=len(samples),
        timestamp_field=timestamp_field,
        timestamp=timestamp,
        field_mappings=mappings,
        field_stats=analysis.field_stats,
        explanation=explanation.lines,
    )
