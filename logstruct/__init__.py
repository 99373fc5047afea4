"""Schema-free structure inference for parsed log samples."""

from .errors import MixedObjectFieldError, StructureError
from .explain import Explanation
from .mapping import FieldMapping, guess_mapping, is_more_likely_text_than_keyword
from .stats import FieldStats, FieldStatsCalculator, calculate_field_stats
from .structure import (
    StructureAnalysis,
    StructureReport,
    find_structure,
    guess_mapping_and_calculate_field_stats,
    guess_mappings_and_calculate_field_stats,
)
from .timestamp import DEFAULT_CATALOG, TimestampFormatCatalog, TimestampMatch, guess_timestamp_field

__all__ = [
    "DEFAULT_CATALOG",
    "Explanation",
    "FieldMapping",
    "FieldStats",
    "FieldStatsCalculator",
    "MixedObjectFieldError",
    "StructureAnalysis",
    "StructureError",
    "StructureReport",
    "TimestampFormatCatalog",
    "TimestampMatch",
    "calculate_field_stats",
    "find_structure",
    "guess_mapping",
    "guess_mapping_and_calculate_field_stats",
    "guess_mappings_and_calculate_field_stats",
    "guess_timestamp_field",
    "is_more_likely_text_than_keyword",
]
