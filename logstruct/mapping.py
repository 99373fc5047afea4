"""Storage type inference for a single field."""

from __future__ import annotations

import ipaddress
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from .config import DEFAULT_CONFIG, InferenceConfig
from .errors import MixedObjectFieldError
from .explain import Explanation
from .timestamp import DEFAULT_CATALOG
from .values import ValueKind, flatten_values, kind_of, value_to_text


logger = logging.getLogger(__name__)


MAPPING_TYPE_SETTING = "type"
MAPPING_FORMAT_SETTING = "format"

MAPPING_TYPES = frozenset({"keyword", "text", "long", "double", "date", "ip", "boolean", "object"})

LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1

_NUMBER_REGEX = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_WHOLE_NUMBER_REGEX = re.compile(r"[+-]?[0-9]+")


@dataclass(slots=True, frozen=True)
class FieldMapping:
    """Inferred storage type of a field; ``format`` only accompanies dates."""

    type: str
    format: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in MAPPING_TYPES:
            raise ValueError(f"Unknown mapping type [{self.type}]")
        if self.format is not None and self.type != "date":
            raise ValueError("Only date mappings carry a format")

    def to_dict(self) -> dict[str, str]:
        mapping = {MAPPING_TYPE_SETTING: self.type}
        if self.format is not None:
            mapping[MAPPING_FORMAT_SETTING] = self.format
        return mapping


def is_more_likely_text_than_keyword(value: str, config: Optional[InferenceConfig] = None) -> bool:
    """Guess whether a string is free text rather than an exact-match keyword."""

    config = config or DEFAULT_CONFIG
    length = len(value)
    if length > config.keyword_max_length:
        return True
    return length > config.keyword_max_spaces and value.count(" ") > config.keyword_max_spaces


def is_boolean_value(value: Any) -> bool:
    kind = kind_of(value)
    if kind is ValueKind.BOOLEAN:
        return True
    return kind is ValueKind.STRING and value in ("true", "false")


def is_numeric_value(value: Any) -> bool:
    kind = kind_of(value)
    if kind in {ValueKind.INTEGER, ValueKind.FLOAT}:
        return True
    return kind is ValueKind.STRING and _NUMBER_REGEX.fullmatch(value) is not None


def parse_number(value: Any) -> int | float:
    """Convert a numeric value, keeping whole numbers as exact integers."""

    kind = kind_of(value)
    if kind is ValueKind.INTEGER:
        return int(value)
    if kind is ValueKind.STRING and _WHOLE_NUMBER_REGEX.fullmatch(value) is not None:
        return int(value)
    return float(value)


def _long_rejection(value: Any) -> Optional[str]:
    kind = kind_of(value)
    if kind is ValueKind.FLOAT:
        return f"floating point value [{value}]"
    if kind is ValueKind.STRING:
        if _WHOLE_NUMBER_REGEX.fullmatch(value) is None:
            return f"non-integral value [{value}]"
        number = int(value)
    else:
        number = value
    if number < LONG_MIN or number > LONG_MAX:
        return f"value [{value}] being outside the 64 bit signed integer range"
    return None


Classifier = Callable[[Explanation, str, Sequence[Any], InferenceConfig], Optional[FieldMapping]]


def _classify_boolean(
    explanation: Explanation, field_name: str, values: Sequence[Any], config: InferenceConfig
) -> Optional[FieldMapping]:
    if all(is_boolean_value(value) for value in values):
        return FieldMapping("boolean")
    return None


def _classify_number(
    explanation: Explanation, field_name: str, values: Sequence[Any], config: InferenceConfig
) -> Optional[FieldMapping]:
    if not all(is_numeric_value(value) for value in values):
        return None
    for value in values:
        reason = _long_rejection(value)
        if reason is not None:
            explanation.add(f"Rejecting type 'long' for field [{field_name}] due to {reason}")
            return FieldMapping("double")
    return FieldMapping("long")


def _is_ip(value: Any) -> bool:
    if kind_of(value) is not ValueKind.STRING:
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _classify_ip(
    explanation: Explanation, field_name: str, values: Sequence[Any], config: InferenceConfig
) -> Optional[FieldMapping]:
    if all(_is_ip(value) for value in values):
        return FieldMapping("ip")
    return None


def _classify_date(
    explanation: Explanation, field_name: str, values: Sequence[Any], config: InferenceConfig
) -> Optional[FieldMapping]:
    texts = [value_to_text(value) for value in values]
    first = DEFAULT_CATALOG.full_match(texts[0])
    if first is None:
        return None
    for text in texts[1:]:
        # Every value has to share the layout, not merely be some date
        if DEFAULT_CATALOG.matches_candidate(text, first.candidate_index) is None:
            explanation.add(
                f"Rejecting type 'date' for field [{field_name}] as [{text}] does not match "
                f"format {list(first.date_formats)}"
            )
            return None
    return FieldMapping("date", first.date_formats[0])


def _classify_text_or_keyword(
    explanation: Explanation, field_name: str, values: Sequence[Any], config: InferenceConfig
) -> Optional[FieldMapping]:
    if any(is_more_likely_text_than_keyword(value_to_text(value), config) for value in values):
        return FieldMapping("text")
    return FieldMapping("keyword")


SCALAR_CLASSIFIERS: tuple[tuple[str, Classifier], ...] = (
    ("boolean", _classify_boolean),
    ("number", _classify_number),
    ("ip", _classify_ip),
    ("date", _classify_date),
    ("text/keyword", _classify_text_or_keyword),
)


def guess_mapping(
    explanation: Explanation,
    field_name: str,
    values: Iterable[Any],
    config: Optional[InferenceConfig] = None,
) -> Optional[FieldMapping]:
    """Infer the storage type of one field from all of its values.

    Arrays are flattened and nulls ignored. Returns ``None`` when nothing is
    left to vote with, and raises ``MixedObjectFieldError`` when objects and
    non-objects share the field.
    """

    config = config or DEFAULT_CONFIG
    flattened = flatten_values(values)
    if not flattened:
        explanation.add(f"Field [{field_name}] has no non-null values, so it has no mapping")
        return None

    object_count = sum(1 for value in flattened if kind_of(value) is ValueKind.OBJECT)
    if object_count:
        if object_count == len(flattened):
            return FieldMapping("object")
        raise MixedObjectFieldError(field_name)

    for name, classifier in SCALAR_CLASSIFIERS:
        mapping = classifier(explanation, field_name, flattened, config)
        if mapping is not None:
            logger.debug("Field [%s] classified by the %s rule as %s", field_name, name, mapping.to_dict())
            return mapping
    return None
