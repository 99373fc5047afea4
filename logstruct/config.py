"""Tunable thresholds for structure inference."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from jsonschema import ValidationError, validate

from .schemas import INFERENCE_CONFIG_SCHEMA


@dataclass(slots=True)
class InferenceConfig:
    """Thresholds used by the mapping and statistics inference.

    ``keyword_max_length`` and ``keyword_max_spaces`` drive the text versus
    keyword decision; ``max_samples`` bounds how many records the command line
    reads before inferring.
    """

    keyword_max_length: int = 256
    keyword_max_spaces: int = 5
    num_top_hits: int = 10
    max_samples: Optional[int] = 1000

    def __post_init__(self) -> None:
        if self.keyword_max_length <= 0:
            raise ValueError("keyword_max_length must be positive")
        if self.keyword_max_spaces < 0:
            raise ValueError("keyword_max_spaces must not be negative")
        if self.num_top_hits <= 0:
            raise ValueError("num_top_hits must be positive")
        if self.max_samples is not None and self.max_samples <= 0:
            raise ValueError("max_samples must be positive")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = InferenceConfig()


def load_config(path: Path) -> InferenceConfig:
    """Load inference settings from YAML."""

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping")
    try:
        validate(instance=data, schema=INFERENCE_CONFIG_SCHEMA)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration in {path}: {exc.message}") from exc
    return InferenceConfig(**data)
