"""JSON schema definitions for validating configuration files."""

from __future__ import annotations

INFERENCE_CONFIG_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "keyword_max_length": {"type": "integer", "minimum": 1},
        "keyword_max_spaces": {"type": "integer", "minimum": 0},
        "num_top_hits": {"type": "integer", "minimum": 1},
        "max_samples": {"type": ["integer", "null"], "minimum": 1},
    },
    "additionalProperties": False,
}
