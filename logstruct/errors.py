"""Exceptions raised while inferring sample structure."""

from __future__ import annotations

from typing import Optional


class StructureError(RuntimeError):
    """Raised when a sample batch cannot be given a consistent structure."""

    def __init__(self, message: str, *, field_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class MixedObjectFieldError(StructureError):
    """Raised when one field holds both object and non-object values."""

    def __init__(self, field_name: str) -> None:
        super().__init__(
            f"Field [{field_name}] has both object and non-object values - this is not supported by Elasticsearch",
            field_name=field_name,
        )
