"""Reading parsed sample records from JSON and JSONL files."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, TextIO


@dataclass(slots=True)
class ChunkingConfig:
    """Configuration for reading sample records in fixed-size chunks."""

    size: int = 1000
    format: str | None = None
    max_records: int | None = None

    def __post_init__(self) -> None:
        if self.size <= 0:
            raise ValueError("chunk size must be positive")
        if self.format is not None and self.format not in {"json_array", "jsonl", "json_object"}:
            raise ValueError("format must be 'json_array', 'json_object', 'jsonl', or None")
        if self.max_records is not None and self.max_records <= 0:
            raise ValueError("max_records must be positive")


class JSONStream:
    """Stream sample records from a JSON or JSONL file in fixed-size chunks."""

    read_size = 65536

    def __init__(self, path: Path, config: ChunkingConfig) -> None:
        self.path = path
        self.config = config

    def iter_chunks(self) -> Iterator[list[dict[str, Any]]]:
        """Yield successive chunks of JSON objects.

        Supports newline-delimited JSON (JSONL), a JSON array of objects, and a
        single JSON object. Reading stops once ``max_records`` records have
        been produced.
        """

        if not self.path.exists():
            raise FileNotFoundError(self.path)

        detected_format = self._detect_format()

        if detected_format == "jsonl":
            yield from self._iter_jsonl()
            return

        if detected_format == "json_object":
            with self.open() as handle:
                data = json.load(handle)
            if not isinstance(data, dict):
                raise ValueError("Expected a JSON object at root")
            yield [data]
            return

        yield from self._iter_json_array()

    def open(self) -> TextIO:
        """Open the underlying file."""

        return self.path.open("r", encoding="utf-8")

    def __iter__(self) -> Iterable[list[dict[str, Any]]]:
        return self.iter_chunks()

    def _iter_jsonl(self) -> Iterator[list[dict[str, Any]]]:
        record_count = 0
        with self.open() as handle:
            chunk: list[dict[str, Any]] = []
            for line_number, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    obj = json.loads(line)
                except json.JSONDecodeError as exc:
                    raise ValueError(f"Line {line_number} is not valid JSON: {exc.msg}") from exc
                if not isinstance(obj, dict):
                    raise ValueError(f"Line {line_number} is not a JSON object")
                chunk.append(obj)
                record_count += 1
                if len(chunk) >= self.config.size:
                    yield chunk
                    chunk = []
                if self._should_stop(record_count):
                    break
            if chunk:
                yield chunk

    def _iter_json_array(self) -> Iterator[list[dict[str, Any]]]:
        """Decode array elements as they are read, so ``max_records`` bounds memory."""

        decoder = json.JSONDecoder()
        with self.open() as handle:
            buffer = ""
            chunk: list[dict[str, Any]] = []
            record_count = 0
            in_array = False
            closed = False
            eof = False

            while not closed:
                if not eof:
                    data = handle.read(self.read_size)
                    eof = not data
                    buffer += data
                idx = 0

                while True:
                    idx = _consume_whitespace(buffer, idx)
                    if idx >= len(buffer):
                        break

                    if not in_array:
                        if buffer[idx] != "[":
                            raise ValueError("Expected a JSON array at root")
                        in_array = True
                        idx += 1
                        continue

                    if buffer[idx] == "]":
                        closed = True
                        idx += 1
                        break
                    if buffer[idx] == ",":
                        idx += 1
                        continue

                    try:
                        obj, end = decoder.raw_decode(buffer, idx)
                    except json.JSONDecodeError as exc:
                        if eof:
                            raise ValueError(f"Invalid JSON array element: {exc.msg}") from exc
                        # The element continues in the next read
                        break
                    if not isinstance(obj, dict):
                        raise ValueError("Array elements must be JSON objects")
                    chunk.append(obj)
                    record_count += 1
                    idx = end

                    if len(chunk) >= self.config.size:
                        yield chunk
                        chunk = []
                    if self._should_stop(record_count):
                        if chunk:
                            yield chunk
                        return

                buffer = buffer[idx:]
                if eof and not closed:
                    raise ValueError("JSON array is not terminated")

            if chunk:
                yield chunk

    def _detect_format(self) -> str:
        if self.config.format:
            return self.config.format

        suffix = self.path.suffix.lower()
        if suffix in {".jsonl", ".ndjson"}:
            return "jsonl"

        with self.open() as handle:
            first_line = ""
            for line in handle:
                if line.strip():
                    first_line = line.strip()
                    break
        if first_line.startswith("["):
            return "json_array"
        if first_line.startswith("{"):
            # One object per line looks exactly like a single object on one line
            try:
                json.loads(first_line)
            except json.JSONDecodeError:
                return "json_object"
            with self.open() as handle:
                non_blank = sum(1 for line in handle if line.strip())
            return "jsonl" if non_blank > 1 else "json_object"
        raise ValueError("Unable to detect JSON format")

    def _should_stop(self, record_count: int) -> bool:
        return self.config.max_records is not None and record_count >= self.config.max_records


def load_samples(
    path: Path,
    *,
    max_records: Optional[int] = None,
    format_hint: str | None = None,
) -> list[dict[str, Any]]:
    """Read up to ``max_records`` sample records from ``path``."""

    stream = JSONStream(path, ChunkingConfig(format=format_hint, max_records=max_records))
    samples: list[dict[str, Any]] = []
    for chunk in stream.iter_chunks():
        samples.extend(chunk)
    return samples


def _consume_whitespace(buffer: str, idx: int) -> int:
    while idx < len(buffer) and buffer[idx].isspace():
        idx += 1
    return idx
