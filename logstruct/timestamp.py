"""Timestamp format catalog and timestamp field detection.

The catalog is an ordered list of known timestamp layouts. Each entry names
the grok pattern that extracts it and the date format string(s) that parse
it. Order matters: more specific layouts come first so that, for example,
``2018-05-24 17:28:31,735 +0100`` is recognised as a Tomcat datestamp rather
than an ISO8601 timestamp with the zone dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional, Sequence

from .explain import Explanation
from .values import is_scalar, value_to_text


logger = logging.getLogger(__name__)


_MONTH = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|Aug(?:ust)?"
    r"|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
_DAY = r"(?:Mon(?:day)?|Tue(?:s(?:day)?)?|Wed(?:nesday)?|Thu(?:rs(?:day)?)?|Fri(?:day)?|Sat(?:urday)?|Sun(?:day)?)"
_YEAR = r"\d{4}"
_MONTHNUM = r"(?:0?[1-9]|1[0-2])"
_MONTHNUM2 = r"(?:0[1-9]|1[0-2])"
_MONTHDAY = r"(?:0[1-9]|[12][0-9]|3[01]|[1-9])"
_MONTHDAY2 = r"(?:0[1-9]|[12][0-9]|3[01])"
_HOUR = r"(?:2[0-3]|[01]?[0-9])"
_HOUR2 = r"(?:2[0-3]|[01][0-9])"
_MINUTE = r"[0-5][0-9]"
_SECOND = r"(?:[0-5][0-9]|60)"
# The separator before the fraction is part of the reported format
_COMMA_FRACTION = r",[0-9]{3,9}"
_DOT_FRACTION = r"\.[0-9]{3,9}"
_TZ_NAME = r"[A-Z]{3,4}"
_OFFSET = rf"[+-]{_HOUR2}{_MINUTE}"
_OFFSET_COLON = rf"[+-]{_HOUR2}:{_MINUTE}"

_YMD = rf"{_YEAR}-{_MONTHNUM}-{_MONTHDAY}"
_HMS = rf"{_HOUR}:{_MINUTE}:{_SECOND}"


@dataclass(slots=True, frozen=True)
class CandidateTimestampFormat:
    """One catalog entry.

    ``has_timezone`` of ``None`` means the zone is optional in the layout and
    is decided per match by whether the ``tz`` group took part.
    """

    date_formats: tuple[str, ...]
    grok_pattern_name: str
    regex: re.Pattern[str]
    has_timezone: Optional[bool]

    def timezone_in(self, found: re.Match[str]) -> bool:
        if self.has_timezone is None:
            return found.groupdict().get("tz") is not None
        return self.has_timezone


def _candidate(
    date_formats: str | Sequence[str],
    pattern: str,
    grok_pattern_name: str,
    has_timezone: Optional[bool],
) -> CandidateTimestampFormat:
    formats = (date_formats,) if isinstance(date_formats, str) else tuple(date_formats)
    return CandidateTimestampFormat(formats, grok_pattern_name, re.compile(pattern), has_timezone)


ORDERED_CANDIDATE_FORMATS: tuple[CandidateTimestampFormat, ...] = (
    # Basically ISO8601 with a space before the zone; the zone is optional in
    # ISO8601 so this has to be tried first
    _candidate(
        "YYYY-MM-dd HH:mm:ss,SSS Z",
        rf"\b20\d{{2}}-{_MONTHNUM}-{_MONTHDAY} {_HMS}{_COMMA_FRACTION} (?:Z|{_OFFSET})\b",
        "TOMCAT_DATESTAMP",
        True,
    ),
    # A space instead of the literal T needs longhand formats
    _candidate(
        "YYYY-MM-dd HH:mm:ss,SSSZ",
        rf"\b{_YMD} {_HMS}{_COMMA_FRACTION}(?:Z|{_OFFSET})\b",
        "TIMESTAMP_ISO8601",
        True,
    ),
    _candidate(
        "YYYY-MM-dd HH:mm:ss,SSSZZ",
        rf"\b{_YMD} {_HMS}{_COMMA_FRACTION}{_OFFSET_COLON}\b",
        "TIMESTAMP_ISO8601",
        True,
    ),
    _candidate("YYYY-MM-dd HH:mm:ss,SSS", rf"\b{_YMD} {_HMS}{_COMMA_FRACTION}\b", "TIMESTAMP_ISO8601", False),
    _candidate(
        "YYYY-MM-dd HH:mm:ss.SSSZ",
        rf"\b{_YMD} {_HMS}{_DOT_FRACTION}(?:Z|{_OFFSET})\b",
        "TIMESTAMP_ISO8601",
        True,
    ),
    _candidate(
        "YYYY-MM-dd HH:mm:ss.SSSZZ",
        rf"\b{_YMD} {_HMS}{_DOT_FRACTION}{_OFFSET_COLON}\b",
        "TIMESTAMP_ISO8601",
        True,
    ),
    _candidate("YYYY-MM-dd HH:mm:ss.SSS", rf"\b{_YMD} {_HMS}{_DOT_FRACTION}\b", "TIMESTAMP_ISO8601", False),
    _candidate("YYYY-MM-dd HH:mm:ssZ", rf"\b{_YMD} {_HMS}(?:Z|{_OFFSET})\b", "TIMESTAMP_ISO8601", True),
    _candidate("YYYY-MM-dd HH:mm:ssZZ", rf"\b{_YMD} {_HMS}{_OFFSET_COLON}\b", "TIMESTAMP_ISO8601", True),
    _candidate("YYYY-MM-dd HH:mm:ss", rf"\b{_YMD} {_HMS}\b", "TIMESTAMP_ISO8601", False),
    _candidate(
        "ISO8601",
        rf"\b{_YMD}T{_HOUR}:{_MINUTE}(?::{_SECOND}(?:[.,][0-9]+)?)?(?P<tz>Z|[+-]{_HOUR2}:?{_MINUTE})?\b",
        "TIMESTAMP_ISO8601",
        None,
    ),
    _candidate(
        "EEE MMM dd YYYY HH:mm:ss zzz",
        rf"\b{_DAY} {_MONTH} {_MONTHDAY} {_YEAR} {_HOUR}:{_MINUTE}:{_SECOND} {_TZ_NAME}\b",
        "DATESTAMP_RFC822",
        True,
    ),
    _candidate(
        "EEE MMM dd YYYY HH:mm zzz",
        rf"\b{_DAY} {_MONTH} {_MONTHDAY} {_YEAR} {_HOUR}:{_MINUTE} {_TZ_NAME}\b",
        "DATESTAMP_RFC822",
        True,
    ),
    _candidate(
        "EEE, dd MMM YYYY HH:mm:ss ZZ",
        rf"\b{_DAY}, {_MONTHDAY} {_MONTH} {_YEAR} {_HOUR}:{_MINUTE}:{_SECOND} (?:Z|{_OFFSET_COLON})\b",
        "DATESTAMP_RFC2822",
        True,
    ),
    _candidate(
        "EEE, dd MMM YYYY HH:mm:ss Z",
        rf"\b{_DAY}, {_MONTHDAY} {_MONTH} {_YEAR} {_HOUR}:{_MINUTE}:{_SECOND} {_OFFSET}\b",
        "DATESTAMP_RFC2822",
        True,
    ),
    _candidate(
        "EEE, dd MMM YYYY HH:mm ZZ",
        rf"\b{_DAY}, {_MONTHDAY} {_MONTH} {_YEAR} {_HOUR}:{_MINUTE} (?:Z|{_OFFSET_COLON})\b",
        "DATESTAMP_RFC2822",
        True,
    ),
    _candidate(
        "EEE, dd MMM YYYY HH:mm Z",
        rf"\b{_DAY}, {_MONTHDAY} {_MONTH} {_YEAR} {_HOUR}:{_MINUTE} {_OFFSET}\b",
        "DATESTAMP_RFC2822",
        True,
    ),
    _candidate(
        "EEE MMM dd HH:mm:ss zzz YYYY",
        rf"\b{_DAY} {_MONTH} {_MONTHDAY} {_HOUR}:{_MINUTE}:{_SECOND} {_TZ_NAME} {_YEAR}\b",
        "DATESTAMP_OTHER",
        True,
    ),
    _candidate(
        "EEE MMM dd HH:mm zzz YYYY",
        rf"\b{_DAY} {_MONTH} {_MONTHDAY} {_HOUR}:{_MINUTE} {_TZ_NAME} {_YEAR}\b",
        "DATESTAMP_OTHER",
        True,
    ),
    _candidate(
        "YYYYMMddHHmmss",
        rf"\b20\d{{2}}{_MONTHNUM2}{_MONTHDAY2}{_HOUR2}{_MINUTE}{_SECOND}\b",
        "DATESTAMP_EVENTLOG",
        False,
    ),
    _candidate(
        "EEE MMM dd HH:mm:ss YYYY",
        rf"\b{_DAY} {_MONTH} {_MONTHDAY} {_HOUR}:{_MINUTE}:{_SECOND} {_YEAR}\b",
        "HTTPDERROR_DATE",
        False,
    ),
    _candidate(
        ("MMM dd HH:mm:ss.SSS", "MMM  d HH:mm:ss.SSS"),
        rf"\b{_MONTH} +{_MONTHDAY} {_HOUR}:{_MINUTE}:{_SECOND}{_DOT_FRACTION}\b",
        "SYSLOGTIMESTAMP",
        False,
    ),
    _candidate(
        ("MMM dd HH:mm:ss", "MMM  d HH:mm:ss"),
        rf"\b{_MONTH} +{_MONTHDAY} {_HOUR}:{_MINUTE}:{_SECOND}\b",
        "SYSLOGTIMESTAMP",
        False,
    ),
    _candidate(
        "dd/MMM/YYYY:HH:mm:ss Z",
        rf"\b{_MONTHDAY}/{_MONTH}/{_YEAR}:{_HOUR}:{_MINUTE}:{_SECOND} {_OFFSET}\b",
        "HTTPDATE",
        True,
    ),
    _candidate(
        "MMM dd, YYYY K:mm:ss a",
        rf"\b{_MONTH} {_MONTHDAY}, 20\d{{2}} {_HOUR}:{_MINUTE}:{_SECOND} (?:AM|PM)\b",
        "CATALINA_DATESTAMP",
        False,
    ),
    _candidate(
        ("MMM dd YYYY HH:mm:ss", "MMM  d YYYY HH:mm:ss"),
        rf"\b{_MONTH} +{_MONTHDAY} {_YEAR} {_HOUR}:{_MINUTE}:{_SECOND}\b",
        "CISCOTIMESTAMP",
        False,
    ),
    # Epoch based layouts denote an absolute instant
    _candidate("UNIX_MS", r"\b\d{13}\b", "POSINT", True),
    _candidate("UNIX", r"\b\d{10}\.\d{3,9}\b", "NUMBER", True),
    _candidate("UNIX", r"\b\d{10}\b", "POSINT", True),
    _candidate("TAI64N", r"\b[0-9A-Fa-f]{24}\b", "BASE16NUM", True),
)


@dataclass(slots=True, frozen=True)
class TimestampMatch:
    """A timestamp layout recognised in one value, or merged across samples."""

    grok_pattern_name: str
    date_formats: tuple[str, ...]
    has_timezone: bool
    candidate_index: int = -1
    span: Optional[tuple[int, int]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "grok_pattern_name": self.grok_pattern_name,
            "date_formats": list(self.date_formats),
            "has_timezone": self.has_timezone,
        }


class TimestampFormatCatalog:
    """Ordered registry of known timestamp layouts."""

    def __init__(self, candidates: Sequence[CandidateTimestampFormat] = ORDERED_CANDIDATE_FORMATS) -> None:
        if not candidates:
            raise ValueError("timestamp catalog must contain at least one format")
        self.candidates = tuple(candidates)

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self) -> Iterator[CandidateTimestampFormat]:
        return iter(self.candidates)

    def match(self, text: str) -> Optional[TimestampMatch]:
        """Return the first catalog entry found anywhere in ``text``."""

        for index, candidate in enumerate(self.candidates):
            found = candidate.regex.search(text)
            if found is not None:
                return self._to_match(index, candidate, found)
        return None

    def full_match(self, text: str, start_index: int = 0) -> Optional[TimestampMatch]:
        """Return the first entry, from ``start_index`` on, that covers the whole of ``text``."""

        for index in range(start_index, len(self.candidates)):
            candidate = self.candidates[index]
            found = candidate.regex.fullmatch(text)
            if found is not None:
                return self._to_match(index, candidate, found)
        return None

    def matches_candidate(self, text: str, index: int) -> Optional[TimestampMatch]:
        """Check ``text`` against the single entry at ``index``."""

        candidate = self.candidates[index]
        found = candidate.regex.fullmatch(text)
        if found is None:
            return None
        return self._to_match(index, candidate, found)

    def describe(self) -> list[dict[str, Any]]:
        return [
            {
                "index": index,
                "grok_pattern_name": candidate.grok_pattern_name,
                "date_formats": list(candidate.date_formats),
                "has_timezone": candidate.has_timezone,
            }
            for index, candidate in enumerate(self.candidates)
        ]

    @staticmethod
    def _to_match(index: int, candidate: CandidateTimestampFormat, found: re.Match[str]) -> TimestampMatch:
        return TimestampMatch(
            grok_pattern_name=candidate.grok_pattern_name,
            date_formats=candidate.date_formats,
            has_timezone=candidate.timezone_in(found),
            candidate_index=index,
            span=found.span(),
        )


DEFAULT_CATALOG = TimestampFormatCatalog()


def find_first_match(text: str) -> Optional[TimestampMatch]:
    return DEFAULT_CATALOG.match(text)


def find_first_full_match(text: str, start_index: int = 0) -> Optional[TimestampMatch]:
    return DEFAULT_CATALOG.full_match(text, start_index)


@dataclass(slots=True)
class _RunningFormat:
    """Format state of one surviving timestamp field candidate."""

    candidate_index: int
    grok_pattern_name: str
    date_formats: list[str] = field(default_factory=list)
    has_timezone: bool = True

    @classmethod
    def start(cls, match: TimestampMatch) -> "_RunningFormat":
        running = cls(match.candidate_index, match.grok_pattern_name)
        running.merge(match)
        return running

    def merge(self, match: TimestampMatch) -> None:
        for date_format in match.date_formats:
            if date_format not in self.date_formats:
                self.date_formats.append(date_format)
        self.has_timezone = self.has_timezone and match.has_timezone

    def to_match(self) -> TimestampMatch:
        return TimestampMatch(
            grok_pattern_name=self.grok_pattern_name,
            date_formats=tuple(self.date_formats),
            has_timezone=self.has_timezone,
            candidate_index=self.candidate_index,
        )


def _full_match_value(
    catalog: TimestampFormatCatalog, value: Any, index: Optional[int] = None
) -> Optional[TimestampMatch]:
    if not is_scalar(value):
        return None
    if index is None:
        return catalog.full_match(value_to_text(value))
    return catalog.matches_candidate(value_to_text(value), index)


def _single_shared_field(samples: Sequence[Mapping[str, Any]]) -> Optional[str]:
    names = {tuple(sample) for sample in samples}
    if len(names) == 1:
        only = next(iter(names))
        if len(only) == 1:
            return only[0]
    return None


def guess_timestamp_field(
    explanation: Explanation,
    samples: Sequence[Mapping[str, Any]],
    catalog: Optional[TimestampFormatCatalog] = None,
) -> Optional[tuple[str, TimestampMatch]]:
    """Find the one field whose values share a timestamp layout in every sample.

    Returns ``(field_name, TimestampMatch)`` or ``None`` when no field, or more
    than one field, is consistently a timestamp.
    """

    catalog = catalog or DEFAULT_CATALOG
    if not samples:
        explanation.add("No samples were supplied, so there is no timestamp field")
        return None

    first = samples[0]
    shared = _single_shared_field(samples)
    if shared is not None:
        explanation.add(f"Every sample contains only field [{shared}], so it is the only timestamp candidate")
        field_names = [shared]
    else:
        field_names = list(first)

    candidates: dict[str, _RunningFormat] = {}
    for name in field_names:
        match = _full_match_value(catalog, first.get(name))
        if match is None:
            continue
        explanation.add(
            f"First sample timestamp candidate field [{name}] matches format {list(match.date_formats)} "
            f"with grok pattern [{match.grok_pattern_name}]"
        )
        candidates[name] = _RunningFormat.start(match)

    for position, sample in enumerate(samples[1:], start=2):
        if not candidates:
            break
        for name in list(candidates):
            running = candidates[name]
            value = sample.get(name)
            if value is None:
                explanation.add(f"Dropping timestamp candidate field [{name}] as it is absent from sample {position}")
                del candidates[name]
                continue
            match = _full_match_value(catalog, value, running.candidate_index)
            if match is None:
                explanation.add(
                    f"Dropping timestamp candidate field [{name}] as its value [{value}] "
                    f"in sample {position} does not match grok pattern [{running.grok_pattern_name}] "
                    f"with formats {running.date_formats}"
                )
                del candidates[name]
                continue
            running.merge(match)

    if not candidates:
        explanation.add("No field holds a consistent timestamp across all samples")
        return None
    if len(candidates) > 1:
        explanation.add(f"Fields {sorted(candidates)} all hold consistent timestamps, so none is chosen")
        return None

    name, running = next(iter(candidates.items()))
    result = running.to_match()
    explanation.add(
        f"Guessing timestamp field is [{name}] with format {list(result.date_formats)} "
        f"and grok pattern [{result.grok_pattern_name}]"
    )
    logger.debug("Timestamp field [%s] uses grok pattern [%s]", name, result.grok_pattern_name)
    return name, result
