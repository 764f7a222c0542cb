from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class NullValue:
    pass


@dataclass(frozen=True, slots=True)
class IntegerValue:
    value: int


@dataclass(frozen=True, slots=True)
class RealValue:
    value: float


@dataclass(frozen=True, slots=True)
class TextValue:
    value: str


@dataclass(frozen=True, slots=True)
class BlobValue:
    value: bytes


ScalarValue = Union[NullValue, IntegerValue, RealValue, TextValue, BlobValue]

NULL = NullValue()


def to_scalar(raw: object) -> ScalarValue:
    """Wrap a value returned by sqlite3 in its tagged variant."""
    if raw is None:
        return NULL
    if isinstance(raw, int):
        return IntegerValue(int(raw))
    if isinstance(raw, float):
        return RealValue(raw)
    if isinstance(raw, str):
        return TextValue(raw)
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return BlobValue(bytes(raw))
    raise TypeError(f"Unsupported SQLite value type: {type(raw).__name__}")


@dataclass(slots=True)
class TypeDistribution:
    numeric: int = 0
    alphabetic: int = 0
    special: int = 0
    unknown: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "numeric": self.numeric,
            "alphabetic": self.alphabetic,
            "special": self.special,
            "unknown": self.unknown,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TypeDistribution:
        return cls(
            numeric=int(data.get("numeric", 0)),
            alphabetic=int(data.get("alphabetic", data.get("alphabets", 0))),
            special=int(data.get("special", 0)),
            unknown=int(data.get("unknown", 0)),
        )


@dataclass(slots=True)
class AnalysisResult:
    """Content statistics gathered by one complete scan of a database.

    ``char_frequency`` is keyed by Unicode code point. ``column_formats`` maps
    ``"table.column"`` to the format labels detected for that column, in
    detection order and without duplicates.
    """

    total_chars: int = 0
    type_distribution: TypeDistribution = field(default_factory=TypeDistribution)
    char_frequency: dict[int, int] = field(default_factory=dict)
    column_formats: dict[str, list[str]] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return (
            self.total_chars == 0
            and not self.char_frequency
            and not self.column_formats
            and self.type_distribution == TypeDistribution()
        )

    def top_characters(self, limit: int = 10) -> list[tuple[str, int]]:
        ranked = sorted(self.char_frequency.items(), key=lambda item: (-item[1], item[0]))
        return [(chr(code_point), count) for code_point, count in ranked[:limit]]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_chars": self.total_chars,
            "type_distribution": self.type_distribution.to_dict(),
            "char_frequency": {str(k): v for k, v in sorted(self.char_frequency.items())},
            "column_formats": {k: list(v) for k, v in self.column_formats.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisResult:
        raw_freq = data.get("char_frequency") or {}
        raw_formats = data.get("column_formats") or {}
        return cls(
            total_chars=int(data.get("total_chars", 0)),
            type_distribution=TypeDistribution.from_dict(data.get("type_distribution") or {}),
            char_frequency={int(k): int(v) for k, v in raw_freq.items()},
            column_formats={str(k): [str(label) for label in v] for k, v in raw_formats.items()},
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=True)

    @classmethod
    def from_json(cls, raw: str) -> AnalysisResult:
        parsed = json.loads(raw)
        if not isinstance(parsed, dict):
            raise ValueError("Analysis result JSON must be an object.")
        return cls.from_dict(parsed)


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    target: str
    percentage: float
    processed: int
    total: int
    eta_seconds: int
    throughput: float
    is_finished: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "target": self.target,
            "percentage": self.percentage,
            "processed": self.processed,
            "total": self.total,
            "eta_seconds": self.eta_seconds,
            "throughput": self.throughput,
            "is_finished": self.is_finished,
        }


@dataclass(frozen=True, slots=True)
class AnalysisEvent:
    """One message on the progress stream: ``progress`` or a run lifecycle kind."""

    kind: str
    target: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "target": self.target, **self.payload}
