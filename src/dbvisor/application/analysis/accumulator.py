from __future__ import annotations

from dbvisor.application.analysis.formats import classify
from dbvisor.domain.models.analysis import (
    AnalysisResult,
    BlobValue,
    IntegerValue,
    NullValue,
    RealValue,
    ScalarValue,
    TextValue,
)


def column_key(table: str, column: str) -> str:
    return f"{table}.{column}"


class StatisticsAccumulator:
    """Single-writer counters for one analysis run."""

    def __init__(self) -> None:
        self._result = AnalysisResult()

    def result(self) -> AnalysisResult:
        return self._result

    def observe(self, table: str, column: str, value: ScalarValue) -> None:
        if isinstance(value, TextValue):
            self.observe_text(table, column, value.value)
        elif isinstance(value, (IntegerValue, RealValue)):
            self.observe_numeric()
        elif isinstance(value, BlobValue):
            self.observe_binary(len(value.value))
        elif isinstance(value, NullValue):
            self.observe_null()
        else:
            raise TypeError(f"Unsupported scalar value: {value!r}")

    def observe_text(self, table: str, column: str, value: str) -> None:
        result = self._result
        dist = result.type_distribution
        freq = result.char_frequency
        result.total_chars += len(value)
        for ch in value:
            code_point = ord(ch)
            freq[code_point] = freq.get(code_point, 0) + 1
            if ch.isdecimal():
                dist.numeric += 1
            elif ch.isalpha():
                dist.alphabetic += 1
            else:
                dist.special += 1

        formats = result.column_formats.setdefault(column_key(table, column), [])
        for label in classify(value, formats):
            if label not in formats:
                formats.append(label)

    def observe_numeric(self) -> None:
        self._result.type_distribution.numeric += 1

    def observe_binary(self, byte_length: int) -> None:
        self._result.total_chars += byte_length
        self._result.type_distribution.unknown += 1

    def observe_null(self) -> None:
        return None
