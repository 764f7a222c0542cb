from __future__ import annotations

import json

import pytest

from dbvisor.domain.models.analysis import AnalysisResult, TypeDistribution


def test_json_uses_string_code_point_keys() -> None:
    result = AnalysisResult(
        total_chars=3,
        type_distribution=TypeDistribution(alphabetic=2, special=1),
        char_frequency={ord("é"): 2, ord("!"): 1},
        column_formats={"users.email": ["Email"]},
    )

    payload = json.loads(result.to_json())

    assert payload["char_frequency"] == {"33": 1, "233": 2}
    assert payload["type_distribution"] == {"numeric": 0, "alphabetic": 2, "special": 1, "unknown": 0}
    assert AnalysisResult.from_json(result.to_json()) == result


def test_from_dict_accepts_legacy_alphabet_key() -> None:
    result = AnalysisResult.from_dict(
        {"total_chars": 5, "type_distribution": {"numeric": 1, "alphabets": 4}}
    )

    assert result.type_distribution.alphabetic == 4
    assert result.char_frequency == {}
    assert result.column_formats == {}


def test_from_json_rejects_non_object() -> None:
    with pytest.raises(ValueError):
        AnalysisResult.from_json("[1, 2, 3]")


def test_top_characters_breaks_ties_by_code_point() -> None:
    result = AnalysisResult(char_frequency={ord("b"): 2, ord("a"): 2, ord("c"): 5})

    assert result.top_characters(2) == [("c", 5), ("a", 2)]


def test_default_result_is_empty() -> None:
    assert AnalysisResult().is_empty()
    assert not AnalysisResult(total_chars=1).is_empty()
