"""Candidate parsing: fence stripping, JSON decoding, object requirement."""
import json

import pytest

from services.program_framework.parsing import ParsedOk, ParseFailure, parse_candidate, strip_code_fence


def test_plain_json_object():
    result = parse_candidate('{"name": "Program"}')
    assert isinstance(result, ParsedOk)
    assert result.candidate == {"name": "Program"}


@pytest.mark.parametrize("raw", [
    '```json\n{"name": "Program"}\n```',
    '```\n{"name": "Program"}\n```',
    '  ```json{"name": "Program"}```  ',
])
def test_code_fences_are_stripped(raw):
    result = parse_candidate(raw)
    assert isinstance(result, ParsedOk)
    assert result.candidate["name"] == "Program"


def test_strip_leaves_unfenced_text_alone():
    assert strip_code_fence('{"a": 1}') == '{"a": 1}'


@pytest.mark.parametrize("raw,reason", [
    ("", "empty"),
    ("   ", "empty"),
    ("Here is your program!", "invalid JSON"),
    ('{"name": "Program"', "invalid JSON"),
    ("[1, 2, 3]", "JSON object"),
    ('"program"', "JSON object"),
])
def test_failures_carry_a_reason(raw, reason):
    result = parse_candidate(raw)
    assert isinstance(result, ParseFailure)
    assert reason in result.reason


def test_non_string_input_is_a_failure():
    assert isinstance(parse_candidate(None), ParseFailure)


def test_round_trips_a_full_candidate(candidate):
    result = parse_candidate(f"```json\n{json.dumps(candidate)}\n```")
    assert result.candidate == candidate
