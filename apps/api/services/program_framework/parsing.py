"""
Candidate parsing.

The generator is asked for bare JSON but often wraps it in a markdown code
fence; strip that, decode, and require an object.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Union

_LEADING_FENCE = re.compile(r"^```[a-z]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```$")


@dataclass(frozen=True)
class ParsedOk:
    candidate: Dict[str, Any]


@dataclass(frozen=True)
class ParseFailure:
    reason: str


ParseResult = Union[ParsedOk, ParseFailure]


def strip_code_fence(raw_text: str) -> str:
    text = raw_text.strip()
    text = _LEADING_FENCE.sub("", text)
    text = _TRAILING_FENCE.sub("", text)
    return text.strip()


def parse_candidate(raw_text: str) -> ParseResult:
    if not isinstance(raw_text, str) or not raw_text.strip():
        return ParseFailure("empty response")

    try:
        decoded = json.loads(strip_code_fence(raw_text))
    except json.JSONDecodeError as e:
        return ParseFailure(f"invalid JSON: {e.msg} at line {e.lineno} column {e.colno}")

    if not isinstance(decoded, dict):
        return ParseFailure(f"expected a JSON object, got {type(decoded).__name__}")
    return ParsedOk(decoded)
