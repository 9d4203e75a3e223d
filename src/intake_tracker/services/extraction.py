"""Locate and validate the JSON payload in an inference completion."""

import json
import re
from dataclasses import dataclass

from pydantic import ValidationError

from intake_tracker.domain.errors import MalformedAiResponse, NoJsonFound
from intake_tracker.domain.intake import LEDGER_ADAPTER, Ledger

STAGE_PARSE = "parse"
STAGE_CODE_BLOCK = "code-block-parse"
STAGE_EXTRACTION = "json-extraction"
STAGE_SCHEMA = "schema-validation"

_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_BRACE_SPAN = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class ExtractedJson:
    """JSON candidate text and the strategy that produced it."""

    text: str
    stage: str


def extract_json(raw_text: str) -> ExtractedJson:
    """Return the first JSON candidate found in a completion.

    Strategies run from strictest to loosest: the whole text, the first
    fenced code block, then the greedy span between the first ``{`` and
    the last ``}``. The last strategy does not verify the span parses.
    """
    if _parses(raw_text):
        return ExtractedJson(text=raw_text, stage=STAGE_PARSE)

    block = _CODE_BLOCK.search(raw_text)
    if block:
        inner = block.group(1).strip()
        if _parses(inner):
            return ExtractedJson(text=inner, stage=STAGE_CODE_BLOCK)

    span = _BRACE_SPAN.search(raw_text)
    if span:
        return ExtractedJson(text=span.group(0), stage=STAGE_EXTRACTION)

    raise NoJsonFound


def validate_fragment(json_text: str, stage: str = STAGE_EXTRACTION) -> Ledger:
    """Decode a JSON candidate into a ledger fragment.

    ``stage`` names the extraction strategy that produced the text so parse
    failures report where the candidate came from.
    """
    try:
        payload = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise MalformedAiResponse(stage, str(exc)) from exc

    if not isinstance(payload, dict):
        raise MalformedAiResponse(
            STAGE_SCHEMA, f"expected an object, got {type(payload).__name__}"
        )
    if not payload:
        raise MalformedAiResponse(STAGE_SCHEMA, "no date entries in response")

    try:
        return LEDGER_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise MalformedAiResponse(STAGE_SCHEMA, _describe(exc)) from exc


def parse_completion(raw_text: str) -> Ledger:
    """Extract and validate a fragment from raw completion text."""
    candidate = extract_json(raw_text)
    return validate_fragment(candidate.text, candidate.stage)


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)
