"""Structured-output parsing for AI replies.

A reply is parsed strictly first. If that fails, exactly one best-effort
extraction of the first balanced ``{...}`` / ``[...]`` region is tried, and
whatever comes out must then validate against a pydantic schema.
"""
from __future__ import annotations

import json
import re
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from jobassist.errors import ProviderMalformedResponse

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_PAIRS = {"{": "}", "[": "]"}


def strip_code_fence(text: str) -> str:
    return _FENCE_RE.sub("", text.strip()).strip()


def find_balanced_region(text: str) -> str | None:
    """Return the first balanced brace/bracket region of *text*, or None.

    Brackets inside JSON string literals (including escaped quotes) are
    ignored while counting.
    """
    start = -1
    for i, ch in enumerate(text):
        if ch in _PAIRS:
            start = i
            break
    if start == -1:
        return None

    stack: list[str] = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _PAIRS:
            stack.append(_PAIRS[ch])
        elif ch in ("}", "]"):
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return text[start:i + 1]
    return None


def extract_json(text: str, provider: str = "") -> Any:
    """Decode JSON from an AI reply, allowing one extraction attempt."""
    if not text or not text.strip():
        raise ProviderMalformedResponse("empty reply", provider)

    cleaned = strip_code_fence(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    region = find_balanced_region(cleaned)
    if region is None:
        raise ProviderMalformedResponse("no JSON object or array in reply", provider)
    try:
        return json.loads(region)
    except json.JSONDecodeError as exc:
        raise ProviderMalformedResponse(f"invalid JSON after extraction: {exc}", provider) from exc


def validate(data: Any, schema: Any, provider: str = "") -> Any:
    """Validate decoded *data* against a pydantic model or type.

    Returns plain Python data (dicts / lists) in the schema's shape.
    """
    try:
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return schema.model_validate(data).model_dump()
        adapter = TypeAdapter(schema)
        return adapter.dump_python(adapter.validate_python(data))
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(x) for x in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()[:5]
        ]
        raise ProviderMalformedResponse(
            "schema validation failed: " + "; ".join(errors), provider
        ) from exc


def parse_structured(text: str, schema: Any, provider: str = "") -> Any:
    return validate(extract_json(text, provider), schema, provider)
