# Boundary decoding and content extraction for upstream replies.
#  - decode_text_body(): raw text -> JsonBody | TextBody (tried once, here only)
#  - interpret(): JsonBody | TextBody -> Interpretation (content, model, usage)

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

from .types import EndpointShape, JsonBody, TextBody, AudioBody, UpstreamResponse

CONTENT_FIELDS = ("text", "content", "response", "message")
IDENTITY_FIELDS = ("model_name", "model")


@dataclass(frozen=True)
class Interpretation:
    content: Optional[str]
    reported_model: Optional[str]
    tokens_used: Optional[int]
    incomplete: bool


def decode_text_body(raw: str) -> UpstreamResponse:
    """
    Upstream text replies arrive as a JSON object, a JSON-encoded string
    (sometimes wrapping another JSON object) or plain text.
    """
    value: Any = raw
    for _ in range(2):
        if not isinstance(value, str):
            break
        try:
            value = json.loads(value)
        except ValueError:
            break

    if isinstance(value, dict):
        return JsonBody(data=value)
    if isinstance(value, str):
        return TextBody(text=value)
    if value is None:
        return TextBody(text="")
    return TextBody(text=json.dumps(value, ensure_ascii=False))


def decode_response(shape: EndpointShape, content: bytes, text: str) -> UpstreamResponse:
    if shape is EndpointShape.TEXT_AUDIO:
        return AudioBody(payload=content)
    return decode_text_body(text)


def stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def extract_content(data: dict) -> Optional[str]:
    for field in CONTENT_FIELDS:
        value = data.get(field)
        if not value:
            continue
        text = stringify(value)
        if text.strip():
            return text
    return None


def reported_model(data: dict) -> Optional[str]:
    for field in IDENTITY_FIELDS:
        value = data.get(field)
        if value:
            return stringify(value)
    return None


def usage_total(data: dict) -> Optional[int]:
    usage = data.get("usage")
    if not isinstance(usage, dict):
        return None
    total = usage.get("total_tokens")
    # bool is an int subclass
    if isinstance(total, int) and not isinstance(total, bool) and total > 0:
        return total
    return None


def interpret(body: UpstreamResponse) -> Interpretation:
    if isinstance(body, TextBody):
        content = body.text if body.text.strip() else None
        return Interpretation(content=content, reported_model=None, tokens_used=None, incomplete=False)

    if isinstance(body, JsonBody):
        content = extract_content(body.data)
        model = reported_model(body.data)
        return Interpretation(
            content=content,
            reported_model=model,
            tokens_used=usage_total(body.data),
            incomplete=content is None and model is not None,
        )

    raise TypeError(f"cannot interpret {type(body).__name__} as text")
