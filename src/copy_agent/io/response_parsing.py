"""Shared utilities for parsing generation service responses."""

from __future__ import annotations

import json
from typing import Any


def extract_response_text(response: Any) -> str:
    """Extract text content from an OpenAI Responses API response."""
    data = response.model_dump() if hasattr(response, "model_dump") else {}
    output = data.get("output", []) if isinstance(data, dict) else []
    chunks: list[str] = []
    for item in output:
        if not isinstance(item, dict):
            continue
        for content in item.get("content") or []:
            if not isinstance(content, dict):
                continue
            text = content.get("text")
            if text:
                chunks.append(str(text))
    return "\n".join(chunks)


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract a JSON object from response text.

    Handles:
    - Plain JSON
    - JSON wrapped in markdown code blocks (```json ... ```)
    - JSON embedded in other text (first decodable object wins)

    Raises:
        ValueError: If no JSON object can be extracted.
    """
    cleaned = text.strip()

    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
        cleaned = cleaned.strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    decoder = json.JSONDecoder()
    for idx, char in enumerate(cleaned):
        if char != "{":
            continue
        try:
            obj, _end = decoder.raw_decode(cleaned[idx:])
        except json.JSONDecodeError:
            continue
        if isinstance(obj, dict):
            return obj

    raise ValueError("Could not parse JSON object from response text.")
