# SPDX-License-Identifier: Apache-2.0
"""Turn status-update response bodies into one confirmation message.

The remote status endpoint sometimes answers with several JSON objects
written back to back (``{...}{...}``) instead of one document.
"""
from __future__ import annotations

import json
import re

from pydantic import BaseModel

_FRAGMENT_BOUNDARY = re.compile(r"\}\s*\{")


class ConfirmationMessage(BaseModel):
    ok: bool = True
    message: str
    fragments: list[dict] = []


def _as_fragments(value) -> list[dict]:
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, dict)]
    return []


def split_json_fragments(raw: str) -> list[dict]:
    """Decode every JSON object found in ``raw``, in order."""
    text = raw.strip()
    if not text:
        return []
    try:
        return _as_fragments(json.loads(text))
    except json.JSONDecodeError:
        pass

    decoder = json.JSONDecoder()
    fragments: list[dict] = []
    pos = 0
    try:
        while pos < len(text):
            value, end = decoder.raw_decode(text, pos)
            fragments.extend(_as_fragments(value))
            pos = end
            while pos < len(text) and text[pos] in " \t\r\n,":
                pos += 1
        return fragments
    except json.JSONDecodeError:
        pass

    # Last resort: cut at every "}{" and keep whatever pieces parse.
    fragments = []
    pieces = _FRAGMENT_BOUNDARY.split(text)
    for i, piece in enumerate(pieces):
        if i > 0:
            piece = "{" + piece
        if i < len(pieces) - 1:
            piece = piece + "}"
        try:
            fragments.extend(_as_fragments(json.loads(piece)))
        except json.JSONDecodeError:
            continue
    return fragments


def normalize_status_response(raw: str, default_message: str = "Status updated successfully.") -> ConfirmationMessage:
    """Merge every fragment's message into one.

    The store has already accepted the write when this runs, so an empty or
    unparseable body falls back to ``default_message``. Fragments reporting
    ``"status": "error"`` are kept in the message and mark ``ok`` False.
    """
    fragments = split_json_fragments(raw or "")
    messages: list[str] = []
    for fragment in fragments:
        text = str(fragment.get("message") or "").strip()
        if text and text not in messages:
            messages.append(text)
    ok = not any(str(f.get("status", "")).lower() == "error" for f in fragments)
    return ConfirmationMessage(ok=ok, message=" ".join(messages) or default_message, fragments=fragments)
