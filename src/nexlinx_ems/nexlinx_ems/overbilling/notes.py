from __future__ import annotations

from typing import Optional

ANTI_OVERBILLING_TAG = "ANTI-OVERBILLING"


def append_note(notes: Optional[str], tag: str, message: str) -> str:
    entry = f"{tag}: {message}"
    if not notes:
        return entry
    return f"{notes} | {entry}"
