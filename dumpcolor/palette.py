# dumpcolor/palette.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, TextIO

PALETTE = ("red", "green", "yellow", "blue", "magenta", "cyan")

ANSI = {
    "red": "\033[31m", "green": "\033[32m", "yellow": "\033[33m",
    "blue": "\033[34m", "magenta": "\033[35m", "cyan": "\033[36m",
}
RESET = "\033[0m"

COLOR_MODES = ("auto", "always", "never")


def decode_span(span: bytes) -> str:
    """Byte-for-char decoding; tcpdump text is ASCII but never trust it."""
    return span.decode("latin-1")


@dataclass
class ColorTable:
    """
    First-seen host -> palette slot. Slots are handed out in arrival order of
    distinct hosts and wrap around the palette; an entry is never reassigned.
    """
    slots: Dict[str, int] = field(default_factory=dict)

    def color_of(self, host: bytes) -> int:
        key = decode_span(host)
        slot = self.slots.get(key)
        if slot is None:
            slot = len(self.slots) % len(PALETTE)
            self.slots[key] = slot
        return slot

    def __len__(self) -> int:
        return len(self.slots)


def paint(text: str, slot: int, enabled: bool = True) -> str:
    if not enabled:
        return text
    return f"{ANSI[PALETTE[slot % len(PALETTE)]]}{text}{RESET}"


def color_enabled(mode: str, stream: TextIO) -> bool:
    if mode == "always":
        return True
    if mode == "never":
        return False
    if mode != "auto":
        raise ValueError(f"Unknown color mode: {mode!r} (expected one of {', '.join(COLOR_MODES)})")
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(callable(isatty) and isatty())
