from __future__ import annotations

import io

import pytest

from dumpcolor.palette import PALETTE, RESET, ColorTable, color_enabled, paint


def test_color_of_is_idempotent() -> None:
    table = ColorTable()
    assert table.color_of(b"192.168.0.10") == 0
    assert table.color_of(b"192.168.0.10") == 0
    assert len(table) == 1


def test_slots_follow_first_seen_order_and_wrap() -> None:
    table = ColorTable()
    hosts = [f"10.0.0.{i}".encode() for i in range(8)]
    assert [table.color_of(h) for h in hosts] == [0, 1, 2, 3, 4, 5, 0, 1]
    # earlier hosts keep their slot after wraparound
    assert table.color_of(hosts[2]) == 2


def test_slots_depend_on_arrival_not_content() -> None:
    a, b = ColorTable(), ColorTable()
    a.color_of(b"zeta")
    a.color_of(b"alpha")
    b.color_of(b"alpha")
    b.color_of(b"zeta")
    assert a.slots == {"zeta": 0, "alpha": 1}
    assert b.slots == {"alpha": 0, "zeta": 1}


def test_paint_wraps_text_in_palette_escape() -> None:
    assert paint("10.0.0.1", 0) == "\033[31m10.0.0.1" + RESET
    assert paint("10.0.0.1", len(PALETTE) + 5) == "\033[36m10.0.0.1" + RESET
    assert paint("10.0.0.1", 3, enabled=False) == "10.0.0.1"


class _Tty(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_color_enabled_modes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NO_COLOR", raising=False)
    assert color_enabled("always", io.StringIO())
    assert not color_enabled("never", _Tty())
    assert color_enabled("auto", _Tty())
    assert not color_enabled("auto", io.StringIO())

    monkeypatch.setenv("NO_COLOR", "1")
    assert not color_enabled("auto", _Tty())
    assert color_enabled("always", io.StringIO())


def test_color_enabled_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError):
        color_enabled("sometimes", io.StringIO())
