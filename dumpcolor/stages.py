# dumpcolor/stages.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .core import DataFragment, IpHeader, Record, Stage, TcpHeader
from .palette import ColorTable, decode_span, paint
from .utils import log

REPRESENTATIONS = ("approximation", "hex")


def render_packet(approx: str, hex_text: str, representation: str) -> Optional[str]:
    """Pick the line to print for one reassembled packet; None drops it."""
    if representation == "approximation":
        return approx
    if representation == "hex":
        return hex_text
    log.warning(f"Data ignored: unknown representation {representation!r}")
    return None


@dataclass
class ReassemblyStage(Stage):
    """
    Stitches the hex rows of one packet into a single output line.

    A TCP header opens a packet and announces the host pair; the rows that
    follow are buffered until the next header (IP or TCP) or end of input,
    at which point the buffered packet is rendered and the buffers cleared.
    feed() and flush() yield text lines without trailing newline.
    """
    representation: str = "approximation"
    colors: ColorTable = field(default_factory=ColorTable)
    use_color: bool = True

    hex_buffer: List[str] = field(default_factory=list)
    approx_buffer: List[str] = field(default_factory=list)
    packet_open: bool = False

    # counters
    seen: int = 0
    fragments: int = 0
    orphans: int = 0
    packets: int = 0
    banners: int = 0
    dropped: int = 0

    @property
    def pending(self) -> bool:
        return bool(self.hex_buffer)

    def feed(self, rec: Record) -> Iterable[str]:
        self.seen += 1
        out: List[str] = []
        # flush on boundary, then apply the record to the emptied buffers
        if self.pending and not isinstance(rec, DataFragment):
            out.extend(self._emit())
        out.extend(self._apply(rec))
        return out

    def flush(self) -> Iterable[str]:
        if not self.pending:
            return []
        self.packet_open = False
        return self._emit()

    def _apply(self, rec: Record) -> List[str]:
        if isinstance(rec, DataFragment):
            if not self.packet_open:
                self.orphans += 1
                log.debug(f"data row outside of a packet ignored: {rec.hex!r}")
                return []
            self.hex_buffer.append(" " + decode_span(rec.hex))
            self.approx_buffer.append(decode_span(rec.approx))
            self.fragments += 1
            return []
        if isinstance(rec, TcpHeader):
            self.packet_open = True
            self.banners += 1
            return ["", self.banner(rec)]
        if isinstance(rec, IpHeader):
            self.packet_open = False
            return []
        raise TypeError(f"Unsupported record type: {type(rec)}")

    def banner(self, rec: TcpHeader) -> str:
        src = paint(decode_span(rec.source.host), self.colors.color_of(rec.source.host), self.use_color)
        dst = paint(decode_span(rec.dest.host), self.colors.color_of(rec.dest.host), self.use_color)
        return f"{src} -> {dst}"

    def _emit(self) -> List[str]:
        hex_text = "".join(self.hex_buffer)
        approx = "".join(self.approx_buffer)
        self.hex_buffer.clear()
        self.approx_buffer.clear()
        self.packets += 1
        line = render_packet(approx, hex_text, self.representation)
        if line is None:
            self.dropped += 1
            return []
        return [line]

    def stats(self) -> Dict[str, int]:
        return {
            "seen": self.seen,
            "fragments": self.fragments,
            "orphans": self.orphans,
            "packets": self.packets,
            "banners": self.banners,
            "dropped": self.dropped,
            "hosts": len(self.colors),
        }
