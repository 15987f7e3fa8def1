# dumpcolor/pipeline.py
from __future__ import annotations

from typing import BinaryIO, Dict, Iterable, Iterator, Optional, TextIO

from .config import Settings
from .grammar import RecordDecoder
from .palette import ColorTable, color_enabled
from .stages import ReassemblyStage
from .utils import log


def iter_lines(stream: BinaryIO) -> Iterator[bytes]:
    """Yield raw lines (newline kept) with CRLF folded to LF."""
    for raw in stream:
        if raw.endswith(b"\r\n"):
            raw = raw[:-2] + b"\n"
        yield raw


def build_stage(settings: Settings, out_stream: TextIO,
                colors: Optional[ColorTable] = None) -> ReassemblyStage:
    return ReassemblyStage(
        representation=settings.representation,
        colors=colors if colors is not None else ColorTable(),
        use_color=color_enabled(settings.color, out_stream),
    )


def colorize_stream(
    in_stream: BinaryIO,
    out_stream: TextIO,
    settings: Optional[Settings] = None,
    colors: Optional[ColorTable] = None,
) -> Dict[str, object]:
    """
    Read tcpdump -X text from in_stream and write the per-connection
    rendering to out_stream. Output is flushed before the next input line is
    read. Raises Malformed on the first line that fits no layout; anything
    written before that stands.
    """
    settings = settings or Settings()
    stage = build_stage(settings, out_stream, colors)
    decoder = RecordDecoder()

    lines_in = 0
    lines_out = 0

    def write(lines: Iterable[str]) -> None:
        nonlocal lines_out
        for line in lines:
            out_stream.write(line + "\n")
            lines_out += 1
        out_stream.flush()

    for raw in iter_lines(in_stream):
        lines_in += 1
        for rec in decoder.feed(raw):
            write(stage.feed(rec))

    for rec in decoder.finish():
        write(stage.feed(rec))
    write(stage.flush())

    stats = stage.stats()
    log.info(f"[done] lines_in={lines_in} records={decoder.records} lines_out={lines_out} stats={stats}")
    return {"lines_in": lines_in, "records": decoder.records, "lines_out": lines_out, "stats": stats}
