# dumpcolor/grammar.py
"""
Line grammar for `tcpdump -v -X` output.

Small byte-level combinators. A parser is called as ``parser(data, complete)``
and returns ``(rest, value)``. In streaming mode (``complete=False``) running
out of bytes raises ``Incomplete`` so the caller can wait for more input;
in complete mode the end of ``data`` is the end of the line.

Three line shapes, tried in this order:

  00:55:30.853902 IP (tos 0x0, ttl 63, id 60304, ...)
      192.168.0.10.8008 > 192.168.0.20.50314: Flags [.], cksum 0x0e2e ...
          0x0000:  4500 0135 eb92 4000 3f06 cdc1 c0a8 0014  E..5..@.?.......
"""
from __future__ import annotations

from typing import Any, Callable, Iterator, List, Optional, Tuple

from .core import (
    HEX_COLUMN_WIDTH, DataFragment, HostPort, IpHeader, Malformed, Record, TcpHeader,
)
from .utils import get_logger

log = get_logger("grammar")

Parser = Callable[[bytes, bool], Tuple[bytes, Any]]

_WHITESPACE = frozenset(b" \t\n\r\x0b\x0c")


class Incomplete(Exception):
    """More input is needed before the line can be classified."""

    def __init__(self, needed: Optional[int] = None):
        self.needed = needed
        super().__init__("incomplete input" if needed is None else f"needs {needed} more byte(s)")


class _Backtrack(Exception):
    """This branch does not match; alt() moves on to the next one."""


# ----------------------------
# Combinators
# ----------------------------

def tag(literal: bytes) -> Parser:
    def run(data: bytes, complete: bool) -> Tuple[bytes, bytes]:
        n = len(literal)
        head = data[:n]
        if head == literal:
            return data[n:], head
        if len(head) < n and literal.startswith(head) and not complete:
            raise Incomplete(n - len(head))
        raise _Backtrack()
    return run


def take(count: int) -> Parser:
    """Fixed-width field; never reaches past the end of the current line."""
    def run(data: bytes, complete: bool) -> Tuple[bytes, bytes]:
        if b"\n" in data[:count]:
            raise _Backtrack()
        if len(data) < count:
            if not complete:
                raise Incomplete(count - len(data))
            raise _Backtrack()
        return data[count:], data[:count]
    return run


def take_while1(pred: Callable[[int], bool]) -> Parser:
    def run(data: bytes, complete: bool) -> Tuple[bytes, bytes]:
        i = 0
        for byte in data:
            if not pred(byte):
                break
            i += 1
        else:
            # ran off the end: a streaming caller cannot know the field is over
            if not complete:
                raise Incomplete(1)
        if i == 0:
            raise _Backtrack()
        return data[i:], data[:i]
    return run


def preceded(first: Parser, second: Parser) -> Parser:
    def run(data: bytes, complete: bool):
        rest, _ = first(data, complete)
        return second(rest, complete)
    return run


def pair(first: Parser, second: Parser) -> Parser:
    def run(data: bytes, complete: bool):
        rest, a = first(data, complete)
        rest, b = second(rest, complete)
        return rest, (a, b)
    return run


def separated_pair(first: Parser, sep: Parser, second: Parser) -> Parser:
    return pair(first, preceded(sep, second))


def mapped(parser: Parser, fn: Callable[[Any], Any]) -> Parser:
    def run(data: bytes, complete: bool):
        rest, value = parser(data, complete)
        return rest, fn(value)
    return run


def alt(*parsers: Parser) -> Parser:
    def run(data: bytes, complete: bool):
        for p in parsers:
            try:
                return p(data, complete)
            except _Backtrack:
                continue
        raise Malformed(data)
    return run


# ----------------------------
# Fields
# ----------------------------

not_whitespace = take_while1(lambda b: b not in _WHITESPACE)
not_linebreak = take_while1(lambda b: b != 0x0A)
not_colon = take_while1(lambda b: b != 0x3A and b != 0x0A)

timestamp = not_whitespace
frame_info = not_linebreak
tcp_info = not_linebreak

ip_line = mapped(
    separated_pair(timestamp, tag(b" IP "), frame_info),
    lambda v: IpHeader(timestamp=v[0], frame_info=v[1]),
)

# dest is scanned up to ':' since the info field may contain spaces
tcp_source = mapped(preceded(tag(b"    "), not_whitespace), HostPort.parse)
tcp_dest = mapped(preceded(tag(b" > "), not_colon), HostPort.parse)

tcp_line = mapped(
    pair(pair(tcp_source, tcp_dest), tcp_info),
    lambda v: TcpHeader(source=v[0][0], dest=v[0][1], info=v[1]),
)

offset = not_colon
hex_column = preceded(tag(b":  "), take(HEX_COLUMN_WIDTH))
approximation = preceded(tag(b"  "), not_linebreak)

data_line = mapped(
    pair(pair(offset, hex_column), approximation),
    lambda v: DataFragment(hex=v[0][1], approx=v[1]),
)

tcpdump_line = alt(ip_line, tcp_line, data_line)


def parse_record(line: bytes) -> Record:
    """Classify one whole line (newline already removed)."""
    rest, record = tcpdump_line(line, True)
    if rest:
        raise Malformed(line, "trailing bytes after record")
    return record


class RecordDecoder:
    """
    Incremental decoder over a growable buffer. feed() accepts arbitrary
    chunks and yields every record whose line is complete; finish() parses
    a last line that had no newline.
    """

    def __init__(self) -> None:
        self._buf = bytearray()
        self.records = 0

    @property
    def pending(self) -> bytes:
        return bytes(self._buf)

    def feed(self, chunk: bytes) -> Iterator[Record]:
        self._buf += chunk
        while self._buf:
            if self._buf[0] == 0x0A:
                del self._buf[:1]
                continue
            data = bytes(self._buf)
            try:
                rest, record = tcpdump_line(data, False)
            except Incomplete as e:
                log.debug(f"waiting for input ({e}), buffered={len(data)}")
                return
            except Malformed as e:
                # report the offending line, not the whole buffer
                line = data.split(b"\n", 1)[0]
                raise Malformed(line, e.reason) from None
            # rest starts with the line's newline
            del self._buf[:len(data) - len(rest) + 1]
            self.records += 1
            yield record

    def finish(self) -> List[Record]:
        out: List[Record] = []
        if self._buf:
            line = bytes(self._buf)
            self._buf.clear()
            out.append(parse_record(line))
            self.records += 1
        return out
