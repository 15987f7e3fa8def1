# dumpcolor/core.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Union

HEX_COLUMN_WIDTH = 39  # 8 groups of 4 hex digits, 7 single spaces


class Malformed(ValueError):
    """A line (or address token) that fits none of the tcpdump -X layouts."""

    def __init__(self, data: bytes, reason: str = "no grammar matched"):
        self.data = bytes(data)
        self.reason = reason
        super().__init__(f"{reason}: {self.data!r}")


@dataclass(frozen=True)
class HostPort:
    host: bytes
    port: bytes

    @classmethod
    def parse(cls, token: bytes) -> "HostPort":
        # hosts are dotted themselves, the port is after the last dot
        cut = token.rfind(b".")
        if cut < 0:
            raise Malformed(token, "address without port separator")
        return cls(host=token[:cut], port=token[cut + 1:])


@dataclass(frozen=True)
class IpHeader:
    timestamp: bytes
    frame_info: bytes


@dataclass(frozen=True)
class TcpHeader:
    source: HostPort
    dest: HostPort
    info: bytes  # starts with ':'


@dataclass(frozen=True)
class DataFragment:
    hex: bytes  # always HEX_COLUMN_WIDTH bytes
    approx: bytes


Record = Union[IpHeader, TcpHeader, DataFragment]


class Stage:
    """
    Streaming stage. feed() yields 0..N output items.
    flush() yields buffered tail items when input ends.
    """
    def feed(self, item) -> Iterable:
        yield item

    def flush(self) -> Iterable:
        return []
