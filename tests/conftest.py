import sys
from pathlib import Path

import pytest

# Ensure the project root is on sys.path for package imports during tests.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dumpcolor.utils import log  # noqa: E402

IP_LINE = (
    b"00:55:30.853902 IP (tos 0x0, ttl 63, id 60304, offset 0, flags [DF], "
    b"proto TCP (6), length 60)"
)
TCP_LINE = (
    b"    192.168.0.10.8008 > 192.168.0.20.50314: Flags [.], cksum 0x0e2e (correct), "
    b"seq 4278946470, ack 3104177948, win 508, options [nop,nop,TS val 3361824424 ecr 1], length 0"
)
DATA_LINES = [
    b"        0x0000:  4500 0135 eb92 4000 3f06 cdc1 c0a8 0014  E..5..@.?.......",
    b"        0x0010:  c0a8 000a c48a 1f48 b91a 2c1c ff0b 9d26  .......H..,....&",
    b"        0x0020:  8018 01f6 8254 0000 0101 080a 0c66 7b2e  .....T.......f{.",
]
HEX_COLUMNS = [line[17:56] for line in DATA_LINES]
APPROX_COLUMNS = [line[58:] for line in DATA_LINES]


@pytest.fixture(autouse=True)
def _propagate_package_log(monkeypatch: pytest.MonkeyPatch) -> None:
    # let caplog (attached to the root logger) see package records
    monkeypatch.setattr(log, "propagate", True)


@pytest.fixture
def capture_text() -> bytes:
    return b"\n".join([IP_LINE, TCP_LINE, *DATA_LINES]) + b"\n"
