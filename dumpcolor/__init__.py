"""Per-connection colorized rendering of tcpdump -v -X hex dumps."""

__version__ = "0.1.0"
