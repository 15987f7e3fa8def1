# dumpcolor/cli.py
import argparse
import os
import sys
from typing import List, Optional

from .config import load_settings
from .core import Malformed
from .palette import COLOR_MODES
from .pipeline import colorize_stream
from .stages import REPRESENTATIONS
from .utils import log, reconfigure, setup, shutdown


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dumpcolor",
        description="Colorize `tcpdump -v -X` output per connection and merge hex rows per packet",
    )
    # not restricted to choices: unknown values drop lines at render time
    p.add_argument("-r", "--representation", default=None,
                   help=f"Either {' or '.join(repr(r) for r in REPRESENTATIONS)} (default: approximation)")
    p.add_argument("--color", choices=COLOR_MODES, default=None,
                   help="Colorize host names (default: auto, honours NO_COLOR)")
    p.add_argument("--config", help="YAML settings file; command line flags take precedence")
    p.add_argument("--log-level", dest="log_level", default=None)
    p.add_argument("--log-dir", dest="log_dir", default=None,
                   help="Also write logs to a daily rotated file in this directory")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # console logging first so config warnings are seen
    setup(log_dir=args.log_dir, level=args.log_level or "WARNING", console=True)
    try:
        settings = load_settings(args.config).merged(
            representation=args.representation,
            color=args.color,
            log_level=args.log_level,
            log_dir=args.log_dir,
        )
    except (OSError, ValueError) as e:
        shutdown()
        raise SystemExit(f"dumpcolor: {e}")

    if (settings.log_level, settings.log_dir) != (args.log_level or "WARNING", args.log_dir):
        reconfigure(log_dir=settings.log_dir, level=settings.log_level, console=True)
    try:
        colorize_stream(sys.stdin.buffer, sys.stdout, settings)
    except Malformed as e:
        log.error(f"Failed to parse: {e}")
        return 1
    except BrokenPipeError:
        # reader went away (e.g. `| head`); silence the flush at interpreter exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 0
    except KeyboardInterrupt:
        return 130
    finally:
        shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
