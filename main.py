from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from pathlib import Path

# Make sure the 'src' directory is on sys.path so 'amdtemp' can be imported
REPO_ROOT = Path(__file__).resolve().parent
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from amdtemp.cli import main as run_cli_main


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point for the temperature monitor.

    Parameters
    ----------
    argv:
        Command-line arguments including the program name. If None, uses sys.argv.
    """
    if argv is None:
        argv = sys.argv
    return run_cli_main(list(argv[1:]))


def _run_with_cprofile(argv: Sequence[str] | None = None) -> int:
    """Run the monitor under cProfile and print top cumulative functions."""
    import cProfile
    import io
    import pstats

    profiler = cProfile.Profile()
    profiler.enable()
    try:
        return main(argv)
    finally:
        profiler.disable()
        buffer = io.StringIO()
        stats = pstats.Stats(profiler, stream=buffer).sort_stats("cumulative")
        stats.print_stats(50)
        print(buffer.getvalue(), file=sys.stderr)


if __name__ == "__main__":
    if os.getenv("AMDTEMP_PROFILE", ""):
        sys.exit(_run_with_cprofile(sys.argv))
    else:
        sys.exit(main(sys.argv))
