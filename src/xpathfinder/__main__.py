from __future__ import annotations

import sys


def main() -> int:
    if sys.version_info < (3, 11):
        raise SystemExit(
            "xpathfinder requires Python 3.11+. "
            f"Current interpreter: {sys.executable} (Python {sys.version.split()[0]})"
        )
    from .cli import cli

    cli(prog_name="xpathfinder")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
