"""Allow ``python -m lens_translator`` to launch the translator."""

from __future__ import annotations

import sys


def main() -> None:
    from lens_translator import run
    run(sys.argv[1:])


if __name__ == "__main__":
    main()
