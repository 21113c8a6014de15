"""Allow ``python -m xyra``."""

from xyra.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
