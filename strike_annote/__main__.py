# strike_annote/__main__.py
from __future__ import annotations

import sys

from .app import run_app


def main() -> int:
    data_root = sys.argv[1] if len(sys.argv) > 1 else None
    return run_app(data_root)


if __name__ == "__main__":
    raise SystemExit(main())
