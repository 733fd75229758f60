"""CLI entry point: python -m monit"""

from __future__ import annotations

import sys

from monit.cli import main

if __name__ == "__main__":
    sys.exit(main())
