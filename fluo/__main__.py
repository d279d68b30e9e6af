"""Entry point for ``python -m fluo``."""

from __future__ import annotations

from fluo.cli.main import main

if __name__ == "__main__":
    main()
