"""Module entry point to run the simulator via ``python -m landmarkdrive``."""
from __future__ import annotations

from .main import main


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
