"""Run the config server CLI via ``python -m config_server``."""

from __future__ import annotations

from .cli import main


if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())
