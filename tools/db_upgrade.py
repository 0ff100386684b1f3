#!/usr/bin/env python3
"""Run Alembic migrations up to head (or a given revision)."""

from __future__ import annotations

import argparse
from pathlib import Path

from alembic.config import Config

from alembic import command


def upgrade(revision: str = "head") -> None:
    project_root = Path(__file__).resolve().parent.parent
    cfg = Config(str(project_root / "alembic.ini"))
    cfg.set_main_option("script_location", str(project_root / "alembic"))
    command.upgrade(cfg, revision)


def main() -> None:
    parser = argparse.ArgumentParser(description="Upgrade the blogs database")
    parser.add_argument(
        "revision", nargs="?", default="head", help="Target revision (default: head)"
    )
    args = parser.parse_args()
    upgrade(args.revision)


if __name__ == "__main__":
    main()
