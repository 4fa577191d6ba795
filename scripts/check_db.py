"""Print the tables of the configured database and per-role / per-status counts."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.activity_tracker.activity_tracker.database.bootstrap import list_tables, table_stats
from src.activity_tracker.activity_tracker.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    print(f"Connected to {DBConfig.from_dict(db_config).describe()}")
    tables = list_tables(db_config)
    print("Tables:" if tables else "No tables found")
    for name in tables:
        print(f"  - {name}")

    if {"users", "activities"} <= set(tables):
        for table, counts in table_stats(db_config).items():
            total = sum(counts.values())
            detail = ", ".join(f"{k}={v}" for k, v in sorted(counts.items())) or "-"
            print(f"{table}: {total} ({detail})")


if __name__ == "__main__":
    main()
