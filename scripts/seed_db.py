from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.activity_tracker.activity_tracker.database.bootstrap import (
    DEMO_PASSWORD,
    apply_seed_sql,
    ensure_demo_users,
    ensure_sample_certificate,
)
from src.activity_tracker.activity_tracker.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ids = ensure_demo_users(db_config)
    certificate = ensure_sample_certificate(settings.UPLOAD_DIR)

    print(f"OK: Seeded database -> {DBConfig.from_dict(db_config).describe()}")
    for role, user_id in ids.items():
        print(f"  {role:<10} id={user_id} password={DEMO_PASSWORD}")
    print(f"  sample certificate: {certificate}")


if __name__ == "__main__":
    main()
