"""Back up the activity database and the uploaded certificates.

Writes `backups/<database>_<timestamp>.sql` with `mysqldump` (must be on
PATH) and, when UPLOAD_DIR exists, `backups/certificates_<timestamp>.zip`.
"""

from __future__ import annotations

import importlib
import os
import shutil
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.activity_tracker.activity_tracker.database.connection import DBConfig

def dump_database(db: DBConfig, out_file: Path) -> None:
    cmd = [
        "mysqldump",
        "--single-transaction",
        "--routines",
        f"-h{db.host}",
        f"-P{db.port}",
        f"-u{db.user}",
        db.database,
    ]
    # Password travels via MYSQL_PWD, never argv.
    env = {**os.environ, "MYSQL_PWD": db.password}
    with out_file.open("wb") as f:
        subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True, env=env)

def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db = DBConfig.from_dict(settings.DB_CONFIG)

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")

    sql_file = out_dir / f"{db.database}_{ts}.sql"
    try:
        dump_database(db, sql_file)
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools first.")
    except subprocess.CalledProcessError as exc:
        sql_file.unlink(missing_ok=True)
        raise SystemExit(f"mysqldump failed: {exc.stderr.decode(errors='replace').strip()}")
    print(f"OK: Database backup created: {sql_file}")

    upload_dir = Path(settings.UPLOAD_DIR)
    if upload_dir.is_dir():
        archive = shutil.make_archive(str(out_dir / f"certificates_{ts}"), "zip", root_dir=upload_dir)
        print(f"OK: Certificate archive created: {archive}")
    else:
        print(f"Skipped certificates: {upload_dir} does not exist")

if __name__ == "__main__":
    main()
