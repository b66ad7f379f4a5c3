"""Back up the database and the uploaded-file bucket.

Needs `mysqldump` on PATH. The bucket is archived as a zip next to the dump.
"""

from __future__ import annotations

import importlib
import shutil
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"{db['database']}_{ts}.sql"

    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        db["database"],
    ]

    try:
        with out_file.open("wb") as f:
            subprocess.run(cmd, stdout=f, stderr=subprocess.PIPE, check=True)
        print(f"OK: Database backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools first.")

    bucket_dir = Path(getattr(settings, "STORAGE_ROOT", REPO_ROOT / "storage"))
    if not bucket_dir.is_absolute():
        bucket_dir = REPO_ROOT / bucket_dir
    if bucket_dir.is_dir():
        archive = shutil.make_archive(str(out_dir / f"storage_{ts}"), "zip", root_dir=bucket_dir)
        print(f"OK: Storage backup created: {archive}")
    else:
        print(f"Skipped storage backup: {bucket_dir} does not exist")


if __name__ == "__main__":
    main()
