"""Database backup script — creates timestamped SQLite backup."""

import sqlite3
import sys
from datetime import datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from autofix.config import Config

KEEP_BACKUPS = 10


def backup_database():
    """Copy the live database into the backup directory with a timestamp.

    Uses SQLite's online backup API so a write in progress is not torn.
    """
    db_path = Config.DATABASE_PATH
    backup_dir = Config.BACKUP_PATH
    backup_dir.mkdir(parents=True, exist_ok=True)

    if not db_path.exists():
        print(f"Database not found at {db_path}")
        return

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_file = backup_dir / f"autofix_{timestamp}.db"
    source = sqlite3.connect(str(db_path))
    target = sqlite3.connect(str(backup_file))
    try:
        source.backup(target)
    finally:
        target.close()
        source.close()
    print(f"Backup created: {backup_file}")

    backups = sorted(backup_dir.glob("autofix_*.db"), reverse=True)
    for old in backups[KEEP_BACKUPS:]:
        old.unlink()
        print(f"Removed old backup: {old.name}")


if __name__ == "__main__":
    backup_database()
