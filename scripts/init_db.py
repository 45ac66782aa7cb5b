from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.evals_attendance.evals_attendance.database.bootstrap import apply_schema, list_tables


def main(argv: list[str]) -> int:
    """Usage: python scripts/init_db.py [path/to/schema.sql]"""

    load_dotenv(override=False)
    settings_module = get_settings_module()
    db_config = dict(importlib.import_module(settings_module).DB_CONFIG)

    schema_path = Path(argv[0]) if argv else REPO_ROOT / "database" / "schema.sql"
    if not schema_path.is_file():
        print(f"Schema file not found: {schema_path}", file=sys.stderr)
        return 1

    applied = apply_schema(db_config, schema_path=schema_path)
    tables = sorted(list_tables(db_config))
    print(f"OK ({settings_module}): {applied} statements -> {db_config.get('database')} @ {db_config.get('host')}")
    for name in tables:
        print(f"  {name}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
