"""Create the RockView database and tables from database/schema.sql.

Usage: ``python scripts/init_db.py [--seed]``
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from rockview.database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", action="store_true", help="also load seed.sql and the demo accounts")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    database_dir = REPO_ROOT / "database"

    apply_schema(db_config, schema_path=database_dir / "schema.sql")
    if args.seed:
        apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")
        ensure_demo_users(db_config)

    target = f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    print(f"OK: schema applied{' and seeded' if args.seed else ''} -> {target} (tables={len(list_tables(db_config))})")


if __name__ == "__main__":
    main()
