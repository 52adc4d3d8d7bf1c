#!/usr/bin/env python3
"""Create the relay documents table in the database named by DATABASE_URL.

Uses the same config and DDL as PostgresStore. Run from project root.

Usage:
  python scripts/init_db.py [--config PATH]
  --config   Config file (default: config/config.yaml)
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))
os.chdir(_PROJECT_ROOT)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the relay documents table in PostgreSQL.")
    parser.add_argument("--config", default="config/config.yaml", help="Config path")
    args = parser.parse_args()
    config_path = args.config
    if not os.path.isabs(config_path):
        config_path = str(_PROJECT_ROOT / config_path)

    try:
        import psycopg2
        from colorrelay.config.settings import get_database_url, get_store_config, read_config
        from colorrelay.exceptions import ConfigError
        from colorrelay.store.postgres_store import ensure_table
    except ImportError as e:
        print(f"Missing dependency: {e}", file=sys.stderr)
        print("  Install with: pip install -e .", file=sys.stderr)
        return 1

    try:
        config, _ = read_config(config_path)
        dsn = get_database_url(config)
        store_cfg = get_store_config(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    table = store_cfg["postgres"]["table"]

    try:
        conn = psycopg2.connect(dsn, connect_timeout=store_cfg["postgres"]["connect_timeout"])
    except psycopg2.Error as e:
        print(f"PostgreSQL connect failed: {e}", file=sys.stderr)
        return 1

    try:
        ensure_table(conn, table)
        conn.commit()
        print(f"Created/verified table {table!r}")
        return 0
    except psycopg2.Error as e:
        print(f"Schema creation failed: {e}", file=sys.stderr)
        return 1
    finally:
        conn.close()


if __name__ == "__main__":
    sys.exit(main())
