#!/usr/bin/env python3
"""Apply a SQL migration to the Supabase Postgres database.

Usage:
    DATABASE_URL=postgresql://... python3 run_migration.py [migrations/0001_hypothesis_tracker.sql]
"""
import os
import sys
from pathlib import Path

import psycopg2

DEFAULT_MIGRATION = Path(__file__).parent / "migrations" / "0001_hypothesis_tracker.sql"


def run_migration(migration_file: Path) -> None:
    sql = migration_file.read_text(encoding="utf-8")

    print(f"📄 Migration file: {migration_file}")
    print(f"📊 Content length: {len(sql)} bytes\n")

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("❌ DATABASE_URL environment variable not set")
        print("\nOr copy this SQL into the Supabase SQL editor:\n")
        print("=" * 60)
        print(sql)
        print("=" * 60)
        sys.exit(1)

    print("🔌 Connecting to database...")
    conn = psycopg2.connect(database_url)

    try:
        with conn, conn.cursor() as cursor:
            print("🚀 Executing migration...\n")
            cursor.execute(sql)
        print("✅ Migration complete!")
    except Exception as e:
        print(f"❌ Error running migration: {e}")
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_MIGRATION
    run_migration(path)
