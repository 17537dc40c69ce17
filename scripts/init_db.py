from __future__ import annotations

import importlib

from dotenv import load_dotenv

from staffing.config import get_settings_module
from staffing.database.bootstrap import apply_schema, list_tables
from staffing.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_mapping(settings.DB_CONFIG))

    apply_schema(conn)
    cfg = conn.config
    print(f"OK: Applied schema.sql -> {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} (tables={len(list_tables(conn))})")


if __name__ == "__main__":
    main()
