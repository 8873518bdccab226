from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.shiftwise.shiftwise.database.bootstrap import apply_schema, list_tables
from src.shiftwise.shiftwise.database.connection import DBConfig, DatabaseConnection

logger = logging.getLogger("init_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))
    conn = DatabaseConnection.get_instance(config)

    apply_schema(conn, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(conn)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        config.user,
        config.host,
        config.port,
        config.database,
        len(tables),
    )


if __name__ == "__main__":
    main()
