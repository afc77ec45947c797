from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent

USE_SQLITE = False
SQLITE_PATH = str(PROJECT_ROOT / "finance.db")
JSON_PATH = str(PROJECT_ROOT / "data.json")
SCHEMA_PATH = str(PROJECT_ROOT / "db" / "schema.sql")

RECENT_ENTRIES_LIMIT = 10

LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
