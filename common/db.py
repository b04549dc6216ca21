import sqlite3
from pathlib import Path


def connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, check_same_thread=False, timeout=5)
    conn.row_factory = sqlite3.Row
    # Use WAL so the API threads and the stock worker can share the file.
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn


def init_db(db_path: str, schema: str) -> None:
    if not Path(db_path).exists():
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = connect(db_path)
    try:
        # Schema statements are idempotent (IF NOT EXISTS), safe for existing DBs.
        conn.executescript(schema)
        conn.commit()
    finally:
        conn.close()
