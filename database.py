import sqlite3
import time

import config


def commit_with_retry(conn, retries=6, initial_delay=0.5):
    """Attempt to commit, retrying on `sqlite3.OperationalError: database is locked`.

    Retries use exponential backoff (initial_delay * 2**attempt).
    """
    last_exc = None
    for attempt in range(retries):
        try:
            conn.commit()
            return
        except sqlite3.OperationalError as e:
            last_exc = e
            msg = str(e).lower()
            if 'locked' in msg or 'busy' in msg:
                time.sleep(initial_delay * (2 ** attempt))
                continue
            raise
    raise last_exc


class DatabaseManager:
    """Local device storage. Holds operator preferences only; sales, products
    and customers live on the backend.
    """

    def __init__(self, db_name=None):
        self.db_name = db_name or config.DB_PATH
        self.check_schema()

    def connect(self):
        # Wait for locks instead of failing straight away
        conn = sqlite3.connect(self.db_name, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def check_schema(self):
        conn = self.connect()
        try:
            c = conn.cursor()
            c.execute('PRAGMA journal_mode=WAL')
            c.execute('PRAGMA busy_timeout = 30000')

            # Key-value preference slots (pinned products etc.)
            c.execute('''CREATE TABLE IF NOT EXISTS preferences (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )''')
            commit_with_retry(conn)
        finally:
            conn.close()
