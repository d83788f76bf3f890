"""
SQLite-backed tables for identity links and the last report posted per channel.
"""

import sqlite3
import threading
from typing import Optional, List

from normalize.models import IdentityLink, LastReportRecord

# noinspection SqlResolve
SQL_CREATE = """
CREATE TABLE IF NOT EXISTS identity_links (
    caller_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS last_reports (
    caller_id TEXT NOT NULL,
    channel_id TEXT NOT NULL,
    message_id TEXT NOT NULL,
    PRIMARY KEY (caller_id, channel_id)
);
"""


class Database:
    def __init__(self, path: Optional[str] = None):
        """Open (and create if needed) the link database.

        :param path: SQLite file path or None for in-memory.
        """
        self.path = path or ':memory:'
        self.conn = sqlite3.connect(self.path, check_same_thread=False)
        self._lock = threading.RLock()
        self._init_db()

    def _init_db(self):
        with self._lock:
            cur = self.conn.cursor()
            cur.executescript(SQL_CREATE)
            self.conn.commit()

    def execute(self, sql: str, params: tuple = ()) -> int:
        """Run a write statement and return the number of affected rows."""
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(sql, params)
            self.conn.commit()
            return cur.rowcount

    def query(self, sql: str, params: tuple = ()) -> list:
        with self._lock:
            cur = self.conn.cursor()
            cur.execute(sql, params)
            return cur.fetchall()

    def close(self):
        with self._lock:
            if self.conn is not None:
                try:
                    self.conn.close()
                finally:
                    self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class LinkStore:
    """Caller id -> Favro userId, one row per caller."""

    def __init__(self, db: Database):
        self.db = db

    # noinspection SqlResolve
    def get(self, caller_id: str) -> Optional[IdentityLink]:
        rows = self.db.query('SELECT user_id FROM identity_links WHERE caller_id = ?', (str(caller_id),))
        return IdentityLink(str(caller_id), rows[0][0]) if rows else None

    # noinspection SqlResolve
    def link(self, caller_id: str, user_id: str) -> IdentityLink:
        self.db.execute('REPLACE INTO identity_links(caller_id, user_id) VALUES (?, ?)', (str(caller_id), str(user_id)))
        return IdentityLink(str(caller_id), str(user_id))

    # noinspection SqlResolve
    def unlink(self, caller_id: str) -> bool:
        """Remove the caller's link. Returns True if one existed."""
        return self.db.execute('DELETE FROM identity_links WHERE caller_id = ?', (str(caller_id),)) > 0

    # noinspection SqlResolve
    def all(self) -> List[IdentityLink]:
        rows = self.db.query('SELECT caller_id, user_id FROM identity_links ORDER BY caller_id')
        return [IdentityLink(c, u) for c, u in rows]


class ReportRegistry:
    """(caller, channel) -> id of the last report message posted there."""

    def __init__(self, db: Database):
        self.db = db

    # noinspection SqlResolve
    def record(self, caller_id: str, channel_id: str, message_id: str) -> LastReportRecord:
        self.db.execute(
            'REPLACE INTO last_reports(caller_id, channel_id, message_id) VALUES (?, ?, ?)',
            (str(caller_id), str(channel_id), str(message_id)),
        )
        return LastReportRecord(str(caller_id), str(channel_id), str(message_id))

    # noinspection SqlResolve
    def get(self, caller_id: str, channel_id: str) -> Optional[LastReportRecord]:
        rows = self.db.query(
            'SELECT message_id FROM last_reports WHERE caller_id = ? AND channel_id = ?', (str(caller_id), str(channel_id))
        )
        return LastReportRecord(str(caller_id), str(channel_id), rows[0][0]) if rows else None

    # noinspection SqlResolve
    def clear(self, caller_id: str, channel_id: str) -> bool:
        return self.db.execute('DELETE FROM last_reports WHERE caller_id = ? AND channel_id = ?', (str(caller_id), str(channel_id))) > 0


__all__ = ["Database", "LinkStore", "ReportRegistry"]
