# utils/chains.py
import logging
import sqlite3
from typing import List, Optional
from config import DB_PATH

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS chains (
  event_id  VARCHAR(48) NOT NULL PRIMARY KEY,
  chain_id  VARCHAR(48),
  content   TEXT
);
CREATE INDEX IF NOT EXISTS idx_chains_chain ON chains(chain_id ASC);
"""


class StoreError(RuntimeError):
    """Raised when the SQLite corpus cannot be read or written."""

    def __init__(self, op: str, cause: Exception):
        super().__init__(f"chains.{op} failed: {cause}")
        self.op = op


class ChainStore:
    """Stored chat messages: one row per message, grouped by chain (author) id."""

    def __init__(self, path: str):
        self.path = path
        self._run("init", lambda con: con.executescript(_SCHEMA))

    def _con(self):
        return sqlite3.connect(self.path, timeout=30, check_same_thread=False)

    def _run(self, op: str, fn):
        try:
            con = self._con()
            try:
                with con:
                    return fn(con)
            finally:
                con.close()
        except sqlite3.Error as e:
            raise StoreError(op, e) from e

    def insert(self, event_id: str, chain_id: str, content: str):
        self._run("insert", lambda con: con.execute(
            """
            INSERT INTO chains (event_id, chain_id, content)
            VALUES (?, ?, ?)
            ON CONFLICT(event_id) DO UPDATE SET content=excluded.content
            """,
            (event_id, chain_id, content),
        ))

    def delete_id(self, event_id: str) -> int:
        return self._run("delete_id", lambda con: con.execute(
            "DELETE FROM chains WHERE event_id=?", (event_id,)
        ).rowcount)

    def delete_chain(self, chain_id: str) -> int:
        return self._run("delete_chain", lambda con: con.execute(
            "DELETE FROM chains WHERE chain_id=?", (chain_id,)
        ).rowcount)

    def chain(self, chain_id: str) -> List[str]:
        rows = self._run("chain", lambda con: con.execute(
            "SELECT content FROM chains WHERE chain_id=?", (chain_id,)
        ).fetchall())
        return [r[0] for r in rows if r[0]]

    def all(self) -> List[str]:
        rows = self._run("all", lambda con: con.execute(
            "SELECT content FROM chains"
        ).fetchall())
        return [r[0] for r in rows if r[0]]

    def count(self, chain_id: Optional[str] = None) -> int:
        if chain_id is None:
            sql, params = "SELECT COUNT(*) FROM chains", ()
        else:
            sql, params = "SELECT COUNT(*) FROM chains WHERE chain_id=?", (chain_id,)
        return self._run("count", lambda con: con.execute(sql, params).fetchone()[0])


def event_id(chat_id: int, message_id: int) -> str:
    # id сообщения в Telegram уникален только внутри чата
    return f"{chat_id}:{message_id}"


chains_store = ChainStore(DB_PATH)
