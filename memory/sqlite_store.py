"""SQLite-based durable store for conversation memory."""

import sqlite3
import json
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, List

from errors import PersistenceError
from .models import ConversationMemory

logger = logging.getLogger(__name__)


class BasePersistentStore(ABC):
    """Durable keyed storage, one row per conversation."""

    @abstractmethod
    def upsert(self, conversation_id: str, memory: ConversationMemory) -> None:
        """Insert or replace the row for a conversation."""
        pass

    @abstractmethod
    def read_one(self, conversation_id: str) -> Optional[ConversationMemory]:
        """Read the row for a conversation, or None if absent."""
        pass

    @abstractmethod
    def delete(self, conversation_id: str) -> None:
        """Delete the row for a conversation. Missing rows are ignored."""
        pass

    @abstractmethod
    def list_by_user(self, user_id: str, limit: int = 50) -> List[ConversationMemory]:
        """List conversations for a user, most recently updated first."""
        pass


class SQLiteConversationStore(BasePersistentStore):
    """SQLite-backed conversation store."""

    def __init__(self, db_path: str = "data/conversations.db", timeout: float = 30.0):
        """
        Initialize SQLite conversation store.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait on a locked database before failing
        """
        self.db_path = Path(db_path)
        self.timeout = timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Open a connection for one operation; commit on success, always close."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
            conn.row_factory = sqlite3.Row
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"SQLite {operation} failed: {e}")
            raise PersistenceError(f"{operation} failed: {e}") from e
        finally:
            if conn is not None:
                conn.close()

    def _init_db(self):
        """Initialize database schema."""
        with self._connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS conversations (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    recent_interactions TEXT DEFAULT '[]',
                    summary TEXT DEFAULT '',
                    context TEXT DEFAULT '{}',
                    last_updated TEXT NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_conversations_user_id ON conversations(user_id)"
            )
        logger.info(f"Database initialized at {self.db_path}")

    def upsert(self, conversation_id: str, memory: ConversationMemory) -> None:
        """
        Insert or update a conversation row.

        created_at is kept from the first insert.

        Args:
            conversation_id: Conversation ID
            memory: Memory aggregate to store
        """
        interactions_json = json.dumps(
            [entry.model_dump(mode="json") for entry in memory.recent_interactions]
        )

        with self._connection("upsert") as conn:
            conn.execute(
                """
                INSERT INTO conversations
                (id, user_id, recent_interactions, summary, context, last_updated)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    user_id = excluded.user_id,
                    recent_interactions = excluded.recent_interactions,
                    summary = excluded.summary,
                    context = excluded.context,
                    last_updated = excluded.last_updated
                """,
                (
                    conversation_id,
                    memory.user_id,
                    interactions_json,
                    memory.summary,
                    json.dumps(memory.context),
                    memory.last_updated.isoformat(),
                )
            )

    def read_one(self, conversation_id: str) -> Optional[ConversationMemory]:
        """
        Get the stored memory for a conversation.

        Args:
            conversation_id: Conversation ID

        Returns:
            ConversationMemory or None if not found
        """
        with self._connection("read") as conn:
            row = conn.execute(
                "SELECT * FROM conversations WHERE id = ?",
                (conversation_id,)
            ).fetchone()

        if not row:
            return None
        return self._row_to_memory(row)

    def delete(self, conversation_id: str) -> None:
        with self._connection("delete") as conn:
            conn.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))

    def list_by_user(self, user_id: str, limit: int = 50) -> List[ConversationMemory]:
        """
        List conversations for a user.

        Args:
            user_id: Owner of the conversations
            limit: Maximum number of conversations

        Returns:
            List of ConversationMemory objects, most recently updated first
        """
        with self._connection("list") as conn:
            rows = conn.execute(
                """
                SELECT * FROM conversations
                WHERE user_id = ?
                ORDER BY last_updated DESC
                LIMIT ?
                """,
                (user_id, limit)
            ).fetchall()

        return [self._row_to_memory(row) for row in rows]

    def _row_to_memory(self, row: sqlite3.Row) -> ConversationMemory:
        try:
            return ConversationMemory.model_validate({
                "conversation_id": row["id"],
                "user_id": row["user_id"],
                "recent_interactions": json.loads(row["recent_interactions"] or "[]"),
                "summary": row["summary"] or "",
                "context": json.loads(row["context"] or "{}"),
                "last_updated": row["last_updated"],
            })
        except ValueError as e:
            # Covers json.JSONDecodeError and pydantic.ValidationError
            raise PersistenceError(f"Corrupt row for conversation {row['id']}: {e}") from e
