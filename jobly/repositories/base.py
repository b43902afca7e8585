"""Base repository utilities."""

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from ..logger import StructuredLogger, get_logger
from ..sql import BindParams


class TextRepository:
    """Runs parameterized text statements on an Engine and returns plain dicts."""

    entity = "row"

    def __init__(self, engine: Engine, logger: Optional[StructuredLogger] = None):
        self.engine = engine
        self.logger = logger or get_logger()

    @property
    def text_match_op(self) -> str:
        # SQLite has no ILIKE; its LIKE is already case-insensitive for ASCII
        return "LIKE" if self.engine.dialect.name == "sqlite" else "ILIKE"

    def _execute(self, conn: Connection, sql: str, params: BindParams = None) -> List[Dict[str, Any]]:
        self.logger.debug(
            f"Executing {self.entity} statement",
            statement=" ".join(sql.split()),
            param_count=len(params or ()),
        )
        try:
            result = conn.execute(text(sql), params or {})
        except Exception as e:
            self.logger.record_error(type(e).__name__)
            raise
        rows = [dict(r) for r in result.mappings().all()] if result.returns_rows else []
        self.logger.record_statement(self.entity, len(rows))
        return rows

    def _fetch_all(self, sql: str, params: BindParams = None) -> List[Dict[str, Any]]:
        with self.engine.connect() as conn:
            return self._execute(conn, sql, params)

    def _fetch_one(self, sql: str, params: BindParams = None) -> Optional[Dict[str, Any]]:
        rows = self._fetch_all(sql, params)
        return rows[0] if rows else None

    def _write_one(self, sql: str, params: BindParams = None) -> Optional[Dict[str, Any]]:
        """Run a statement in its own transaction; return the first RETURNING row."""
        with self.engine.begin() as conn:
            rows = self._execute(conn, sql, params)
        return rows[0] if rows else None

    def _not_found(self, message: str, **context):
        self.logger.record_not_found()
        self.logger.warning(message, entity=self.entity, **context)
