"""Best-effort, fire-and-forget audit records."""

import asyncio
import logging
from typing import Any, Protocol

from sqlalchemy.orm import sessionmaker

from smart_appointments.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


class AuditWriter(Protocol):
    def write(
        self,
        action: str,
        user_id: str | None,
        details: dict[str, Any] | None,
        table_name: str,
        record_id: str | None,
    ) -> None:
        ...


class SqlAuditWriter:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def write(
        self,
        action: str,
        user_id: str | None,
        details: dict[str, Any] | None,
        table_name: str,
        record_id: str | None,
    ) -> None:
        db = self._session_factory()
        try:
            db.add(
                AuditLog(
                    action=action,
                    user_id=user_id,
                    details=details,
                    table_name=table_name,
                    record_id=record_id,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class AuditSink:
    """Hands audit writes to background tasks so callers never wait on them.

    A failed write is logged inside its task and goes no further. Pending
    tasks are kept referenced until done and can be awaited with ``drain``.
    """

    def __init__(self, writer: AuditWriter) -> None:
        self._writer = writer
        self._pending: set[asyncio.Task] = set()

    def submit(
        self,
        action: str,
        user_id: str | None,
        details: dict[str, Any] | None = None,
        table_name: str = 'appointments',
        record_id: str | None = None,
    ) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(
            self._write(action, user_id, details, table_name, record_id)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending)

    async def _write(
        self,
        action: str,
        user_id: str | None,
        details: dict[str, Any] | None,
        table_name: str,
        record_id: str | None,
    ) -> None:
        try:
            await asyncio.to_thread(self._writer.write, action, user_id, details, table_name, record_id)
        except Exception:
            logger.exception('Audit write failed for action %s (user %s)', action, user_id)
