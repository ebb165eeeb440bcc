import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import inspect

from backoffice.models.audit_log import AuditLog, AuditAction, AuditEntityType
from backoffice.services.base import BaseService


def sanitize(obj: Any) -> Any:
    """Reduce a payload to JSON-storable values."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if hasattr(obj, "__table__"):
        return {attr.key: sanitize(getattr(obj, attr.key)) for attr in inspect(obj).mapper.column_attrs}
    if isinstance(obj, dict):
        return {k: sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize(i) for i in obj]
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    return obj


class AuditService(BaseService):
    def log_create(
        self,
        actor_id: int,
        entity_type: AuditEntityType,
        entity_id: Any,
        payload: Any
    ) -> AuditLog:
        """
        Append an audit entry for a newly created entity.

        The entry joins the caller's unit of work: it is flushed, not
        committed, and a failure here propagates so the documented write is
        rolled back with it.
        """
        entry = AuditLog(
            action=AuditAction.CREATE,
            entity_type=entity_type,
            entity_id=str(entity_id),
            user_id=actor_id,
            changes={"new": sanitize(payload)},
        )
        self.db.add(entry)
        self.db.flush()
        return entry
