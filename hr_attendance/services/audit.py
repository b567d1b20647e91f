import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from hr_attendance.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def _sanitize(obj: Any) -> Any:
    # Pydantic snapshots, enums and dates must land in the JSON column as plain values
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, dict):
        return {str(k): _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "value"):
        return obj.value
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return obj


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[Any],
        details: dict,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ) -> Optional[AuditLog]:
        """
        Append an audit entry to the caller's transaction.
        Not committed here, so the entry lives or dies with the change it describes.
        """
        try:
            entry = AuditLog(
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                details=_sanitize(details),
                before_state=_sanitize(before_state),
                after_state=_sanitize(after_state),
            )
            self.db.add(entry)
            self.db.flush()
            return entry
        except Exception as e:
            logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None  # Never break the main flow because of an audit failure

    # Static wrapper used by the service functions
    @staticmethod
    def log(db: Session, *args, **kwargs) -> Optional[AuditLog]:
        return AuditService(db).log_action(*args, **kwargs)
