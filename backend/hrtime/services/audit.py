import uuid
from typing import Any, Optional, Union
from sqlalchemy.orm import Session

from hrtime.models.audit_log import AuditLog


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError):
        return None


def log_action(
    db: Session,
    org_id: Union[uuid.UUID, str, None],
    user_id: Union[uuid.UUID, str, None],
    action: str,
    resource_type: str,
    resource_id: Any = None,
    details: dict | None = None,
    ip_address: str | None = None,
    commit: bool = True,
):
    entry = AuditLog(
        org_id=_as_uuid(org_id),
        user_id=_as_uuid(user_id),
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        details=details.copy() if isinstance(details, dict) else None,
        ip_address=ip_address,
    )
    db.add(entry)
    if commit:
        db.commit()
    return entry
