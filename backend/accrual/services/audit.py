from sqlalchemy.orm import Session
from accrual.models.audit_log import AuditLog


def log_event(
    s: Session,
    actor: str,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    details: dict | None = None,
):
    # Written inside the caller's transaction; it commits or rolls back with the operation.
    row = AuditLog(
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    s.add(row)
    return row
