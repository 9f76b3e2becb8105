import json
from flask import g, has_request_context, request
from models import db
from models.audit_log import AuditLog


def _actor():
    principal = getattr(g, "principal", None) if has_request_context() else None
    if principal is None:
        return None, None
    return principal.kind, principal.id


def log_event(action: str, entity=None, entity_id=None, metadata=None, actor_type=None, actor_id=None):
    if actor_type is None:
        actor_type, actor_id = _actor()

    ip = user_agent = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)
        user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        actor_type=actor_type,
        actor_id=actor_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None
    )
    db.session.add(row)
    db.session.commit()
