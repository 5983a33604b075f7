from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "reservation.step_advanced",
    "reservation.completed",
    "reservation.reset",
    "reservation.submit_cancelled",
]

_audit_logger = logging.getLogger("audit")
_audit_logger.setLevel(logging.INFO)
if not _audit_logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    _audit_logger.addHandler(handler)
_audit_logger.propagate = False


def _to_json_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    return value


def emit_audit_log(
    *,
    action: AuditAction,
    session_id: Optional[str],
    step_from: Optional[int] = None,
    step_to: Optional[int] = None,
    reservation_date: Optional[date] = None,
    reservation_time: Optional[str] = None,
    table_id: Optional[int] = None,
    party_size: Optional[int] = None,
    confirmation_id: Optional[str] = None,
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Emit one structured JSON audit line. Raises RuntimeError if logging fails."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": "info",
        "action": action,
        "request_id": get_request_id(),
        "session_id": session_id,
        "step_from": _to_json_value(step_from),
        "step_to": _to_json_value(step_to),
        "date": _to_json_value(reservation_date),
        "time": reservation_time,
        "table_id": table_id,
        "party_size": party_size,
        "confirmation_id": confirmation_id,
    }
    if message is not None:
        payload["message"] = message
    if extra:
        payload.update({k: _to_json_value(v) for k, v in extra.items()})

    # Drop None values to keep the log compact.
    compact_payload = {k: v for k, v in payload.items() if v is not None}
    try:
        _audit_logger.info(json.dumps(compact_payload, ensure_ascii=True))
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
