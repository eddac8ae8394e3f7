"""Notification and audit records written as lifecycle side effects."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..enums import NotificationType


@dataclass
class Notification:
    """In-app notification addressed to one user about one order."""
    user_id: str
    type: NotificationType
    title: str
    message: str
    order_id: Optional[str] = None
    read: bool = False
    sent_at: Optional[datetime] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class AuditEntry:
    """Append-only record of a state-changing action."""
    action: str
    table_name: str
    record_id: Optional[str] = None
    user_id: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
