"""QueueItem dataclass for projected reminders."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .events import AgreementCheckpoint, Event
from .labels import event_label, format_iso


@dataclass(frozen=True)
class QueueItem:
    """One upcoming reminder in the notification queue."""

    plate: Optional[str]
    model: Optional[str]
    event: Event
    scheduled_for: datetime
    original_end: Optional[datetime] = None

    @property
    def type(self) -> str:
        return event_label(self.event)

    @property
    def is_expired_checkpoint(self) -> bool:
        return isinstance(self.event, AgreementCheckpoint) and self.event.is_expiry

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plate": self.plate,
            "model": self.model,
            "type": self.type,
            "scheduledFor": format_iso(self.scheduled_for),
            "originalEnd": format_iso(self.original_end),
        }
