from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import EventType


@dataclass(frozen=True)
class SystemEvent:
    event_id: str
    event_type: EventType
    timestamp: datetime
    actor_label: str
    description: str
    amount: Optional[Decimal] = None
