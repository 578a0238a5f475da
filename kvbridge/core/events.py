"""
kvbridge events — types and constants.

The bus only carries delivery traffic: a result event per envelope
handed to the bus channel. Subscribers and middleware see the same
Event object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import time
import uuid


class EventType:
    """Event type constants, "category:action"."""

    STORAGE_RESULT = "storage:result"


@dataclass(slots=True)
class Event:
    """A single event on the bus. `data` holds the event payload."""

    type: str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    timestamp: float = field(default_factory=time.time)
