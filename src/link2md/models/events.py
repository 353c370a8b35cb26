"""Stage events emitted while a page moves through the pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    VALIDATING = "validating"
    FETCHING = "fetching"
    PARSING = "parsing"
    PROFILE_MATCH = "profile_match"
    EXTRACTING = "extracting"
    FALLBACK_CHECK = "fallback_check"
    SANITIZING = "sanitizing"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


class EventType(str, Enum):
    """Types of events emitted during a conversion."""

    STAGE_STARTED = "stage_started"
    STAGE_COMPLETED = "stage_completed"
    FALLBACK_USED = "fallback_used"
    CONVERSION_COMPLETED = "conversion_completed"
    CONVERSION_FAILED = "conversion_failed"


@dataclass
class StageEvent:
    """
    Event emitted during a conversion.

    Example:
        def on_event(event: StageEvent) -> None:
            if event.type == EventType.STAGE_STARTED:
                print(f"{event.stage.value}: {event.url}")
            elif event.is_error:
                print(f"Error: {event.error}")
    """

    type: EventType
    url: str
    stage: Optional[Stage] = None
    message: Optional[str] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        """Check if this is an error event."""
        return self.type == EventType.CONVERSION_FAILED
