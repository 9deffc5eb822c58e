"""Task Materializer

Converts an accepted extraction into the payload handed to task persistence,
and renders the French one-line summary kept in the vocal command history.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Optional

from ..core.logging_manager import LoggingManager
from ..intelligence.category_normalizer import CategoryNormalizer
from ..intelligence.task_extractor import Extraction
from ..processors.core.temporal_resolver import MONTH_DISPLAY_NAMES

TASK_SOURCE = "vocal"


@dataclass
class TaskPayload:
    """Persistable representation of a vocal task."""
    title: str
    category_code: str
    category_id: str
    priority: str
    deadline: Optional[str]
    vocal_transcript: str
    confidence_score: float
    child_id: Optional[str] = None
    child_name: Optional[str] = None
    assignee_id: Optional[str] = None
    date_parsed_from: Optional[str] = None
    recurrence: Optional[Dict[str, Any]] = None
    source: str = TASK_SOURCE
    confidence_details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TaskMaterializer:
    """Builds task payloads from extractions."""

    def __init__(self, category_id_resolver: Optional[Callable[[str], Optional[str]]] = None):
        """Initialize the materializer.

        Args:
            category_id_resolver: Maps a category code to the stored category
                identifier; the code itself is used when absent or unresolved
        """
        self.logger = LoggingManager.get_logger(__name__)
        self.category_id_resolver = category_id_resolver

    def materialize(self, extraction: Extraction, assignee_id: Optional[str] = None) -> TaskPayload:
        """Build the task payload for an extraction.

        Args:
            extraction: Extraction accepted by the user or auto-accepted
            assignee_id: Identifier of the household member owning the task

        Returns:
            Task payload ready for persistence
        """
        category_code = extraction.category.value
        category_id = None
        if self.category_id_resolver is not None:
            category_id = self.category_id_resolver(category_code)

        payload = TaskPayload(
            title=extraction.action_text,
            category_code=category_code,
            category_id=category_id or category_code,
            priority=CategoryNormalizer.urgency_to_priority(extraction.urgency).value,
            deadline=extraction.deadline.to_iso(),
            vocal_transcript=extraction.transcript,
            confidence_score=extraction.confidence_overall,
            child_id=extraction.child_id,
            child_name=extraction.child_name,
            assignee_id=assignee_id,
            date_parsed_from=extraction.deadline.matched_phrase,
            recurrence=extraction.recurrence.to_dict() if extraction.recurrence else None,
            confidence_details=extraction.confidence_details,
        )

        self.logger.info(f"Materialized vocal task '{payload.title}' due {payload.deadline}")
        return payload


def format_command_summary(extraction: Extraction) -> str:
    """Render the history line, e.g. "Acheter du pain pour Emma le 25 décembre (80%)"."""
    summary = extraction.action_text

    if extraction.child_name:
        summary += f" pour {extraction.child_name}"

    timestamp = extraction.deadline.timestamp
    if timestamp is not None:
        day = "1er" if timestamp.day == 1 else str(timestamp.day)
        summary += f" le {day} {MONTH_DISPLAY_NAMES[timestamp.month]}"

    return f"{summary} ({round(extraction.confidence_overall * 100)}%)"
