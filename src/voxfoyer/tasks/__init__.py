"""Task creation helpers for accepted vocal extractions."""

from .materializer import TaskMaterializer, TaskPayload, format_command_summary

__all__ = [
    "TaskMaterializer",
    "TaskPayload",
    "format_command_summary",
]
