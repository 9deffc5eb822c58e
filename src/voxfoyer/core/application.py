"""VoxFoyer Application Core

Wires configuration, logging, the task extractor and the materializer into
one entry point that turns a transcript into a vocal task decision.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config_manager import AppConfig, ConfigManager
from .logging_manager import LoggingManager
from ..intelligence.child_matcher import HouseholdContext
from ..intelligence.task_extractor import Extraction, SemanticTaskExtractor
from ..tasks.materializer import TaskMaterializer, TaskPayload, format_command_summary


@dataclass
class VocalCommandResult:
    """Outcome of one vocal command, with the confirmation decision."""
    success: bool
    extraction: Optional[Extraction] = None
    payload: Optional[TaskPayload] = None
    summary: Optional[str] = None
    confidence_label: Optional[str] = None
    auto_acceptable: bool = False
    requires_confirmation: bool = True
    error: Optional[str] = None


class VoxFoyerEngine:
    """Main controller for vocal command interpretation."""

    def __init__(self, config_path: Optional[Path] = None, environment: Optional[str] = None,
                 config: Optional[AppConfig] = None,
                 task_materializer: Optional[TaskMaterializer] = None):
        """Initialize the engine.

        Args:
            config_path: Directory holding the YAML configuration files
            environment: Environment name selecting ``<environment>.yaml``
            config: Ready configuration, skips file loading when given
            task_materializer: Materializer for accepted extractions
        """
        if config is None:
            config = ConfigManager(config_path, environment).load_config()
        self.config = config

        LoggingManager().configure(
            level=config.logging.level,
            log_dir=config.logging.log_dir,
            log_to_console=config.logging.log_to_console,
        )
        self.logger = LoggingManager.get_logger(__name__)

        self.extractor = SemanticTaskExtractor.from_config(config)
        self.task_materializer = task_materializer or TaskMaterializer()
        self.logger.info(
            f"{config.app_name} ready ({config.environment}, provider={config.classifier.provider})"
        )

    def process(self, transcript: str, context: HouseholdContext,
                now: Optional[datetime] = None,
                assignee_id: Optional[str] = None) -> VocalCommandResult:
        """Interpret a transcript and prepare the task payload.

        Args:
            transcript: Transcribed French instruction
            context: Household children and locale
            now: Reference instant for deadline resolution
            assignee_id: Household member the task is assigned to

        Returns:
            Result carrying the payload and whether the user must confirm it
        """
        outcome = self.extractor.try_analyze(transcript, context, now)
        if not outcome.success:
            return VocalCommandResult(success=False, error=outcome.error)

        extraction = outcome.extraction
        calculator = self.extractor.confidence_calculator
        label = calculator.get_confidence_label(extraction.confidence_overall)

        result = VocalCommandResult(
            success=True,
            extraction=extraction,
            payload=self.task_materializer.materialize(extraction, assignee_id),
            summary=format_command_summary(extraction),
            confidence_label=label.label,
            auto_acceptable=label.auto_acceptable,
            requires_confirmation=label.requires_confirmation,
        )

        self.logger.info(f"Vocal command: {result.summary} [{result.confidence_label}]")
        return result
