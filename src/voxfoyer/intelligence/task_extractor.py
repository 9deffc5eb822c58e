"""Semantic Task Extractor

Orchestrates vocal task extraction: asks the guess provider for a raw guess,
then validates, repairs and temporally grounds it into an ``Extraction`` with
an overall confidence the caller uses to auto-create or ask for confirmation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.error_handler import (
    ClassificationError,
    EmptyActionTextError,
    EmptyTranscriptError,
    ErrorHandler,
    ExtractionError,
)
from ..core.logging_manager import LoggingManager
from ..processors.core.temporal_resolver import RecurrenceInfo, TemporalResolution, TemporalResolver
from .category_normalizer import CategoryNormalizer, TaskCategory, Urgency
from .child_matcher import ChildNameMatcher, HouseholdContext
from .confidence_calculator import (
    ConfidenceCalculator,
    ConfidenceFactor,
    ConfidenceFactorScore,
    ConfidenceLevel,
)
from .guess_provider import GuessProvider, KeywordGuessProvider, create_guess_provider


@dataclass
class Extraction:
    """Structured task extracted from a transcript."""
    action_text: str
    category: TaskCategory
    urgency: Urgency
    deadline: TemporalResolution
    confidence_overall: float
    child_name: Optional[str] = None
    child_id: Optional[str] = None
    transcript: str = ""
    category_substituted: bool = False
    urgency_substituted: bool = False
    child_candidate: Optional[str] = None
    confidence_level: Optional[ConfidenceLevel] = None
    confidence_details: Dict[str, Any] = field(default_factory=dict)
    recurrence: Optional[RecurrenceInfo] = None


@dataclass
class AnalysisOutcome:
    """Success flag plus extraction or human-readable error."""
    success: bool
    extraction: Optional[Extraction] = None
    error: Optional[str] = None


class SemanticTaskExtractor:
    """Turns a transcript and household context into a validated extraction."""

    def __init__(self,
                 guess_provider: Optional[GuessProvider] = None,
                 temporal_resolver: Optional[TemporalResolver] = None,
                 child_matcher: Optional[ChildNameMatcher] = None,
                 category_normalizer: Optional[CategoryNormalizer] = None,
                 confidence_calculator: Optional[ConfidenceCalculator] = None,
                 validation_penalty: float = 0.2,
                 error_handler: Optional[ErrorHandler] = None):
        """Initialize the extractor with its collaborators.

        Args:
            guess_provider: Source of raw guesses (keyword rules by default)
            temporal_resolver: Resolver for the date phrase
            child_matcher: Matcher for the child candidate
            category_normalizer: Normalizer for category and urgency
            confidence_calculator: Calculator applying the minimum rule
            validation_penalty: Confidence removed when the category was
                substituted or a mentioned child is unknown
            error_handler: Handler used to report failed analyses
        """
        if not 0.0 < validation_penalty <= 1.0:
            raise ValueError("validation_penalty must be in (0, 1]")

        self.logger = LoggingManager.get_logger(__name__)
        self.temporal_resolver = temporal_resolver or TemporalResolver()
        self.child_matcher = child_matcher or ChildNameMatcher()
        self.category_normalizer = category_normalizer or CategoryNormalizer()
        self.confidence_calculator = confidence_calculator or ConfidenceCalculator()
        self.guess_provider = guess_provider or KeywordGuessProvider(
            temporal_resolver=self.temporal_resolver,
            child_matcher=self.child_matcher,
        )
        self.validation_penalty = validation_penalty
        self.error_handler = error_handler or ErrorHandler(self.logger)

    @classmethod
    def from_config(cls, config) -> 'SemanticTaskExtractor':
        """Wire an extractor from an ``AppConfig``."""
        temporal_resolver = TemporalResolver.from_config(config.temporal)
        return cls(
            guess_provider=create_guess_provider(config.classifier, temporal_resolver),
            temporal_resolver=temporal_resolver,
            confidence_calculator=ConfidenceCalculator.from_config(config.confidence),
            validation_penalty=config.confidence.default_penalty,
        )

    def analyze(self, transcript: str, context: HouseholdContext,
                now: Optional[datetime] = None) -> Extraction:
        """Extract a structured task from a transcript.

        Args:
            transcript: Transcribed French instruction
            context: Household children and locale
            now: Reference instant for deadline resolution (defaults to now)

        Returns:
            Validated extraction with per-field and overall confidence

        Raises:
            EmptyTranscriptError: If the transcript is empty or whitespace
            EmptyActionTextError: If no action text could be derived
            ClassificationError: If the guess provider fails
        """
        if transcript is None or not transcript.strip():
            raise EmptyTranscriptError()

        if now is None:
            now = datetime.now()

        transcript = transcript.strip()
        raw_guess = self.guess_provider.guess(transcript, context.child_names, now)

        action_text = (raw_guess.action_text or "").strip()
        if not action_text:
            raise EmptyActionTextError()

        category = self.category_normalizer.normalize_category(raw_guess.category_raw)
        urgency = self.category_normalizer.normalize_urgency(raw_guess.urgency_raw)
        child = self.child_matcher.match(raw_guess.child_name_raw, context.children)
        deadline = self.temporal_resolver.resolve(raw_guess.date_raw, now)

        child_unmatched = bool(raw_guess.child_name_raw and raw_guess.child_name_raw.strip()) and child is None

        factor_scores = []
        if raw_guess.confidence is not None:
            factor_scores.append(ConfidenceFactorScore(
                factor=ConfidenceFactor.CLASSIFIER,
                score=raw_guess.confidence,
                evidence=["Confiance du classifieur"],
            ))
        factor_scores.append(ConfidenceFactorScore(
            factor=ConfidenceFactor.DEADLINE,
            score=deadline.confidence,
            evidence=[f"Échéance {deadline.source.value}"],
        ))
        if category.substituted or child_unmatched:
            evidence = []
            if category.substituted:
                evidence.append(f"Catégorie inconnue remplacée: {raw_guess.category_raw!r}")
            if child_unmatched:
                evidence.append(f"Enfant non reconnu: {raw_guess.child_name_raw!r}")
            factor_scores.append(ConfidenceFactorScore(
                factor=ConfidenceFactor.VALIDATION,
                score=round(1.0 - self.validation_penalty, 2),
                evidence=evidence,
            ))

        calculation = self.confidence_calculator.calculate(factor_scores)

        extraction = Extraction(
            action_text=action_text,
            category=category.value,
            urgency=urgency.value,
            deadline=deadline,
            confidence_overall=calculation.overall_confidence,
            child_name=child.name if child else None,
            child_id=child.child_id if child else None,
            transcript=transcript,
            category_substituted=category.substituted,
            urgency_substituted=urgency.substituted,
            child_candidate=raw_guess.child_name_raw,
            confidence_level=calculation.confidence_level,
            confidence_details=self.confidence_calculator.export_calculation_details(calculation),
            recurrence=deadline.recurrence,
        )

        self.logger.info(
            f"Extracted '{extraction.action_text}' ({extraction.category.value}, "
            f"child={extraction.child_name}, deadline={deadline.to_iso()}) "
            f"with confidence {extraction.confidence_overall:.2f}"
        )
        return extraction

    def try_analyze(self, transcript: str, context: HouseholdContext,
                    now: Optional[datetime] = None) -> AnalysisOutcome:
        """Run ``analyze`` and report hard failures as an unsuccessful outcome.

        Returns:
            Outcome with the extraction, or with the error message on failure
        """
        try:
            extraction = self.analyze(transcript, context, now)
        except (ExtractionError, ClassificationError) as e:
            self.error_handler.handle_error(e, "Analyse vocale")
            return AnalysisOutcome(success=False, error=e.message)
        return AnalysisOutcome(success=True, extraction=extraction)
