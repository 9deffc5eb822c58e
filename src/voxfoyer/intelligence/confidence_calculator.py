"""Confidence Calculator for Vocal Task Extraction

Combines the per-factor confidences of an extraction (classifier guess,
deadline resolution, validation penalty) into one overall score using the
minimum rule, and maps scores to the French confidence labels shown to users.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.logging_manager import LoggingManager


class ConfidenceLevel(Enum):
    """Confidence level categories."""
    VERY_CONFIDENT = "tres_confiant"   # >= 0.9
    CONFIDENT = "confiant"             # 0.7-0.89
    MODERATE = "modere"                # 0.5-0.69
    UNCERTAIN = "incertain"            # < 0.5


class ConfidenceFactor(Enum):
    """Factors that contribute to an extraction's overall confidence."""
    CLASSIFIER = "classifier"
    DEADLINE = "deadline"
    VALIDATION = "validation"


@dataclass(frozen=True)
class ConfidenceLabel:
    """Display information for a confidence score."""
    level: ConfidenceLevel
    label: str
    color: str
    requires_confirmation: bool
    auto_acceptable: bool


@dataclass
class ConfidenceFactorScore:
    """Score for an individual confidence factor."""
    factor: ConfidenceFactor
    score: float
    evidence: List[str] = field(default_factory=list)


@dataclass
class ConfidenceCalculation:
    """Complete confidence calculation with breakdown."""
    overall_confidence: float
    confidence_level: ConfidenceLevel
    factor_scores: List[ConfidenceFactorScore] = field(default_factory=list)
    weakest_factor: Optional[ConfidenceFactor] = None
    calculation_method: str = "minimum"


class ConfidenceCalculator:
    """Minimum-rule confidence calculator with French display labels."""

    LABELS = {
        ConfidenceLevel.VERY_CONFIDENT: ("Très confiant", "green"),
        ConfidenceLevel.CONFIDENT: ("Confiant", "blue"),
        ConfidenceLevel.MODERATE: ("Modéré", "yellow"),
        ConfidenceLevel.UNCERTAIN: ("Incertain", "red"),
    }

    def __init__(self, very_confident_threshold: float = 0.9,
                 confident_threshold: float = 0.7,
                 moderate_threshold: float = 0.5):
        """Initialize confidence calculator with its thresholds.

        Args:
            very_confident_threshold: Lowest score that may be auto-accepted
            confident_threshold: Lowest score labelled "Confiant"
            moderate_threshold: Scores below this require confirmation
        """
        self.logger = LoggingManager.get_logger(__name__)

        self.confidence_thresholds = {
            ConfidenceLevel.VERY_CONFIDENT: very_confident_threshold,
            ConfidenceLevel.CONFIDENT: confident_threshold,
            ConfidenceLevel.MODERATE: moderate_threshold,
            ConfidenceLevel.UNCERTAIN: 0.0,
        }

    @classmethod
    def from_config(cls, confidence_config) -> 'ConfidenceCalculator':
        """Build a calculator from a ``ConfidenceConfig`` section."""
        return cls(
            very_confident_threshold=confidence_config.very_confident_threshold,
            confident_threshold=confidence_config.confident_threshold,
            moderate_threshold=confidence_config.moderate_threshold,
        )

    def calculate(self, factor_scores: List[ConfidenceFactorScore]) -> ConfidenceCalculation:
        """Combine factor scores with the minimum rule.

        Args:
            factor_scores: Scores of the factors that apply to this extraction

        Returns:
            Calculation holding the overall score and the weakest factor

        Raises:
            ValueError: If no factor score is given
        """
        if not factor_scores:
            raise ValueError("At least one confidence factor is required")

        factor_scores = [
            replace(factor_score, score=max(0.0, min(1.0, factor_score.score)))
            for factor_score in factor_scores
        ]

        weakest = min(factor_scores, key=lambda fs: fs.score)
        overall = weakest.score
        level = self._determine_confidence_level(overall)

        self.logger.debug(
            f"Confidence {overall:.2f} ({level.value}), "
            f"weakest factor: {weakest.factor.value}"
        )

        return ConfidenceCalculation(
            overall_confidence=overall,
            confidence_level=level,
            factor_scores=factor_scores,
            weakest_factor=weakest.factor,
        )

    def get_confidence_label(self, score: float) -> ConfidenceLabel:
        """Map a score to its French label and display color.

        Args:
            score: Confidence score in [0, 1]

        Returns:
            Label with color and decision flags
        """
        level = self._determine_confidence_level(score)
        label, color = self.LABELS[level]
        return ConfidenceLabel(
            level=level,
            label=label,
            color=color,
            requires_confirmation=self.requires_confirmation(score),
            auto_acceptable=self.is_auto_acceptable(score),
        )

    def requires_confirmation(self, score: float) -> bool:
        """True when the user must confirm before the task is created."""
        return score < self.confidence_thresholds[ConfidenceLevel.MODERATE]

    def is_auto_acceptable(self, score: float) -> bool:
        """True when the task may be created without review."""
        return score >= self.confidence_thresholds[ConfidenceLevel.VERY_CONFIDENT]

    def _determine_confidence_level(self, score: float) -> ConfidenceLevel:
        for level in (ConfidenceLevel.VERY_CONFIDENT, ConfidenceLevel.CONFIDENT,
                      ConfidenceLevel.MODERATE):
            if score >= self.confidence_thresholds[level]:
                return level
        return ConfidenceLevel.UNCERTAIN

    def export_calculation_details(self, calculation: ConfidenceCalculation) -> Dict[str, Any]:
        """Export detailed calculation breakdown.

        Args:
            calculation: Confidence calculation result

        Returns:
            Detailed calculation data
        """
        return {
            "overall_confidence": calculation.overall_confidence,
            "confidence_level": calculation.confidence_level.value,
            "calculation_method": calculation.calculation_method,
            "weakest_factor": calculation.weakest_factor.value if calculation.weakest_factor else None,
            "factor_breakdown": [
                {
                    "factor": fs.factor.value,
                    "score": fs.score,
                    "evidence": fs.evidence,
                }
                for fs in calculation.factor_scores
            ],
        }
