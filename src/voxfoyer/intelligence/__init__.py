"""VoxFoyer Intelligence Package

Classification, validation and confidence scoring of vocal task guesses.
"""

from .category_normalizer import CategoryNormalizer, TaskCategory, TaskPriority, Urgency
from .child_matcher import ChildMatch, ChildNameMatcher, HouseholdContext, KnownChild
from .confidence_calculator import ConfidenceCalculator, ConfidenceLabel, ConfidenceLevel
from .guess_provider import GuessProvider, KeywordGuessProvider, OllamaGuessProvider, RawGuess
from .task_extractor import AnalysisOutcome, Extraction, SemanticTaskExtractor

__all__ = [
    "CategoryNormalizer",
    "TaskCategory",
    "TaskPriority",
    "Urgency",
    "ChildMatch",
    "ChildNameMatcher",
    "HouseholdContext",
    "KnownChild",
    "ConfidenceCalculator",
    "ConfidenceLabel",
    "ConfidenceLevel",
    "GuessProvider",
    "KeywordGuessProvider",
    "OllamaGuessProvider",
    "RawGuess",
    "AnalysisOutcome",
    "Extraction",
    "SemanticTaskExtractor",
]
