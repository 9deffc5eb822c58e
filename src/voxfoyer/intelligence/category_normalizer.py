"""Category and Urgency Normalizer

Repairs the category and urgency guessed by the classifier and maps them onto
the closed sets used by the task model. Unknown values never raise; they fall
back to a safe default and are flagged as substituted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from ..core.logging_manager import LoggingManager
from ..processors.core.text_normalizer import normalize_text


class TaskCategory(Enum):
    """Household task categories."""
    ECOLE = "ecole"
    SANTE = "sante"
    ADMINISTRATIF = "administratif"
    QUOTIDIEN = "quotidien"
    SOCIAL = "social"
    ACTIVITES = "activites"
    LOGISTIQUE = "logistique"


class Urgency(Enum):
    """Spoken urgency levels."""
    HAUTE = "haute"
    NORMALE = "normale"
    BASSE = "basse"


class TaskPriority(Enum):
    """Priority stored on created tasks."""
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


CATEGORY_DISPLAY_NAMES = {
    TaskCategory.ECOLE: "École",
    TaskCategory.SANTE: "Santé",
    TaskCategory.ADMINISTRATIF: "Administratif",
    TaskCategory.QUOTIDIEN: "Quotidien",
    TaskCategory.SOCIAL: "Social",
    TaskCategory.ACTIVITES: "Activités",
    TaskCategory.LOGISTIQUE: "Logistique",
}

URGENCY_DISPLAY_NAMES = {
    Urgency.HAUTE: "Haute",
    Urgency.NORMALE: "Normale",
    Urgency.BASSE: "Basse",
}

URGENCY_PRIORITIES = {
    Urgency.HAUTE: TaskPriority.HIGH,
    Urgency.NORMALE: TaskPriority.NORMAL,
    Urgency.BASSE: TaskPriority.LOW,
}

# Codes produced by the English-language classifier
CATEGORY_ALIASES = {
    "education": TaskCategory.ECOLE,
    "school": TaskCategory.ECOLE,
    "health": TaskCategory.SANTE,
    "administrative": TaskCategory.ADMINISTRATIF,
    "household": TaskCategory.QUOTIDIEN,
    "daily": TaskCategory.QUOTIDIEN,
    "social": TaskCategory.SOCIAL,
    "activities": TaskCategory.ACTIVITES,
    "activite": TaskCategory.ACTIVITES,
    "transport": TaskCategory.LOGISTIQUE,
    "logistics": TaskCategory.LOGISTIQUE,
}

URGENCY_ALIASES = {
    "high": Urgency.HAUTE,
    "urgent": Urgency.HAUTE,
    "urgente": Urgency.HAUTE,
    "normal": Urgency.NORMALE,
    "medium": Urgency.NORMALE,
    "low": Urgency.BASSE,
    "bas": Urgency.BASSE,
}

T = TypeVar("T")


@dataclass(frozen=True)
class NormalizedValue(Generic[T]):
    """Normalized field value and whether it had to be substituted."""
    value: T
    substituted: bool
    raw: Optional[str] = None


class CategoryNormalizer:
    """Maps raw classifier output onto task categories and urgencies."""

    DEFAULT_CATEGORY = TaskCategory.QUOTIDIEN
    DEFAULT_URGENCY = Urgency.NORMALE

    def __init__(self):
        self.logger = LoggingManager.get_logger(__name__)

    def normalize_category(self, raw: Optional[str]) -> NormalizedValue[TaskCategory]:
        """Normalize a raw category guess.

        Args:
            raw: Category as produced by the classifier

        Returns:
            Category in the closed set; ``quotidien`` with ``substituted=True``
            when the input is missing or unknown
        """
        key = self._key(raw)
        category = self._lookup(TaskCategory, CATEGORY_ALIASES, key)
        if category is None:
            self.logger.debug(f"Unknown category '{raw}', using {self.DEFAULT_CATEGORY.value}")
            return NormalizedValue(self.DEFAULT_CATEGORY, substituted=True, raw=raw)
        return NormalizedValue(category, substituted=False, raw=raw)

    def normalize_urgency(self, raw: Optional[str]) -> NormalizedValue[Urgency]:
        """Normalize a raw urgency guess, defaulting to ``normale``."""
        key = self._key(raw)
        urgency = self._lookup(Urgency, URGENCY_ALIASES, key)
        if urgency is None:
            self.logger.debug(f"Unknown urgency '{raw}', using {self.DEFAULT_URGENCY.value}")
            return NormalizedValue(self.DEFAULT_URGENCY, substituted=True, raw=raw)
        return NormalizedValue(urgency, substituted=False, raw=raw)

    @staticmethod
    def urgency_to_priority(urgency: Urgency) -> TaskPriority:
        return URGENCY_PRIORITIES[urgency]

    @staticmethod
    def category_display_name(category: TaskCategory) -> str:
        return CATEGORY_DISPLAY_NAMES[category]

    @staticmethod
    def urgency_display_name(urgency: Urgency) -> str:
        return URGENCY_DISPLAY_NAMES[urgency]

    def _key(self, raw: Optional[str]) -> str:
        if raw is None:
            return ""
        return normalize_text(str(raw)).replace(" ", "_")

    def _lookup(self, enum_type, aliases, key: str):
        if not key:
            return None
        for member in enum_type:
            if member.value == key:
                return member
        return aliases.get(key)
