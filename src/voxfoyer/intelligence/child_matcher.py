"""Child Name Matcher for Household Context

Matches a spoken child name against the children known to the household.
Matching is exact after case and diacritic folding; there is no fuzzy
matching, so "Léa" and "lea" match but "Lea-Rose" and "Léa" do not.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Union

from ..core.logging_manager import LoggingManager
from ..processors.core.text_normalizer import normalize_text


@dataclass(frozen=True)
class KnownChild:
    """A child of the household."""
    name: str
    id: str


@dataclass(frozen=True)
class ChildMatch:
    """Household child matched from a spoken candidate."""
    child_id: str
    name: str
    candidate: str


@dataclass(frozen=True)
class HouseholdContext:
    """Read-only household information supplied with each transcript."""
    children: Sequence[KnownChild] = field(default_factory=tuple)
    locale: str = "fr"

    def __post_init__(self):
        if self.locale != "fr":
            raise ValueError(f"Unsupported locale: {self.locale}")
        object.__setattr__(self, "children", tuple(self.children))

    @classmethod
    def from_names(cls, names: Iterable[str], locale: str = "fr") -> 'HouseholdContext':
        """Build a context from display names, deriving ids from the names."""
        return cls(
            children=[KnownChild(name=name, id=normalize_text(name)) for name in names],
            locale=locale,
        )

    @property
    def child_names(self) -> List[str]:
        return [child.name for child in self.children]


ChildLike = Union[KnownChild, str]


class ChildNameMatcher:
    """Case- and diacritic-insensitive matcher for household children."""

    def __init__(self):
        self.logger = LoggingManager.get_logger(__name__)

    def match(self, candidate: Optional[str],
              known_children: Iterable[ChildLike]) -> Optional[ChildMatch]:
        """Match a candidate name against the known children.

        Args:
            candidate: Name heard in the transcript, possibly None
            known_children: KnownChild objects or plain names, in household order

        Returns:
            The first child whose folded name equals the folded candidate,
            or None when the candidate is empty or unknown
        """
        if candidate is None or not candidate.strip():
            return None

        normalized_candidate = normalize_text(candidate)
        for child in self._as_known_children(known_children):
            if normalize_text(child.name) == normalized_candidate:
                self.logger.debug(f"Matched child candidate '{candidate}' to '{child.name}'")
                return ChildMatch(child_id=child.id, name=child.name, candidate=candidate.strip())

        self.logger.debug(f"No household child matches '{candidate}'")
        return None

    def find_in_text(self, text: str, known_children: Iterable[ChildLike]) -> Optional[str]:
        """Find the first known child mentioned as a whole word in a text.

        Args:
            text: Free text such as a transcript
            known_children: KnownChild objects or plain names

        Returns:
            The child's display name, or None
        """
        if not text:
            return None

        normalized = normalize_text(text)
        best_position = None
        best_name = None
        for child in self._as_known_children(known_children):
            folded_name = normalize_text(child.name)
            if not folded_name:
                continue
            found = re.search(rf"(?<!\w){re.escape(folded_name)}(?!\w)", normalized)
            if found and (best_position is None or found.start() < best_position):
                best_position = found.start()
                best_name = child.name

        return best_name

    def _as_known_children(self, known_children: Iterable[ChildLike]) -> List[KnownChild]:
        return [
            child if isinstance(child, KnownChild) else KnownChild(name=child, id=normalize_text(child))
            for child in known_children
        ]
