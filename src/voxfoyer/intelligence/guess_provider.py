"""Classification Collaborators

Guess providers turn a transcript into a raw, unvalidated task guess: action
text, category, child name, date phrase and urgency. The keyword provider
works offline from French keyword rules; the Ollama provider asks a local LLM.
Everything they return is repaired downstream by the task extractor.
"""

import json
import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..core.error_handler import ClassificationError, ErrorSeverity
from ..core.logging_manager import LoggingManager
from ..processors.core.temporal_resolver import TemporalResolver
from ..processors.core.text_normalizer import normalize_text
from .child_matcher import ChildNameMatcher


@dataclass
class RawGuess:
    """Best-effort guess produced by a classification collaborator."""
    action_text: str
    category_raw: Optional[str] = None
    child_name_raw: Optional[str] = None
    date_raw: Optional[str] = None
    urgency_raw: Optional[str] = None
    confidence: Optional[float] = None
    reasoning: Optional[str] = None


class GuessProvider(ABC):
    """Capability that produces a raw task guess from a transcript."""

    @abstractmethod
    def guess(self, transcript: str, children: Sequence[str],
              now: Optional[datetime] = None) -> RawGuess:
        """Guess the task fields for a transcript.

        Args:
            transcript: Transcribed French instruction
            children: Display names of the household children
            now: Reference instant used to validate calendar dates

        Returns:
            Raw, unvalidated guess
        """


class KeywordGuessProvider(GuessProvider):
    """Rule-based provider built on French keyword detection."""

    def __init__(self, temporal_resolver: Optional[TemporalResolver] = None,
                 child_matcher: Optional[ChildNameMatcher] = None):
        """Initialize the keyword provider.

        Args:
            temporal_resolver: Resolver used to locate the date phrase
            child_matcher: Matcher used to spot child names
        """
        self.logger = LoggingManager.get_logger(__name__)
        self.temporal_resolver = temporal_resolver or TemporalResolver()
        self.child_matcher = child_matcher or ChildNameMatcher()

        self.category_patterns = self._build_category_patterns()
        self.urgency_patterns = self._build_urgency_patterns()

    def _build_category_patterns(self) -> List[Dict[str, Any]]:
        """Build keyword patterns per category, in tie-break order.

        Patterns run against lowercase text with diacritics removed.

        Returns:
            List of category pattern configurations
        """
        return [
            {
                "category": "sante",
                "patterns": [
                    r"medecin", r"docteur", r"dentiste", r"vaccin", r"ordonnance",
                    r"pharmacie", r"medicament", r"\bsante\b", r"hopital",
                    r"pediatre", r"rendez-vous medical",
                ],
            },
            {
                "category": "ecole",
                "patterns": [
                    r"\becole\b", r"college", r"lycee", r"\bprof\b", r"enseignant",
                    r"reunion.*parent", r"fourniture", r"cartable", r"rentree",
                    r"scolaire", r"\beleves?\b", r"devoirs",
                ],
            },
            {
                "category": "activites",
                "patterns": [
                    r"\bsport", r"\bfoot", r"rugby", r"tennis", r"natation", r"piscine",
                    r"musique", r"piano", r"guitare", r"\bdanse", r"activite",
                    r"\bclub\b", r"cours de",
                ],
            },
            {
                "category": "social",
                "patterns": [
                    r"anniversaire", r"\bfete\b", r"cadeau", r"invitation", r"\bamis?\b",
                    r"soiree", r"gouter", r"copain", r"copine",
                ],
            },
            {
                "category": "administratif",
                "patterns": [
                    r"papier", r"document", r"formulaire", r"assurance", r"\bcaf\b",
                    r"impots?\b", r"passeport", r"carte.*identite", r"administratif",
                    r"dossier", r"inscription",
                ],
            },
            {
                "category": "logistique",
                "patterns": [
                    r"emmener", r"chercher", r"recuperer", r"conduire", r"transport",
                    r"\bgarde\b", r"\bbaby", r"nourrice", r"vacances", r"voyage",
                    r"deplacement", r"voiture",
                ],
            },
            {
                "category": "quotidien",
                "patterns": [
                    r"couche", r"repas", r"cuisine", r"courses", r"vetement", r"lessive",
                    r"menage", r"\blinge\b", r"manger", r"supermarche",
                    r"acheter.*pain", r"acheter.*lait",
                ],
            },
        ]

    def _build_urgency_patterns(self) -> List[Dict[str, Any]]:
        """Build urgency keyword patterns, high urgency first."""
        return [
            {
                "urgency": "haute",
                "pattern": r"urgent|important|immediat|aujourd'?hui|tout de suite|\bvite\b"
                           r"|rapidement|asap|maintenant",
            },
            {
                "urgency": "basse",
                "pattern": r"quand.*peut|si possible|eventuellement|pas presse|plus tard"
                           r"|un jour\b|occasionnel",
            },
        ]

    def guess(self, transcript: str, children: Sequence[str],
              now: Optional[datetime] = None) -> RawGuess:
        """Guess the task fields from keywords.

        Args:
            transcript: Transcribed French instruction
            children: Display names of the household children
            now: Reference instant used to validate calendar dates

        Returns:
            Raw guess whose confidence is the category keyword confidence
        """
        normalized = normalize_text(transcript)

        category, hits = self._detect_category(normalized)
        confidence = min(0.9, 0.5 + hits * 0.1) if hits else 0.3

        raw_guess = RawGuess(
            action_text=self._build_action_text(transcript),
            category_raw=category,
            child_name_raw=self.child_matcher.find_in_text(transcript, children),
            date_raw=self.temporal_resolver.find_phrase(transcript, now),
            urgency_raw=self._detect_urgency(normalized),
            confidence=round(confidence, 2),
        )

        self.logger.debug(
            f"Keyword guess: category={raw_guess.category_raw} ({hits} hits), "
            f"child={raw_guess.child_name_raw}, date={raw_guess.date_raw}, "
            f"urgency={raw_guess.urgency_raw}"
        )
        return raw_guess

    def _detect_category(self, normalized: str):
        """Return the category with the most keyword hits and its hit count."""
        best_category = None
        best_hits = 0

        for category_config in self.category_patterns:
            hits = sum(
                1 for pattern in category_config["patterns"]
                if re.search(pattern, normalized)
            )
            if hits > best_hits:
                best_category = category_config["category"]
                best_hits = hits

        return best_category, best_hits

    def _detect_urgency(self, normalized: str) -> str:
        for urgency_config in self.urgency_patterns:
            if re.search(urgency_config["pattern"], normalized):
                return urgency_config["urgency"]
        return "normale"

    def _build_action_text(self, transcript: str) -> str:
        text = transcript.strip().rstrip(".!?").strip()
        if not text:
            return ""
        return text[0].upper() + text[1:]


class OllamaGuessProvider(GuessProvider):
    """LLM-backed provider calling a local Ollama server."""

    EXAMPLE_OUTPUT = {
        "action": "Renvoyer l'autorisation de sortie scolaire",
        "childName": "Emma",
        "date": "cette semaine",
        "category": "ecole",
        "urgency": "normale",
        "confidence": 0.92,
        "reasoning": "Texte clair, enfant identifié, délai implicite court",
    }

    FIELD_KEYS = {
        "action_text": ("action", "action_text", "title", "titre"),
        "category_raw": ("category", "categorie", "catégorie"),
        "child_name_raw": ("childName", "child_name", "child", "enfant"),
        "date_raw": ("date", "deadline", "echeance", "échéance"),
        "urgency_raw": ("urgency", "urgence"),
        "confidence": ("confidence", "confiance"),
        "reasoning": ("reasoning", "raisonnement"),
    }

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "qwen2.5:7b",
                 timeout: int = 30, temperature: float = 0.1):
        """Initialize the Ollama provider.

        Args:
            base_url: Ollama server URL
            model: Model name to generate with
            timeout: Request timeout in seconds
            temperature: Sampling temperature
        """
        self.logger = LoggingManager.get_logger(__name__)
        self.base_url = base_url.rstrip('/')
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    def build_system_prompt(self, children: Sequence[str]) -> str:
        """Build the French system prompt, listing household children."""
        children_context = f"\nEnfants du foyer: {', '.join(children)}" if children else ""

        return f"""Tu es un assistant de charge mentale familiale.
À partir du texte fourni par un parent, extrais les informations de la tâche en JSON.
{children_context}

Catégories disponibles:
- ecole: inscriptions, fournitures, réunions, sorties scolaires
- sante: vaccins, médecin, dentiste, ordonnances, médicaments
- administratif: papiers, assurance, CAF, impôts, documents
- quotidien: repas, vêtements, courses, ménage
- social: anniversaires, cadeaux, invitations, fêtes
- activites: sport, musique, inscriptions loisirs
- logistique: transport, garde, vacances, déplacements

Règles:
1. Si un prénom d'enfant est mentionné, mets-le dans childName
2. Si une date/période est mentionnée (demain, lundi, semaine prochaine...), mets-la dans date
3. Estime l'urgence: haute (aujourd'hui/demain), normale (cette semaine), basse (plus tard)
4. La confiance doit refléter la clarté du texte (0.9+ si très clair, 0.5-0.7 si ambigu)
5. L'action doit être formulée comme une tâche actionnable

Réponds UNIQUEMENT avec un JSON valide, sans texte supplémentaire."""

    def build_user_prompt(self, transcript: str) -> str:
        example = json.dumps(self.EXAMPLE_OUTPUT, ensure_ascii=False, indent=2)
        return f'Exemple de sortie attendue:\n{example}\n\nTexte à analyser:\n"{transcript}"'

    def guess(self, transcript: str, children: Sequence[str],
              now: Optional[datetime] = None) -> RawGuess:
        """Ask the LLM for a task guess.

        Args:
            transcript: Transcribed French instruction
            children: Display names of the household children
            now: Unused, the model returns the date phrase as spoken

        Returns:
            Raw guess parsed from the model's JSON answer

        Raises:
            ClassificationError: If the request fails or the answer is not usable JSON
        """
        try:
            response = requests.post(
                f"{self.base_url}/api/generate",
                json={
                    "model": self.model,
                    "system": self.build_system_prompt(children),
                    "prompt": self.build_user_prompt(transcript),
                    "temperature": self.temperature,
                    "format": "json",
                    "stream": False
                },
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            self.logger.error(f"Ollama request failed: {e}")
            raise ClassificationError(f"Classification service unavailable: {e}")
        except ValueError as e:
            raise ClassificationError(f"Classification service returned invalid JSON: {e}")

        llm_response = data.get("response", "")
        if not llm_response:
            raise ClassificationError("Classification service returned an empty response",
                                      ErrorSeverity.MEDIUM)

        return self.parse_response(llm_response)

    def parse_response(self, content: str) -> RawGuess:
        """Parse the model answer, accepting fenced ```json blocks.

        Raises:
            ClassificationError: If the content is not a JSON object
        """
        json_content = content.strip()
        fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", json_content)
        if fenced:
            json_content = fenced.group(1).strip()

        try:
            parsed = json.loads(json_content)
        except json.JSONDecodeError as e:
            self.logger.warning(f"Could not parse classifier answer: {e}")
            raise ClassificationError(f"JSON parse error: {e}", ErrorSeverity.MEDIUM)

        if not isinstance(parsed, dict):
            raise ClassificationError("Classifier answer is not a JSON object", ErrorSeverity.MEDIUM)

        fields = {name: self._first_value(parsed, keys) for name, keys in self.FIELD_KEYS.items()}

        return RawGuess(
            action_text=str(fields["action_text"] or ""),
            category_raw=self._optional_str(fields["category_raw"]),
            child_name_raw=self._optional_str(fields["child_name_raw"]),
            date_raw=self._optional_str(fields["date_raw"]),
            urgency_raw=self._optional_str(fields["urgency_raw"]),
            confidence=self._parse_confidence(fields["confidence"]),
            reasoning=self._optional_str(fields["reasoning"]),
        )

    def _first_value(self, parsed: Dict[str, Any], keys) -> Any:
        for key in keys:
            if parsed.get(key) is not None:
                return parsed[key]
        return None

    def _optional_str(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    def _parse_confidence(self, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            self.logger.warning(f"Ignoring non-numeric classifier confidence: {value!r}")
            return None
        if not math.isfinite(confidence):
            self.logger.warning(f"Ignoring non-finite classifier confidence: {value!r}")
            return None
        return max(0.0, min(1.0, confidence))


def create_guess_provider(classifier_config, temporal_resolver: Optional[TemporalResolver] = None) -> GuessProvider:
    """Build the guess provider named by a ``ClassifierConfig`` section."""
    if classifier_config.provider == "ollama":
        return OllamaGuessProvider(
            base_url=classifier_config.base_url,
            model=classifier_config.model,
            timeout=classifier_config.timeout,
            temperature=classifier_config.temperature,
        )
    return KeywordGuessProvider(temporal_resolver=temporal_resolver)
