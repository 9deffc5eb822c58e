"""Temporal Resolver for French Deadline Expressions

Turns a French date phrase ("demain", "vendredi prochain", "à la rentrée")
into a concrete deadline with a confidence score and a provenance tag.

Rules are evaluated in a fixed precedence order and the first rule that
matches wins, whatever the position of the phrase in the text. Modifier
prefixes ("avant X", "d'ici X") are unwrapped before the cascade runs.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from dateutil.relativedelta import relativedelta

from ...core.logging_manager import LoggingManager
from .text_normalizer import fold_text, normalize_text


class TemporalSource(Enum):
    """Provenance of a temporal resolution."""
    EXPLICIT = "explicit"                        # unambiguous calendar date
    RELATIVE = "relative"                        # deterministic offset or weekday
    INFERRED = "inferred"                        # cultural heuristic
    DEFAULT = "default"                          # nothing matched
    DEFAULT_PASSTHROUGH = "default-passthrough"  # no phrase was given


class RecurrencePattern(Enum):
    """Recurrence frequencies."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class RecurrenceInfo:
    """Recurring pattern information."""
    pattern: RecurrencePattern
    interval: int = 1
    days_of_week: Tuple[int, ...] = ()  # 0=Monday, 6=Sunday

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.pattern.value,
            "interval": self.interval,
            "days_of_week": list(self.days_of_week),
        }


@dataclass(frozen=True)
class TemporalResolution:
    """Resolved deadline for a date phrase.

    For recurring phrases the timestamp is the first occurrence.
    """
    timestamp: Optional[datetime]
    confidence: float
    source: TemporalSource
    matched_phrase: Optional[str] = None
    has_time: bool = False
    recurrence: Optional[RecurrenceInfo] = None

    @property
    def is_default(self) -> bool:
        return self.source == TemporalSource.DEFAULT

    def to_iso(self) -> Optional[str]:
        """Serialize the timestamp, date-only when it carries no time of day."""
        if self.timestamp is None:
            return None
        if self.has_time:
            return self.timestamp.isoformat()
        return self.timestamp.date().isoformat()


# (datetime, canonical matched phrase) or None when the match is unusable
RuleHit = Optional[Tuple[datetime, str]]

MONTHS = {
    "janvier": 1, "fevrier": 2, "mars": 3, "avril": 4, "mai": 5, "juin": 6,
    "juillet": 7, "aout": 8, "septembre": 9, "octobre": 10, "novembre": 11,
    "decembre": 12,
}

MONTH_DISPLAY_NAMES = {
    1: "janvier", 2: "février", 3: "mars", 4: "avril", 5: "mai", 6: "juin",
    7: "juillet", 8: "août", 9: "septembre", 10: "octobre", 11: "novembre",
    12: "décembre",
}

WEEKDAYS = {
    "lundi": 0, "mardi": 1, "mercredi": 2, "jeudi": 3, "vendredi": 4,
    "samedi": 5, "dimanche": 6,
}

NUMBER_WORDS = {
    "un": 1, "une": 1, "deux": 2, "trois": 3, "quatre": 4, "cinq": 5,
    "six": 6, "sept": 7, "huit": 8, "neuf": 9, "dix": 10, "onze": 11,
    "douze": 12, "treize": 13, "quatorze": 14, "quinze": 15, "seize": 16,
    "vingt": 20, "trente": 30,
}

MODIFIERS = {
    "avant": {"display": "avant", "day_shift": -1, "confidence_penalty": 0.10},
    "d'ici": {"display": "d'ici", "day_shift": 0, "confidence_penalty": 0.05},
}

_MONTH_ALT = "|".join(MONTHS)
_WEEKDAY_ALT = "|".join(WEEKDAYS)
_NUMBER_ALT = r"\d{1,3}|" + "|".join(sorted(NUMBER_WORDS, key=len, reverse=True))


class TemporalResolver:
    """First-match-wins resolver for French deadline phrases."""

    DEFAULT_CONFIDENCE = 0.3

    def __init__(self, default_offset_days: int = 3, week_end_day: str = "dimanche",
                 morning_hour: int = 9, afternoon_hour: int = 14, evening_hour: int = 20):
        """Initialize the resolver and compile its rule cascade.

        Args:
            default_offset_days: Days added to today when nothing matches
            week_end_day: Weekday that closes the week for "cette semaine"
            morning_hour: Hour used for "ce matin"
            afternoon_hour: Hour used for "cet après-midi"
            evening_hour: Hour used for "ce soir"
        """
        if week_end_day not in WEEKDAYS:
            raise ValueError(f"Unknown week end day: {week_end_day}")

        self.logger = LoggingManager.get_logger(__name__)
        self.default_offset_days = default_offset_days
        self.week_end_weekday = WEEKDAYS[week_end_day]
        self.time_of_day_hours = {
            "matin": morning_hour,
            "apres-midi": afternoon_hour,
            "soir": evening_hour,
        }

        self.rules = self._build_rules()
        for rule in self.rules:
            rule["regex"] = re.compile(rule["pattern"])

        self.modifier_regex = re.compile(r"^(avant|d'ici)\s+(.+)$")
        self.modifier_suffix_regex = re.compile(r"\b(avant|d'ici)\s+$")

    @classmethod
    def from_config(cls, temporal_config) -> 'TemporalResolver':
        """Build a resolver from a ``TemporalConfig`` section."""
        return cls(
            default_offset_days=temporal_config.default_offset_days,
            week_end_day=temporal_config.week_end_day,
            morning_hour=temporal_config.morning_hour,
            afternoon_hour=temporal_config.afternoon_hour,
            evening_hour=temporal_config.evening_hour,
        )

    def _build_rules(self) -> List[Dict[str, Any]]:
        """Build the ordered rule cascade.

        Returns:
            Rule configurations, highest precedence first
        """
        return [
            # Explicit calendar dates
            {
                "type": "explicit_day_month",
                "pattern": rf"\b(le\s+)?(\d{{1,2}}|premier)(er)?\s+({_MONTH_ALT})(?:\s+(\d{{4}}))?\b",
                "confidence": 0.95,
                "source": TemporalSource.EXPLICIT,
                "resolve": self._resolve_day_month,
            },
            {
                "type": "explicit_iso",
                "pattern": r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b",
                "confidence": 0.95,
                "source": TemporalSource.EXPLICIT,
                "resolve": self._resolve_iso_date,
            },
            {
                "type": "explicit_numeric",
                "pattern": r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}))?\b",
                "confidence": 0.95,
                "source": TemporalSource.EXPLICIT,
                "resolve": self._resolve_numeric_date,
            },
            # Today
            {
                "type": "today",
                "pattern": r"\b(aujourd'?\s?hui|ce jour)\b",
                "confidence": 1.0,
                "source": TemporalSource.EXPLICIT,
                "resolve": lambda m, now: (
                    self._start_of_day(now),
                    "ce jour" if m.group(1) == "ce jour" else "aujourd'hui",
                ),
            },
            # Day offsets, longest first
            {
                "type": "day_after_tomorrow",
                "pattern": r"\bapres[- ]?demain\b",
                "confidence": 1.0,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (self._days_from(now, 2), "après-demain"),
            },
            {
                "type": "tomorrow",
                "pattern": r"\bdemain\b",
                "confidence": 1.0,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (self._days_from(now, 1), "demain"),
            },
            # Time of day, today
            {
                "type": "this_morning",
                "pattern": r"\bce matin\b",
                "confidence": 0.9,
                "source": TemporalSource.RELATIVE,
                "has_time": True,
                "resolve": lambda m, now: (self._at_hour(now, "matin"), "ce matin"),
            },
            {
                "type": "this_afternoon",
                "pattern": r"\bcet?\s+apres[- ]?midi\b",
                "confidence": 0.9,
                "source": TemporalSource.RELATIVE,
                "has_time": True,
                "resolve": lambda m, now: (self._at_hour(now, "apres-midi"), "cet après-midi"),
            },
            {
                "type": "this_evening",
                "pattern": r"\bce soir\b",
                "confidence": 0.9,
                "source": TemporalSource.RELATIVE,
                "has_time": True,
                "resolve": lambda m, now: (self._at_hour(now, "soir"), "ce soir"),
            },
            # Counted offsets
            {
                "type": "in_n_days",
                "pattern": rf"\bdans\s+({_NUMBER_ALT})\s+jours?\b",
                "confidence": 0.95,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: self._resolve_count(m, now, 1, "jour(s)"),
            },
            {
                "type": "in_n_weeks",
                "pattern": rf"\bdans\s+({_NUMBER_ALT})\s+semaines?\b",
                "confidence": 0.9,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: self._resolve_count(m, now, 7, "semaine(s)"),
            },
            # Week references
            {
                "type": "this_week",
                "pattern": r"\bcette semaine\b",
                "confidence": 0.7,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (self._end_of_week(now), "cette semaine"),
            },
            {
                "type": "next_week",
                "pattern": r"\b(?:la\s+)?semaine prochaine\b",
                "confidence": 0.8,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (self._days_from(now, 7), "la semaine prochaine"),
            },
            {
                "type": "this_weekend",
                "pattern": r"\bce\s+week[- ]?end\b",
                "confidence": 0.75,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (self._coming_saturday(now), "ce week-end"),
            },
            # Month references
            {
                "type": "this_month",
                "pattern": r"\bce mois(?:[- ]ci)?\b",
                "confidence": 0.7,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (
                    self._start_of_day(now) + relativedelta(day=31),
                    "ce mois-ci",
                ),
            },
            {
                "type": "next_month",
                "pattern": r"\b(?:le\s+)?mois prochain\b",
                "confidence": 0.8,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (
                    self._start_of_day(now) + relativedelta(months=1),
                    "le mois prochain",
                ),
            },
            # Recurrences, before weekdays so "chaque lundi" is not a single Monday
            {
                "type": "daily_recurrence",
                "pattern": r"\b(tous les jours|chaque jour)\b",
                "confidence": 0.8,
                "source": TemporalSource.RELATIVE,
                "recurrence": lambda m: RecurrenceInfo(RecurrencePattern.DAILY),
                "resolve": lambda m, now: (self._start_of_day(now), m.group(1)),
            },
            {
                "type": "weekly_day_recurrence",
                "pattern": rf"\b(?:tous les ({_WEEKDAY_ALT})s|chaque ({_WEEKDAY_ALT}))\b",
                "confidence": 0.8,
                "source": TemporalSource.RELATIVE,
                "recurrence": lambda m: RecurrenceInfo(
                    RecurrencePattern.WEEKLY,
                    days_of_week=(WEEKDAYS[m.group(1) or m.group(2)],),
                ),
                "resolve": lambda m, now: (
                    self._next_weekday(now, WEEKDAYS[m.group(1) or m.group(2)]),
                    f"tous les {m.group(1)}s" if m.group(1) else f"chaque {m.group(2)}",
                ),
            },
            {
                "type": "weekly_recurrence",
                "pattern": r"\b(toutes les semaines|chaque semaine)\b",
                "confidence": 0.8,
                "source": TemporalSource.RELATIVE,
                "recurrence": lambda m: RecurrenceInfo(RecurrencePattern.WEEKLY),
                "resolve": lambda m, now: (self._days_from(now, 7), m.group(1)),
            },
            {
                "type": "monthly_recurrence",
                "pattern": r"\b(tous les mois|chaque mois)\b",
                "confidence": 0.8,
                "source": TemporalSource.RELATIVE,
                "recurrence": lambda m: RecurrenceInfo(RecurrencePattern.MONTHLY),
                "resolve": lambda m, now: (
                    self._start_of_day(now) + relativedelta(months=1),
                    m.group(1),
                ),
            },
            # Weekdays, "<jour> prochain" first
            {
                "type": "next_named_weekday",
                "pattern": rf"\b({_WEEKDAY_ALT})\s+prochain\b",
                "confidence": 0.95,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (
                    self._next_weekday(now, WEEKDAYS[m.group(1)]),
                    f"{m.group(1)} prochain",
                ),
            },
            {
                "type": "named_weekday",
                "pattern": rf"\b({_WEEKDAY_ALT})\b",
                "confidence": 0.85,
                "source": TemporalSource.RELATIVE,
                "resolve": lambda m, now: (
                    self._next_weekday(now, WEEKDAYS[m.group(1)]),
                    m.group(1),
                ),
            },
            # Cultural and seasonal expressions
            {
                "type": "after_holidays",
                "pattern": r"\bapres\s+les\s+vacances\b",
                "confidence": 0.5,
                "source": TemporalSource.INFERRED,
                "resolve": lambda m, now: (self._days_from(now, 14), "après les vacances"),
            },
            {
                "type": "back_to_school",
                "pattern": r"\b(a\s+)?la\s+rentree\b",
                "confidence": 0.6,
                "source": TemporalSource.INFERRED,
                "resolve": lambda m, now: (
                    self._next_school_start(now),
                    "à la rentrée" if m.group(1) else "la rentrée",
                ),
            },
            {
                "type": "end_of_year",
                "pattern": r"\bfin\s+(?:d'|de\s+l')annee\b",
                "confidence": 0.7,
                "source": TemporalSource.INFERRED,
                "resolve": lambda m, now: (
                    self._start_of_day(now).replace(month=12, day=31),
                    "fin d'année",
                ),
            },
            {
                "type": "month_name",
                "pattern": rf"\b({_MONTH_ALT})\b",
                "confidence": 0.6,
                "source": TemporalSource.INFERRED,
                "resolve": self._resolve_month_name,
            },
        ]

    def resolve(self, phrase: Optional[str], now: Optional[datetime] = None) -> TemporalResolution:
        """Resolve a French date phrase into a deadline.

        Args:
            phrase: Date phrase, or None when no date was mentioned
            now: Reference instant (defaults to the current time)

        Returns:
            Temporal resolution with timestamp, confidence and provenance
        """
        if phrase is None or not phrase.strip():
            self.logger.debug("No date phrase given, passing through without deadline")
            return TemporalResolution(
                timestamp=None,
                confidence=1.0,
                source=TemporalSource.DEFAULT_PASSTHROUGH,
            )

        if now is None:
            now = datetime.now()

        resolution = self._resolve_normalized(normalize_text(phrase), now)

        self.logger.info(
            f"Resolved '{phrase}' -> {resolution.to_iso()} "
            f"({resolution.source.value}, confidence {resolution.confidence:.2f})"
        )
        return resolution

    def infer_deadline(self, phrase: Optional[str], now: Optional[datetime] = None) -> Optional[str]:
        """Resolve a phrase and return only its serialized deadline."""
        return self.resolve(phrase, now).to_iso()

    def find_phrase(self, text: str, now: Optional[datetime] = None) -> Optional[str]:
        """Find the date phrase inside a free text.

        Args:
            text: Free text such as a full transcript
            now: Reference instant used to validate explicit dates

        Returns:
            Substring of ``text`` matched by the highest-precedence rule,
            including a leading "avant"/"d'ici" modifier, or None
        """
        if not text:
            return None
        if now is None:
            now = datetime.now()

        folded = fold_text(text)
        for rule in self.rules:
            for match in rule["regex"].finditer(folded):
                if rule["resolve"](match, now) is None:
                    continue

                start, end = match.span()
                modifier = self.modifier_suffix_regex.search(folded[:start])
                if modifier:
                    start = modifier.start()

                self.logger.debug(f"Found date phrase via rule '{rule['type']}'")
                return text[start:end]

        return None

    def _resolve_normalized(self, text: str, now: datetime) -> TemporalResolution:
        modified = self._resolve_modifier(text, now)
        if modified is not None:
            return modified

        for rule in self.rules:
            match = rule["regex"].search(text)
            if not match:
                continue

            hit = rule["resolve"](match, now)
            if hit is None:
                self.logger.debug(f"Rule '{rule['type']}' matched an unusable value, skipping")
                continue

            timestamp, matched_phrase = hit
            self.logger.debug(f"Rule '{rule['type']}' matched '{match.group(0)}'")
            return TemporalResolution(
                timestamp=timestamp,
                confidence=rule["confidence"],
                source=rule["source"],
                matched_phrase=matched_phrase,
                has_time=rule.get("has_time", False),
                recurrence=rule["recurrence"](match) if "recurrence" in rule else None,
            )

        return self._default_resolution(now)

    def _resolve_modifier(self, text: str, now: datetime) -> Optional[TemporalResolution]:
        """Resolve "avant X" / "d'ici X" by resolving X and shifting the result.

        Returns None when there is no modifier or X does not resolve, in which
        case the whole phrase goes through the regular cascade.
        """
        match = self.modifier_regex.match(text)
        if not match:
            return None

        modifier = MODIFIERS[match.group(1)]
        inner = self._resolve_normalized(match.group(2), now)
        if inner.is_default:
            return None

        confidence = round(max(0.0, inner.confidence - modifier["confidence_penalty"]), 2)
        return TemporalResolution(
            timestamp=inner.timestamp + timedelta(days=modifier["day_shift"]),
            confidence=confidence,
            source=inner.source,
            matched_phrase=f"{modifier['display']} {inner.matched_phrase}",
            has_time=inner.has_time,
            recurrence=inner.recurrence,
        )

    def _default_resolution(self, now: datetime) -> TemporalResolution:
        return TemporalResolution(
            timestamp=self._days_from(now, self.default_offset_days),
            confidence=self.DEFAULT_CONFIDENCE,
            source=TemporalSource.DEFAULT,
        )

    def _resolve_day_month(self, match: re.Match, now: datetime) -> RuleHit:
        article, day_text, suffix, month_name, year_text = match.groups()
        day = 1 if day_text == "premier" else int(day_text)
        month = MONTHS[month_name]
        date_value = self._calendar_date(now, day, month, int(year_text) if year_text else None)
        if date_value is None:
            return None

        day_display = "1er" if day == 1 else str(day)
        phrase = f"{'le ' if article else ''}{day_display} {MONTH_DISPLAY_NAMES[month]}"
        if year_text:
            phrase = f"{phrase} {year_text}"
        return date_value, phrase

    def _resolve_iso_date(self, match: re.Match, now: datetime) -> RuleHit:
        year, month, day = (int(group) for group in match.groups())
        date_value = self._calendar_date(now, day, month, year)
        if date_value is None:
            return None
        return date_value, match.group(0)

    def _resolve_numeric_date(self, match: re.Match, now: datetime) -> RuleHit:
        day_text, month_text, year_text = match.groups()
        date_value = self._calendar_date(
            now, int(day_text), int(month_text), int(year_text) if year_text else None
        )
        if date_value is None:
            return None
        return date_value, match.group(0)

    def _resolve_count(self, match: re.Match, now: datetime, unit_days: int, unit_label: str) -> RuleHit:
        count_text = match.group(1)
        count = int(count_text) if count_text.isdigit() else NUMBER_WORDS[count_text]
        return self._days_from(now, count * unit_days), f"dans {count} {unit_label}"

    def _resolve_month_name(self, match: re.Match, now: datetime) -> RuleHit:
        month = MONTHS[match.group(1)]
        today = self._start_of_day(now)

        if month == today.month:
            target = today + relativedelta(day=31)
        elif month > today.month:
            target = today.replace(month=month, day=1)
        else:
            target = today.replace(year=today.year + 1, month=month, day=1)

        return target, MONTH_DISPLAY_NAMES[month]

    def _calendar_date(self, now: datetime, day: int, month: int,
                       year: Optional[int]) -> Optional[datetime]:
        """Build a calendar date. Without a year this is the next occurrence
        on or after today, so 29 February rolls to the next leap year.
        Impossible dates give None."""
        today = self._start_of_day(now)
        if year is not None:
            try:
                return today.replace(year=year, month=month, day=day)
            except ValueError:
                return None

        # A leap day recurs within four years
        for candidate_year in range(today.year, today.year + 5):
            try:
                candidate = today.replace(year=candidate_year, month=month, day=day)
            except ValueError:
                continue
            if candidate >= today:
                return candidate
        return None

    def _start_of_day(self, now: datetime) -> datetime:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)

    def _days_from(self, now: datetime, days: int) -> datetime:
        return self._start_of_day(now) + timedelta(days=days)

    def _at_hour(self, now: datetime, period: str) -> datetime:
        return self._start_of_day(now).replace(hour=self.time_of_day_hours[period])

    def _end_of_week(self, now: datetime) -> datetime:
        return self._days_from(now, (self.week_end_weekday - now.weekday()) % 7)

    def _coming_saturday(self, now: datetime) -> datetime:
        if now.weekday() >= WEEKDAYS["samedi"]:
            return self._start_of_day(now)
        return self._days_from(now, WEEKDAYS["samedi"] - now.weekday())

    def _next_weekday(self, now: datetime, weekday: int) -> datetime:
        days_ahead = (weekday - now.weekday()) % 7 or 7
        return self._days_from(now, days_ahead)

    def _next_school_start(self, now: datetime) -> datetime:
        candidate = self._start_of_day(now).replace(month=9, day=1)
        if candidate <= now:
            candidate = candidate.replace(year=candidate.year + 1)
        return candidate


