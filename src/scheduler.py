"""
Review Scheduler: SuperMemo-2 style interval engine for flashcards.
Computes the next review date and ease factor from a 1-4 recall rating, plus due-set selection.
"""
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from engine import (
    EASE_FACTOR_FLOOR,
    FIRST_INTERVAL_DAYS,
    INITIAL_EASE_FACTOR,
    LAPSE_INTERVAL_DAYS,
    MAX_QUALITY,
    MIN_QUALITY,
    PASSING_QUALITY,
    REVIEW_FALLBACK_SIZE,
    SECOND_INTERVAL_DAYS,
)

logger = logging.getLogger(__name__)


class InvalidQualityError(ValueError):
    """Raised when a recall rating is not an integer in [MIN_QUALITY, MAX_QUALITY]."""


def parse_date(value) -> Optional[date]:
    """Accept a date, datetime or ISO string (date or timestamp) and return the calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def parse_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass(frozen=True)
class ReviewableCard:
    """A flashcard row: content columns plus the four scheduling fields."""

    id: Optional[str] = None
    front: str = ""
    back: str = ""
    subject: str = ""
    topic: str = ""
    difficulty: str = "medium"
    user_id: Optional[str] = None
    study_plan_id: Optional[str] = None
    repetitions: int = 0
    ease_factor: float = INITIAL_EASE_FACTOR
    interval: int = 0
    last_reviewed_at: Optional[datetime] = None
    next_review_at: Optional[date] = None
    created_at: Optional[datetime] = None

    @classmethod
    def new(cls, today: Optional[date] = None, **content) -> "ReviewableCard":
        """Fresh card: never reviewed, due today."""
        return cls(next_review_at=today or date.today(), **content)

    @classmethod
    def from_row(cls, row: Dict) -> "ReviewableCard":
        """Build a card from a `flashcards` table row (Supabase returns ISO strings)."""
        return cls(
            id=row.get("id"),
            front=row.get("front") or "",
            back=row.get("back") or "",
            subject=row.get("subject") or "",
            topic=row.get("topic") or "",
            difficulty=row.get("difficulty") or "medium",
            user_id=row.get("user_id"),
            study_plan_id=row.get("study_plan_id"),
            repetitions=int(row.get("repetitions") or 0),
            ease_factor=float(row.get("ease_factor") or INITIAL_EASE_FACTOR),
            interval=int(row.get("interval") or 0),
            last_reviewed_at=parse_datetime(row.get("last_reviewed_at")),
            next_review_at=parse_date(row.get("next_review_at")),
            created_at=parse_datetime(row.get("created_at")),
        )

    def is_due(self, today: Optional[date] = None) -> bool:
        """Due iff next_review_at is on or before today (date-only comparison)."""
        today = today or date.today()
        due = parse_date(self.next_review_at)
        return due is None or due <= today


@dataclass(frozen=True)
class ScheduleUpdate:
    """The five scheduling fields produced by one review."""

    repetitions: int
    ease_factor: float
    interval: int
    next_review_at: date
    last_reviewed_at: datetime

    @property
    def is_lapse(self) -> bool:
        return self.repetitions == 0

    def apply(self, card: ReviewableCard) -> ReviewableCard:
        return replace(
            card,
            repetitions=self.repetitions,
            ease_factor=self.ease_factor,
            interval=self.interval,
            next_review_at=self.next_review_at,
            last_reviewed_at=self.last_reviewed_at,
        )

    def to_row(self) -> Dict:
        """Column values for the storage update keyed by card id."""
        return {
            "repetitions": self.repetitions,
            "ease_factor": self.ease_factor,
            "interval": self.interval,
            "next_review_at": self.next_review_at.isoformat(),
            "last_reviewed_at": self.last_reviewed_at.isoformat(),
        }


def validate_quality(quality) -> int:
    # bool is an int subclass; a True/False rating is a caller bug
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(f"Quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidQualityError(f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}")
    return quality


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """
    Ease update, applied on every review including lapses.

    Formula: EF' = max(1.3, EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))
    """
    penalty = 5 - quality
    return max(EASE_FACTOR_FLOOR, ease_factor + (0.1 - penalty * (0.08 + penalty * 0.02)))


def schedule_review(card: ReviewableCard, quality: int, now: Optional[datetime] = None) -> ScheduleUpdate:
    """
    Compute the next scheduling state for a card after a recall rating.

    Args:
        card: Card being reviewed (only the scheduling fields are read)
        quality: Recall rating 1-4 (Again, Hard, Good, Easy)
        now: Review timestamp (defaults to current local time)

    Returns:
        ScheduleUpdate with repetitions, ease_factor, interval, next_review_at, last_reviewed_at

    Raises:
        InvalidQualityError: quality is not an integer in [1, 4]
    """
    quality = validate_quality(quality)
    now = now or datetime.now()

    if quality >= PASSING_QUALITY:
        if card.repetitions == 0:
            interval = FIRST_INTERVAL_DAYS
        elif card.repetitions == 1:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = round_half_up(card.interval * card.ease_factor)
        repetitions = card.repetitions + 1
    else:
        repetitions = 0
        interval = LAPSE_INTERVAL_DAYS

    ease_factor = next_ease_factor(card.ease_factor, quality)
    next_review_at = now.date() + timedelta(days=interval)

    logger.debug(
        f"Scheduled card {card.id}: q={quality}, reps {card.repetitions}->{repetitions}, "
        f"interval {card.interval}->{interval}, EF {card.ease_factor:.2f}->{ease_factor:.2f}, due {next_review_at}"
    )

    return ScheduleUpdate(
        repetitions=repetitions,
        ease_factor=ease_factor,
        interval=interval,
        next_review_at=next_review_at,
        last_reviewed_at=now,
    )


def iter_cards(cards) -> Iterable[ReviewableCard]:
    if isinstance(cards, Mapping):
        return cards.values()
    return cards


def select_due_cards(cards, today: Optional[date] = None) -> List[ReviewableCard]:
    """Every card with next_review_at <= today, in input order. Accepts a list or an id->card mapping."""
    today = today or date.today()
    return [card for card in iter_cards(cards) if card.is_due(today)]


def build_review_queue(cards, today: Optional[date] = None, fallback_size: int = REVIEW_FALLBACK_SIZE) -> List[ReviewableCard]:
    """
    Cards to review this session.

    Due cards when any exist; otherwise the first `fallback_size` cards so the
    session is never empty while the deck has cards.
    """
    all_cards = list(iter_cards(cards))
    due = select_due_cards(all_cards, today)
    if due:
        return due
    logger.info(f"No cards due, falling back to first {min(fallback_size, len(all_cards))} of {len(all_cards)}")
    return all_cards[:fallback_size]
