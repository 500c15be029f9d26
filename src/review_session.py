"""
Flashcard review session: walks a queue of due cards, one "show answer -> rate" step at a time.
Each rating goes through the scheduler; persisting the result is the caller's job.
"""
import logging
from collections import Counter
from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from engine import PASSING_QUALITY, QUALITY_LABELS, REVIEW_FALLBACK_SIZE
from src.scheduler import (
    ReviewableCard,
    ScheduleUpdate,
    build_review_queue,
    iter_cards,
    parse_date,
    round_half_up,
    schedule_review,
)

logger = logging.getLogger(__name__)


class SessionCompleteError(RuntimeError):
    """Raised when rating a card after the queue is exhausted."""


class ReviewSession:
    """Manages a single flashcard review pass over today's queue."""

    def __init__(
        self,
        user_id: UUID | str | None,
        cards,
        today: Optional[date] = None,
        fallback_size: int = REVIEW_FALLBACK_SIZE,
    ):
        """
        Initialize review session.

        Args:
            user_id: Owner of the deck
            cards: Cards of the selected study plan (list or id -> card mapping)
            today: Review date (defaults to the local date)
            fallback_size: Cards to review when nothing is due
        """
        self.session_id = uuid4()
        self.user_id = user_id
        self.queue: List[ReviewableCard] = build_review_queue(cards, today, fallback_size)
        self.reviewed: List[ReviewableCard] = []
        self.answers: List[Dict] = []

        self.started_at = datetime.now()
        self.ended_at = None
        self.summary: Optional[Dict] = None
        self.current_idx = 0

        logger.info(f"Review session {self.session_id}: {len(self.queue)} card(s) queued")

    def current_card(self) -> Optional[ReviewableCard]:
        if self.current_idx >= len(self.queue):
            return None
        return self.queue[self.current_idx]

    @property
    def is_complete(self) -> bool:
        return self.current_idx >= len(self.queue)

    def rate(self, quality: int, now: Optional[datetime] = None) -> ScheduleUpdate:
        """
        Schedule the current card with the given rating and move to the next one.

        Returns:
            ScheduleUpdate to persist for the rated card
        """
        card = self.current_card()
        if card is None:
            raise SessionCompleteError(f"Review session {self.session_id} has no cards left")

        update = schedule_review(card, quality, now)
        self.reviewed.append(update.apply(card))
        self.answers.append({
            "card_id": card.id,
            "quality": quality,
            "is_lapse": quality < PASSING_QUALITY,
            "interval": update.interval,
            "next_review_at": update.next_review_at.isoformat(),
        })
        self.current_idx += 1
        return update

    def progress_percent(self) -> float:
        if not self.queue:
            return 0.0
        return self.current_idx / len(self.queue) * 100

    def end_session(self) -> Dict:
        """
        Finalize the session.

        Returns:
            Summary with counts, recall rate and rating breakdown (computed once; later calls return it)
        """
        if self.summary is not None:
            return self.summary
        self.ended_at = datetime.now()
        reviewed = len(self.answers)
        lapses = sum(1 for a in self.answers if a["is_lapse"])
        by_quality = Counter(a["quality"] for a in self.answers)

        self.summary = {
            "session_id": str(self.session_id),
            "user_id": str(self.user_id) if self.user_id is not None else None,
            "cards_reviewed": reviewed,
            "cards_remaining": len(self.queue) - self.current_idx,
            "lapses": lapses,
            "recall_rate_percent": ((reviewed - lapses) / reviewed * 100) if reviewed else 0,
            "quality_breakdown": {label: by_quality.get(q, 0) for q, label in QUALITY_LABELS.items()},
            "duration_minutes": (self.ended_at - self.started_at).total_seconds() / 60,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat(),
        }

        logger.info(f"Review session {self.session_id} completed: {reviewed} reviewed, {lapses} lapse(s)")
        return self.summary


def deck_stats(cards, today: Optional[date] = None) -> Dict:
    """Dashboard counts: total cards, due now, reviewed today, success rate (cards on a streak)."""
    today = today or date.today()
    cards = list(iter_cards(cards))
    on_streak = sum(1 for c in cards if c.repetitions > 0)
    return {
        "total": len(cards),
        "due": sum(1 for c in cards if c.is_due(today)),
        "reviewed_today": sum(1 for c in cards if parse_date(c.last_reviewed_at) == today),
        "success_rate_percent": round_half_up(on_streak / len(cards) * 100) if cards else 0,
    }
