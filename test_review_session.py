from datetime import date, datetime

import pytest

from src.review_session import ReviewSession, SessionCompleteError, deck_stats
from src.scheduler import InvalidQualityError, ReviewableCard

TODAY = date(2024, 1, 16)
NOW = datetime(2024, 1, 16, 9, 0)


@pytest.fixture
def deck():
    """Mixed deck: two due, one not due."""
    return [
        ReviewableCard(id="1", front="d/dx sin(x)", back="cos(x)", repetitions=3, ease_factor=2.5, interval=2,
                       next_review_at=date(2024, 1, 17)),
        ReviewableCard(id="2", front="Newton's 2nd law", back="F = ma", repetitions=2, ease_factor=2.3, interval=1,
                       next_review_at=date(2024, 1, 16)),
        ReviewableCard(id="3", front="Benzene", back="C6H6", next_review_at=date(2024, 1, 16)),
    ]


def test_session_queues_only_due_cards(deck):
    session = ReviewSession("user-1", deck, today=TODAY)
    assert [c.id for c in session.queue] == ["2", "3"]
    assert session.current_card().id == "2"


def test_rate_advances_and_records(deck):
    session = ReviewSession("user-1", deck, today=TODAY)
    update = session.rate(3, NOW)
    assert update.repetitions == 3
    assert update.interval == 2  # round(1 * 2.3)
    assert session.current_card().id == "3"
    assert session.progress_percent() == 50
    assert session.reviewed[0].id == "2"
    assert session.reviewed[0].interval == 2


def test_rating_after_last_card_raises(deck):
    session = ReviewSession("user-1", deck, today=TODAY)
    session.rate(4, NOW)
    session.rate(1, NOW)
    assert session.is_complete
    assert session.current_card() is None
    with pytest.raises(SessionCompleteError):
        session.rate(3, NOW)


def test_invalid_rating_does_not_advance(deck):
    session = ReviewSession("user-1", deck, today=TODAY)
    with pytest.raises(InvalidQualityError):
        session.rate(5, NOW)
    assert session.current_idx == 0
    assert session.answers == []


def test_end_session_summary(deck):
    session = ReviewSession("user-1", deck, today=TODAY)
    session.rate(4, NOW)
    session.rate(1, NOW)
    summary = session.end_session()
    assert summary["user_id"] == "user-1"
    assert summary["cards_reviewed"] == 2
    assert summary["cards_remaining"] == 0
    assert summary["lapses"] == 1
    assert summary["recall_rate_percent"] == 50
    assert summary["quality_breakdown"] == {"Again": 1, "Hard": 0, "Good": 0, "Easy": 1}


def test_empty_deck_session():
    session = ReviewSession(None, [], today=TODAY)
    assert session.is_complete
    assert session.progress_percent() == 0
    summary = session.end_session()
    assert summary["cards_reviewed"] == 0
    assert summary["recall_rate_percent"] == 0
    assert summary["user_id"] is None


def test_fallback_when_nothing_due():
    cards = [ReviewableCard(id=str(i), next_review_at=date(2024, 3, 1)) for i in range(12)]
    session = ReviewSession("user-1", cards, today=TODAY)
    assert len(session.queue) == 10


def test_deck_stats(deck):
    reviewed = ReviewableCard(id="4", last_reviewed_at=datetime(2024, 1, 16, 7, 45), next_review_at=date(2024, 1, 17))
    stats = deck_stats(deck + [reviewed], TODAY)
    assert stats == {"total": 4, "due": 2, "reviewed_today": 1, "success_rate_percent": 50}


def test_cards_without_ids_are_all_recorded():
    cards = [
        ReviewableCard.new(today=TODAY, front="Ohm's law", back="V = IR"),
        ReviewableCard.new(today=TODAY, front="Avogadro's number", back="6.022e23"),
    ]
    session = ReviewSession("user-1", cards, today=TODAY)
    session.rate(3, NOW)
    session.rate(1, NOW)
    assert [c.front for c in session.reviewed] == ["Ohm's law", "Avogadro's number"]
    assert [c.repetitions for c in session.reviewed] == [1, 0]


def test_end_session_is_computed_once(deck):
    session = ReviewSession("user-1", deck, today=TODAY)
    session.rate(4, NOW)
    first = session.end_session()
    ended_at = session.ended_at
    assert session.end_session() is first
    assert session.ended_at == ended_at
    assert first["ended_at"] == ended_at.isoformat()


def test_deck_stats_accepts_mapping(deck):
    stats = deck_stats({c.id: c for c in deck}, TODAY)
    assert stats["total"] == 3
    assert stats["due"] == 2


@pytest.mark.parametrize("repetitions, rate", [
    ([], 0),
    ([0, 0, 0], 0),
    ([1, 0, 0], 33),
    ([2, 5, 0], 67),
    ([1, 1], 100),
])
def test_deck_stats_success_rate(repetitions, rate):
    cards = [ReviewableCard(id=str(i), repetitions=r, next_review_at=TODAY) for i, r in enumerate(repetitions)]
    assert deck_stats(cards, TODAY)["success_rate_percent"] == rate
