from datetime import date

import pytest

from src.revision import bucket_by_due_date, format_relative_due
from src.scheduler import ReviewableCard

TODAY = date(2024, 1, 16)


def test_bucket_by_due_date():
    cards = [
        ReviewableCard(id="kinematics", next_review_at=date(2024, 1, 16)),
        ReviewableCard(id="organic", next_review_at=date(2024, 1, 20)),
        ReviewableCard(id="integration", next_review_at=date(2024, 1, 15)),
        ReviewableCard(id="thermo", next_review_at=date(2024, 1, 18)),
    ]
    buckets = bucket_by_due_date(cards, TODAY)
    assert [c.id for c in buckets.overdue] == ["integration"]
    assert [c.id for c in buckets.due_today] == ["kinematics"]
    assert [c.id for c in buckets.upcoming] == ["thermo", "organic"]
    assert buckets.counts() == {"overdue": 1, "due_today": 1, "upcoming": 2}


def test_unscheduled_card_is_due_today():
    buckets = bucket_by_due_date([ReviewableCard(id="new")], TODAY)
    assert [c.id for c in buckets.due_today] == ["new"]


@pytest.mark.parametrize("due, label", [
    (date(2024, 1, 16), "Today"),
    (date(2024, 1, 17), "Tomorrow"),
    (date(2024, 1, 15), "Yesterday"),
    (date(2024, 1, 21), "In 5 days"),
    (date(2024, 1, 13), "3 days ago"),
    ("2024-01-18T22:00:00", "In 2 days"),
])
def test_format_relative_due(due, label):
    assert format_relative_due(due, TODAY) == label


def test_bucket_by_due_date_accepts_mapping():
    cards = {
        "vectors": ReviewableCard(id="vectors", next_review_at=date(2024, 1, 14)),
        "optics": ReviewableCard(id="optics", next_review_at=date(2024, 1, 19)),
    }
    buckets = bucket_by_due_date(cards, TODAY)
    assert [c.id for c in buckets.overdue] == ["vectors"]
    assert [c.id for c in buckets.upcoming] == ["optics"]
