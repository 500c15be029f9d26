"""Revision schedule view: split cards into overdue / due today / upcoming by their next review date."""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from src.scheduler import ReviewableCard, iter_cards, parse_date


@dataclass
class RevisionBuckets:
    overdue: List[ReviewableCard] = field(default_factory=list)
    due_today: List[ReviewableCard] = field(default_factory=list)
    upcoming: List[ReviewableCard] = field(default_factory=list)

    def counts(self) -> dict:
        return {"overdue": len(self.overdue), "due_today": len(self.due_today), "upcoming": len(self.upcoming)}


def bucket_by_due_date(cards, today: Optional[date] = None) -> RevisionBuckets:
    """
    Bucket cards by next_review_at relative to today (time of day ignored).

    Upcoming cards are sorted soonest first; the other buckets keep input order.
    Cards with no next_review_at count as due today.
    """
    today = today or date.today()
    buckets = RevisionBuckets()
    for card in iter_cards(cards):
        due = parse_date(card.next_review_at) or today
        if due < today:
            buckets.overdue.append(card)
        elif due == today:
            buckets.due_today.append(card)
        else:
            buckets.upcoming.append(card)
    buckets.upcoming.sort(key=lambda c: parse_date(c.next_review_at))
    return buckets


def format_relative_due(due, today: Optional[date] = None) -> str:
    """Human label for a due date: Today, Tomorrow, Yesterday, In N days, N days ago."""
    today = today or date.today()
    diff = ((parse_date(due) or today) - today).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if diff > 0:
        return f"In {diff} days"
    return f"{abs(diff)} days ago"
