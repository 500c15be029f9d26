"""
Database operations for JEE Prep flashcards.
Handles Supabase CRUD for flashcards and study plans.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from supabase import Client

from engine import DIFFICULTIES, INITIAL_EASE_FACTOR
from src.scheduler import ReviewableCard, ScheduleUpdate

logger = logging.getLogger(__name__)

FLASHCARDS = "flashcards"
STUDY_PLANS = "study_plans"


class FlashcardStore:
    """Wrapper around Supabase client with flashcard-specific operations."""

    def __init__(self, client: Client):
        self.client = client

    # ============= Study plans =============

    def list_study_plans(self, user_id: UUID | str) -> List[Dict]:
        """Study plans owned by the user ({id, title}), newest first."""
        response = (
            self.client.table(STUDY_PLANS)
            .select("id, title")
            .eq("user_id", str(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    def create_study_plan(self, user_id: UUID | str, title: str) -> Dict:
        """
        Insert a study plan for the user and return the stored row.

        Raises:
            ValueError: title is empty
        """
        if not title or not title.strip():
            raise ValueError("Please enter a title for the study plan")
        row = {"user_id": str(user_id), "title": title.strip()}
        response = self.client.table(STUDY_PLANS).insert(row).execute()
        created = response.data[0] if response.data else row
        logger.info("Created study plan %s for user %s", created.get("id"), user_id)
        return created

    # ============= Flashcards =============

    def list_flashcards(self, user_id: UUID | str, study_plan_id: UUID | str) -> List[ReviewableCard]:
        """All cards for one owner and study plan, newest first."""
        response = (
            self.client.table(FLASHCARDS)
            .select("*")
            .eq("user_id", str(user_id))
            .eq("study_plan_id", str(study_plan_id))
            .order("created_at", desc=True)
            .execute()
        )
        return [ReviewableCard.from_row(row) for row in response.data or []]

    def create_flashcard(
        self,
        user_id: UUID | str,
        study_plan_id: UUID | str,
        front: str,
        back: str,
        subject: str = "",
        topic: str = "",
        difficulty: str = "medium",
        now: Optional[datetime] = None,
    ) -> ReviewableCard:
        """
        Insert a new card with the initial scheduling state (due today, never reviewed).

        Raises:
            ValueError: front or back is empty, or difficulty is unknown
        """
        if not front or not front.strip() or not back or not back.strip():
            raise ValueError("Please fill in both front and back of the card")
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Difficulty must be one of {DIFFICULTIES}, got {difficulty!r}")

        now = now or datetime.now()
        row = {
            "user_id": str(user_id),
            "study_plan_id": str(study_plan_id),
            "front": front.strip(),
            "back": back.strip(),
            "subject": subject,
            "topic": topic,
            "difficulty": difficulty,
            "last_reviewed_at": None,
            "next_review_at": now.date().isoformat(),
            "repetitions": 0,
            "ease_factor": INITIAL_EASE_FACTOR,
            "interval": 0,
        }
        response = self.client.table(FLASHCARDS).insert(row).execute()
        created = response.data[0] if response.data else row
        logger.info("Created flashcard %s in plan %s", created.get("id"), study_plan_id)
        return ReviewableCard.from_row(created)

    def create_flashcards_bulk(self, rows: List[Dict], chunk_size: int = 200) -> int:
        """Insert prepared rows in chunks. Returns number of rows sent."""
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")
        n_chunks = (len(rows) + chunk_size - 1) // chunk_size
        for i in range(0, len(rows), chunk_size):
            chunk = rows[i : i + chunk_size]
            logger.info("Inserting chunk %d/%d (%d rows)", i // chunk_size + 1, n_chunks, len(chunk))
            self.client.table(FLASHCARDS).insert(chunk).execute()
        return len(rows)

    def update_schedule(self, card_id: UUID | str, update: ScheduleUpdate) -> Optional[ReviewableCard]:
        """Persist the scheduling fields from one review. Returns the stored card when echoed back."""
        response = self.client.table(FLASHCARDS).update(update.to_row()).eq("id", str(card_id)).execute()
        logger.info("Updated flashcard %s: interval=%d, due %s", card_id, update.interval, update.next_review_at)
        if response.data:
            return ReviewableCard.from_row(response.data[0])
        return None

    def delete_flashcard(self, card_id: UUID | str):
        self.client.table(FLASHCARDS).delete().eq("id", str(card_id)).execute()
        logger.info("Deleted flashcard %s", card_id)
