"""Ingest .jsonl flashcards into a study plan: normalize subject/difficulty, bulk INSERT into flashcards."""
import json
import argparse
import logging
from datetime import date
from pathlib import Path

from db import get_store_uncached
from engine import DIFFICULTIES, INITIAL_EASE_FACTOR

logger = logging.getLogger(__name__)

# JEE subjects; anything else keeps its own (stripped) name
SUBJECT_ALIASES = {
    "physics": "Physics",
    "phy": "Physics",
    "chemistry": "Chemistry",
    "chem": "Chemistry",
    "mathematics": "Mathematics",
    "maths": "Mathematics",
    "math": "Mathematics",
}


def normalize_subject(subject: str) -> str:
    s = (subject or "").strip()
    return SUBJECT_ALIASES.get(s.lower(), s)


def parse_line(line: str, user_id: str, study_plan_id: str, today: date | None = None) -> dict | None:
    """Parse one JSONL line into a flashcards row. Returns None if invalid/skip."""
    line = line.strip()
    if not line:
        return None
    try:
        raw = json.loads(line)
    except json.JSONDecodeError:
        return None
    if not isinstance(raw, dict):
        return None
    front = (raw.get("front") or "").strip()
    back = (raw.get("back") or "").strip()
    if not front or not back:
        return None
    difficulty = (raw.get("difficulty") or "medium").strip().lower()
    if difficulty not in DIFFICULTIES:
        difficulty = "medium"
    today = today or date.today()
    return {
        "user_id": user_id,
        "study_plan_id": study_plan_id,
        "front": front,
        "back": back,
        "subject": normalize_subject(raw.get("subject")),
        "topic": (raw.get("topic") or "").strip(),
        "difficulty": difficulty,
        "last_reviewed_at": None,
        "next_review_at": today.isoformat(),
        "repetitions": 0,
        "ease_factor": INITIAL_EASE_FACTOR,
        "interval": 0,
    }


def load_and_transform(path: Path, user_id: str, study_plan_id: str) -> tuple[list[dict], int]:
    """Read JSONL and return (flashcard rows, skipped line count). Blank lines are not counted."""
    rows = []
    skipped = 0
    today = date.today()
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            row = parse_line(line, user_id, study_plan_id, today)
            if row:
                rows.append(row)
            else:
                skipped += 1
    return rows, skipped


def positive_int(value: str) -> int:
    """argparse type for --chunk-size."""
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {n}")
    return n


def run_import(jsonl_path: Path, user_id: str, study_plan_id: str, chunk_size: int = 200, dry_run: bool = False) -> int:
    if not jsonl_path.exists():
        raise FileNotFoundError(f"JSONL not found: {jsonl_path}")
    rows, skipped = load_and_transform(jsonl_path, user_id, study_plan_id)
    if skipped:
        logger.warning("Skipped %d malformed line(s) in %s", skipped, jsonl_path)
    if dry_run:
        print(f"Dry run: would insert {len(rows)} flashcards from {jsonl_path}")
        if rows:
            print("Sample row:", rows[0])
        return len(rows)
    store = get_store_uncached()
    inserted = store.create_flashcards_bulk(rows, chunk_size=chunk_size)
    print(f"Inserted {inserted} flashcards from {jsonl_path}")
    return inserted


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    parser = argparse.ArgumentParser(description="Import flashcards JSONL into a Supabase study plan.")
    parser.add_argument("jsonl", help="Path to .jsonl with front/back/subject/topic/difficulty per line")
    parser.add_argument("--user-id", required=True, help="Owner of the cards")
    parser.add_argument("--study-plan-id", required=True, help="Study plan the cards belong to")
    parser.add_argument("--chunk-size", type=positive_int, default=200, help="Insert chunk size (default 200)")
    parser.add_argument("--dry-run", action="store_true", help="Parse only, do not insert")
    args = parser.parse_args()
    run_import(Path(args.jsonl), args.user_id, args.study_plan_id, chunk_size=args.chunk_size, dry_run=args.dry_run)
