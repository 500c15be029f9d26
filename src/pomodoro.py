"""
Pomodoro study timer.
State machine only; the caller feeds elapsed seconds via tick() (Streamlit reruns, tests).
"""
import logging

from engine import LONG_BREAK_SECONDS, POMODOROS_PER_LONG_BREAK, SHORT_BREAK_SECONDS, STUDY_SECONDS

logger = logging.getLogger(__name__)

STUDY = "study"
BREAK = "break"
LONG_BREAK = "long-break"

SESSION_SECONDS = {
    STUDY: STUDY_SECONDS,
    BREAK: SHORT_BREAK_SECONDS,
    LONG_BREAK: LONG_BREAK_SECONDS,
}

SESSION_LABELS = {STUDY: "Study Session", BREAK: "Short Break", LONG_BREAK: "Long Break"}

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
COMPLETED = "completed"


def format_clock(seconds: int) -> str:
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"


class PomodoroTimer:
    """25/5 study-break cycle with a 15 minute break after every 4th pomodoro."""

    def __init__(self):
        self.session_type = STUDY
        self.state = IDLE
        self.time_remaining = SESSION_SECONDS[STUDY]
        self.completed_pomodoros = 0
        self.total_study_seconds = 0
        self.current_streak = 0
        self.next_session = None

    def start(self, session_type: str | None = None):
        session_type = session_type or self.session_type
        if session_type not in SESSION_SECONDS:
            raise ValueError(f"Unknown session type: {session_type}")
        self.session_type = session_type
        self.time_remaining = SESSION_SECONDS[session_type]
        self.state = RUNNING
        self.next_session = None

    def pause(self):
        if self.state == RUNNING:
            self.state = PAUSED

    def resume(self):
        if self.state == PAUSED:
            self.state = RUNNING

    def reset(self):
        self.state = IDLE
        self.time_remaining = SESSION_SECONDS[self.session_type]
        self.next_session = None

    def tick(self, seconds: int = 1) -> bool:
        """
        Advance a running timer.

        Returns:
            True if this tick completed the current session
        """
        if self.state != RUNNING or seconds <= 0:
            return False
        self.time_remaining = max(0, self.time_remaining - int(seconds))
        if self.time_remaining > 0:
            return False
        self._complete()
        return True

    def _complete(self):
        self.state = COMPLETED
        if self.session_type == STUDY:
            self.completed_pomodoros += 1
            self.total_study_seconds += SESSION_SECONDS[STUDY]
            self.current_streak += 1
            if self.completed_pomodoros % POMODOROS_PER_LONG_BREAK == 0:
                self.next_session = LONG_BREAK
            else:
                self.next_session = BREAK
            logger.info(f"Pomodoro {self.completed_pomodoros} complete, next: {self.next_session}")
        else:
            self.next_session = STUDY

    def progress_percent(self) -> float:
        total = SESSION_SECONDS[self.session_type]
        return (total - self.time_remaining) / total * 100
