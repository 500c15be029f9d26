"""Pure study logic constants: spaced-repetition tuning, review queue, Pomodoro lengths. No UI."""
# Ease update: EF' = max(EF_FLOOR, EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)))
# Quality: 1 Again, 2 Hard, 3 Good, 4 Easy; q >= 3 counts as a successful recall

MIN_QUALITY = 1
MAX_QUALITY = 4
PASSING_QUALITY = 3
QUALITY_LABELS = {1: "Again", 2: "Hard", 3: "Good", 4: "Easy"}

INITIAL_EASE_FACTOR = 2.5
EASE_FACTOR_FLOOR = 1.3
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1

REVIEW_FALLBACK_SIZE = 10

STUDY_SECONDS = 25 * 60
SHORT_BREAK_SECONDS = 5 * 60
LONG_BREAK_SECONDS = 15 * 60
POMODOROS_PER_LONG_BREAK = 4

DIFFICULTIES = ("easy", "medium", "hard")
