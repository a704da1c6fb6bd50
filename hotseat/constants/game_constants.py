"""Game-related constants shared across the core and server layers."""

QUESTIONS_PER_SET: int = 20
ANSWER_OPTIONS: tuple[str, ...] = ("A", "B", "C", "D")

DEFAULT_PRIZE_STRUCTURE: tuple[int, ...] = (
    500, 1000, 1500, 2000, 2500,
    3000, 3500, 4000, 4500, 5000,
    5500, 6000, 6500, 7000, 7500,
    8000, 8500, 9000, 9500, 10000,
)
MILESTONE_QUESTIONS: tuple[int, ...] = (5, 10, 15, 20)

FIFTY_FIFTY_REMOVE_COUNT: int = 2
PHONE_A_FRIEND_DURATION_SECONDS: int = 3 * 60
PHONE_TIMER_TICK_SECONDS: float = 1.0

MIN_TEAMS: int = 1
MAX_TEAMS: int = 10

CURRENCY_SYMBOL: str = "Rs."
