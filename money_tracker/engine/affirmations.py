"""Daily affirmation, picked deterministically from the day key."""

import hashlib

from money_tracker.engine.calendar import DayKey

AFFIRMATIONS: tuple[str, ...] = (
    "I protect my energy and my money respects me.",
    "My boundaries are part of my bag.",
    "I track it, I stack it, I secure it.",
    "I leave early before burnout steals my glow.",
    "I'm in control, my money follows my standards.",
)


def daily_affirmation(day: DayKey) -> str:
    """Same day key, same affirmation. No process-level randomness."""
    digest = hashlib.sha256(day.encode("utf-8")).hexdigest()
    return AFFIRMATIONS[int(digest, 16) % len(AFFIRMATIONS)]
