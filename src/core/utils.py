"""Shared utility functions for Rant to Reflection."""

import random
from datetime import datetime

_USERNAME_PREFIXES = (
    "Unfair",
    "Ok",
    "Traditional",
    "Exciting",
    "Several",
    "No",
    "Maximum",
    "Different",
)

_USERNAME_NOUNS = (
    "Apartment",
    "Carpet",
    "Outcome",
    "Pineapple",
    "Finance",
    "Bat",
    "Dragon",
    "Wizard",
)


def generate_username(rng: random.Random | None = None) -> str:
    """Return a random display name like ``ExcitingWizard48213``."""
    rng = rng or random.Random()
    prefix = rng.choice(_USERNAME_PREFIXES)
    noun = rng.choice(_USERNAME_NOUNS)
    number = rng.randrange(1000, 999999)
    return f"{prefix}{noun}{number}"


def format_countdown(seconds: int) -> str:
    """Render a recorder countdown as ``MM:SS``."""
    seconds = max(int(seconds), 0)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def format_duration(seconds: float) -> str:
    """Render a playback position / duration as ``m:ss``."""
    seconds = max(seconds, 0.0)
    return f"{int(seconds // 60)}:{int(seconds % 60):02d}"


def greeting_for(now: datetime) -> str:
    """Time-of-day greeting shown on the dashboard."""
    if now.hour < 12:
        return "Good morning"
    if now.hour < 18:
        return "Good afternoon"
    return "Good evening"
