"""Mood catalog: maps a user's intent to the venue categories searched for it."""

from enum import Enum

from pydantic import BaseModel


class Mood(str, Enum):
    WORK = "work"
    DATE = "date"
    QUICK_BITE = "quick_bite"
    BUDGET = "budget"
    CHILL = "chill"
    FUN = "fun"


class MoodConfig(BaseModel):
    id: Mood
    label: str
    description: str
    categories: list[str]


MOOD_CONFIGS: list[MoodConfig] = [
    MoodConfig(
        id=Mood.WORK,
        label="Work",
        description="Focus & productivity",
        categories=["cafe", "coffee_shop"],
    ),
    MoodConfig(
        id=Mood.DATE,
        label="Date",
        description="Romantic vibes",
        categories=["restaurant", "cafe", "bar"],
    ),
    MoodConfig(
        id=Mood.QUICK_BITE,
        label="Quick Bite",
        description="Fast & tasty",
        categories=["fast_food", "cafe", "restaurant"],
    ),
    MoodConfig(
        id=Mood.BUDGET,
        label="Budget",
        description="Easy on wallet",
        categories=["fast_food", "cafe", "restaurant"],
    ),
    MoodConfig(
        id=Mood.CHILL,
        label="Chill",
        description="Relax & unwind",
        categories=["cafe", "bar", "restaurant"],
    ),
    MoodConfig(
        id=Mood.FUN,
        label="Fun",
        description="Party time!",
        categories=["bar", "pub", "restaurant"],
    ),
]


def get_mood_config(mood: Mood | str) -> MoodConfig | None:
    for config in MOOD_CONFIGS:
        if config.id == mood:
            return config
    return None


def get_categories_for_mood(mood: Mood | str) -> list[str]:
    """Search categories for a mood; empty for an unknown mood (the search service then uses its defaults)."""
    config = get_mood_config(mood)
    return list(config.categories) if config else []
