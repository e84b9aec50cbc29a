"""
Generate short "why this place" explanations.

Uses Gemini to produce one or two sentences tying a place's attributes
(distance, rating, cuisine, price) to the user's current mood.
"""

import logging
from typing import Optional

from moodplaces.schemas.explanations import ExplanationRequest
from moodplaces.services.gemini_client import complete

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a friendly, concise place recommendation assistant for a dining/cafe discovery app.
Given a place's details and the user's current mood, generate a short, compelling "Why this place?" explanation.

Rules:
- Keep it to 1-2 sentences max (under 40 words)
- Be specific about what makes this place great for the user's mood
- Use a warm, conversational tone
- Mention specific attributes like distance, rating, cuisine, price if relevant
- Don't use generic phrases like "great choice" - be specific
- If mood is provided, tailor the explanation to that mood"""

MAX_OUTPUT_TOKENS = 100
TEMPERATURE = 0.7


def build_place_prompt(request: ExplanationRequest) -> str:
    place = request.place
    lines = [
        f"Place: {place.name}",
        f"Category: {place.category or 'Place'}",
    ]
    if place.distance is not None:
        lines.append(f"Distance: {round(place.distance)}m")
    if place.rating:
        lines.append(f"Rating: {place.rating:.1f}/5")
    if place.price_level:
        lines.append(f"Price: {'₹' * place.price_level}")
    if place.cuisine_type:
        lines.append(f"Cuisine: {place.cuisine_type}")
    if place.is_open is not None:
        lines.append(f"Status: {'Open now' if place.is_open else 'Closed'}")
    if place.address:
        lines.append(f"Address: {place.address}")

    if request.mood:
        lines.append(f"\nUser's mood: {request.mood}")
    if request.user_context:
        lines.append(f"\nAdditional context: {request.user_context}")

    lines.append('\nGenerate a "Why this place?" explanation.')
    return "\n".join(lines)


def generate_explanation(request: ExplanationRequest) -> Optional[str]:
    """
    Returns:
        The stripped explanation, or None on quota/cooldown or an empty model response.

    Raises:
        ValueError: If the Gemini API key is not configured.
    """
    result = complete(
        build_place_prompt(request),
        SYSTEM_PROMPT,
        max_output_tokens=MAX_OUTPUT_TOKENS,
        temperature=TEMPERATURE,
    )
    if not result or not result.strip():
        return None
    return result.strip()
