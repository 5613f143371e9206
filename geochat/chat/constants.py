"""
Chat constants and enums.

This module contains the constants, enums, and fixed user-facing strings used
across the chat package.
"""

from enum import Enum


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    MODEL = "model"


class ChatPhase(str, Enum):
    """Coarse coordinator state, derived from the chat state fields."""

    IDLE = "idle"
    READY = "ready"
    PENDING = "pending"
    ERROR = "error"


class GroundingKind(str, Enum):
    """Provenance of a grounding chunk."""

    WEB = "web"
    MAPS = "maps"


WELCOME_MESSAGE_ID = "init"
WELCOME_MESSAGE_TEXT = (
    "Location acquired! I am GeoChat AI. Ask me about places, restaurants, "
    "or points of interest around you."
)

LOCATION_DENIED_ERROR = (
    "Location access is required to use this app. Please enable it in your "
    "browser settings. Error: {reason}"
)
LOCATION_UNSUPPORTED_ERROR = "Geolocation is not supported by this browser."
LOCATION_REQUIRED_ERROR = "Cannot send message without your location."
UNEXPECTED_ERROR = "An unexpected error occurred."

# Line prefixes that open a bullet list item
BULLET_MARKERS = ("* ", "- ")
