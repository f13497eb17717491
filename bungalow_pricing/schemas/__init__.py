"""Schema exports."""

from bungalow_pricing.schemas.pricing import (
    AvailabilityRead,
    ExtraSelectionPayload,
    QuoteLineRead,
    QuoteRead,
    QuoteRequestPayload,
)

__all__ = [
    "AvailabilityRead",
    "ExtraSelectionPayload",
    "QuoteLineRead",
    "QuoteRead",
    "QuoteRequestPayload",
]
