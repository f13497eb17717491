"""Pricing and availability engine for short-stay bungalow rentals."""

from bungalow_pricing.core.errors import (
    ComputationError,
    ConflictError,
    PricingError,
    ValidationError,
)

__all__ = ["ComputationError", "ConflictError", "PricingError", "ValidationError"]
