"""Service layer exports."""
from bungalow_pricing.services import (
    availability_service,
    rate_calculator,
    rule_selector,
)
from bungalow_pricing.services.pricing_engine import PricingEngine
from bungalow_pricing.services.quote_cache import QuoteCache

__all__ = [
    "PricingEngine",
    "QuoteCache",
    "availability_service",
    "rate_calculator",
    "rule_selector",
]
