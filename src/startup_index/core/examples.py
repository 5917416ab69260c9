"""Preset example startups and the default factor set.

Global examples carry the reference score shown on their example cards.
Indian examples are scored with the engine when listed.
"""

from __future__ import annotations

from typing import Optional

from .errors import ExampleNotFoundError
from .models import ExampleRegion, Factor, FactorSet, StartupCategory, StartupExample

DEFAULT_FACTORS = FactorSet.defaults()


def _example(
    name: str,
    values: list[float],
    category: StartupCategory,
    region: ExampleRegion,
    description: str,
    reference_score: Optional[float] = None,
) -> StartupExample:
    """Build an example from twelve values in canonical factor order."""
    if len(values) != len(Factor):
        raise ValueError(f"{name}: expected {len(Factor)} factor values, got {len(values)}")
    factors = FactorSet.from_mapping(dict(zip((f.value for f in Factor), values)))
    return StartupExample(
        name=name,
        description=description,
        category=category,
        region=region,
        factors=factors,
        reference_score=reference_score,
    )


_U, _M, _F = StartupCategory.UNICORN, StartupCategory.MEDIUM, StartupCategory.FAILED
_GLOBAL, _INDIAN = ExampleRegion.GLOBAL, ExampleRegion.INDIAN

GLOBAL_EXAMPLES: list[StartupExample] = [
    _example("Stripe", [0.8, 0.6, 0.8, 0.8, 0.4, 0.3, 0.9, 0.8, 0.4, 0.9, 0.9, 0.9], _U, _GLOBAL,
             "Online payment processing for internet businesses.", reference_score=0.86),
    _example("Airbnb", [0.8, 0.6, 0.6, 0.8, 0.4, 0.4, 0.9, 0.8, 0.6, 0.7, 0.8, 0.8], _U, _GLOBAL,
             "Marketplace for short-term accommodations.", reference_score=0.78),
    _example("Basecamp", [0.6, 0.7, 0.7, 0.6, 0.3, 0.3, 0.8, 0.7, 0.5, 0.8, 0.7, 0.8], _M, _GLOBAL,
             "Project management and team communication software.", reference_score=0.77),
    _example("Theranos", [0.8, 0.8, 0.1, 0.8, 0.9, 0.9, 0.4, 0.6, 0.6, 0.3, 0.5, 0.1], _F, _GLOBAL,
             "Blood testing company with fraudulent technology claims.", reference_score=0.45),
]

INDIAN_EXAMPLES: list[StartupExample] = [
    _example("Flipkart", [0.9, 0.7, 0.8, 0.7, 0.6, 0.5, 0.8, 0.8, 0.6, 0.7, 0.8, 0.7], _U, _INDIAN,
             "India's largest e-commerce marketplace with a valuation over $37B, acquired by Walmart."),
    _example("Zomato", [0.9, 0.7, 0.8, 0.7, 0.6, 0.6, 0.9, 0.8, 0.7, 0.7, 0.9, 0.8], _U, _INDIAN,
             "Food delivery platform that transformed restaurant discovery and delivery in India."),
    _example("Paytm", [0.9, 0.6, 0.7, 0.7, 0.7, 0.6, 0.8, 0.8, 0.8, 0.6, 0.8, 0.7], _U, _INDIAN,
             "Digital payments and financial services company that revolutionized mobile payments in India."),
    _example("Ola", [0.9, 0.6, 0.7, 0.6, 0.6, 0.7, 0.8, 0.7, 0.8, 0.6, 0.8, 0.7], _U, _INDIAN,
             "Ride-hailing platform competing with global players like Uber in the Indian market."),
    _example("Swiggy", [0.9, 0.7, 0.8, 0.7, 0.6, 0.6, 0.9, 0.8, 0.7, 0.7, 0.9, 0.8], _U, _INDIAN,
             "Food delivery service that scaled rapidly across Indian cities with innovative logistics."),
    _example("BYJU'S", [0.9, 0.6, 0.7, 0.7, 0.7, 0.6, 0.8, 0.8, 0.8, 0.6, 0.8, 0.7], _U, _INDIAN,
             "EdTech giant that became India's most valuable startup with its digital learning platform."),
    _example("Razorpay", [0.8, 0.7, 0.8, 0.8, 0.5, 0.5, 0.9, 0.8, 0.6, 0.8, 0.9, 0.8], _U, _INDIAN,
             "Payment gateway solution that simplified online payments for Indian businesses."),
    _example("Dunzo", [0.8, 0.6, 0.7, 0.6, 0.6, 0.6, 0.8, 0.7, 0.7, 0.7, 0.8, 0.7], _M, _INDIAN,
             "Hyperlocal delivery service that delivers everything from groceries to forgotten keys."),
    _example("Meesho", [0.8, 0.7, 0.8, 0.7, 0.6, 0.5, 0.8, 0.8, 0.7, 0.7, 0.8, 0.7], _M, _INDIAN,
             "Social commerce platform enabling small businesses and individuals to start online stores."),
    _example("CRED", [0.8, 0.6, 0.7, 0.7, 0.6, 0.5, 0.8, 0.8, 0.6, 0.7, 0.8, 0.7], _M, _INDIAN,
             "Credit card bill payment platform that rewards users for paying bills on time."),
    _example("Nykaa", [0.8, 0.7, 0.8, 0.7, 0.6, 0.5, 0.8, 0.8, 0.7, 0.7, 0.8, 0.7], _M, _INDIAN,
             "Beauty and personal care e-commerce platform that went public with a successful IPO."),
    _example("Udaan", [0.8, 0.7, 0.7, 0.7, 0.6, 0.5, 0.8, 0.8, 0.7, 0.7, 0.8, 0.7], _M, _INDIAN,
             "B2B e-commerce platform connecting small retailers with manufacturers and wholesalers."),
    _example("PharmEasy", [0.8, 0.6, 0.7, 0.7, 0.6, 0.6, 0.8, 0.7, 0.7, 0.7, 0.8, 0.7], _M, _INDIAN,
             "Online pharmacy and healthcare platform delivering medicines across India."),
    _example("Dazo", [0.6, 0.4, 0.3, 0.4, 0.5, 0.7, 0.6, 0.5, 0.6, 0.5, 0.6, 0.4], _F, _INDIAN,
             "Food delivery startup that shut down within a year due to operational challenges."),
    _example("PepperTap", [0.7, 0.5, 0.4, 0.5, 0.5, 0.7, 0.6, 0.6, 0.6, 0.5, 0.7, 0.5], _F, _INDIAN,
             "Grocery delivery service that closed after failing to secure funding and manage logistics."),
    _example("Stayzilla", [0.7, 0.5, 0.4, 0.5, 0.5, 0.7, 0.6, 0.6, 0.6, 0.5, 0.7, 0.5], _F, _INDIAN,
             "Hotel aggregator startup that suspended operations due to market challenges."),
    _example("Yumist", [0.6, 0.4, 0.3, 0.4, 0.5, 0.7, 0.6, 0.5, 0.6, 0.5, 0.6, 0.4], _F, _INDIAN,
             "Food tech startup that offered home-style meals but shut down due to high costs."),
    _example("Koinex", [0.7, 0.5, 0.4, 0.5, 0.5, 0.7, 0.6, 0.6, 0.6, 0.5, 0.7, 0.5], _F, _INDIAN,
             "Cryptocurrency exchange that closed after regulatory challenges in India."),
    _example("TinyOwl", [0.6, 0.4, 0.3, 0.4, 0.5, 0.7, 0.6, 0.5, 0.6, 0.5, 0.6, 0.4], _F, _INDIAN,
             "Food ordering app that collapsed despite significant funding due to aggressive expansion."),
]

ALL_EXAMPLES: list[StartupExample] = GLOBAL_EXAMPLES + INDIAN_EXAMPLES


def list_examples(
    region: Optional[ExampleRegion] = None,
    category: Optional[StartupCategory] = None,
) -> list[StartupExample]:
    """Examples filtered by region and/or category, in library order."""
    region = ExampleRegion(region) if region else None
    category = StartupCategory(category) if category else None
    return [
        e for e in ALL_EXAMPLES
        if (region is None or e.region == region) and (category is None or e.category == category)
    ]


def get_example(name: str) -> StartupExample:
    """Look up an example by name (case-insensitive)."""
    key = name.strip().lower()
    for example in ALL_EXAMPLES:
        if example.name.lower() == key:
            return example
    raise ExampleNotFoundError(f"No example startup named {name!r}")
