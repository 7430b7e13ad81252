"""Domain models and calculations for the cost-basis engine.

This package holds the in-memory (Pydantic) ledger models, the calculation
strategies and the profile aggregate. They are independent from persistence
models so that business logic and testing can evolve without DB coupling.
"""

__all__ = [
    "calculation",
    "events",
    "fifo",
    "ledger",
    "profile",
    "weighted_average",
]
