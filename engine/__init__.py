"""Engine package for the card catalog backing investigator access checks."""

__all__ = [
    "catalog",
    "db",
    "logging",
]
