"""
errors.py — Fatal input errors raised before any date is scheduled.
"""


class ConfigurationError(ValueError):
    """Roster / quota / tuning combination the engine refuses to run with."""


class InputOrderError(ValueError):
    """Dates were not supplied in non-decreasing chronological order."""

    def __init__(self, index: int, previous, current):
        self.index = index
        self.previous = previous
        self.current = current
        super().__init__(
            f"Dates must be in chronological order: date #{index} ({current}) "
            f"comes before date #{index - 1} ({previous})"
        )
