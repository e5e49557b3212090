"""
Exceptions raised by the layout engine.

Only configuration problems propagate to callers. The others are raised and
handled inside the engine: layout quality issues are reported as data by the
validator, never raised.
"""


class ResumePagesError(Exception):
    """Base class for layout engine errors."""


class ConfigurationError(ResumePagesError, ValueError):
    """A template is missing required fields or has unusable values."""

    def __init__(self, problems: list[str] | str) -> None:
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class MeasurementUnavailable(ResumePagesError):
    """No live layout context is available; estimated heights must be used."""


class StaleSnapshot(ResumePagesError):
    """A layout pass finished after a newer snapshot superseded it."""

    def __init__(self, version: int, current: int) -> None:
        self.version = version
        self.current = current
        super().__init__(f"snapshot {version} superseded by {current}")
