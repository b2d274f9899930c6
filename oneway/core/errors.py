"""
Exception types for the OneWay core.

Runtime operations (send, observe, cancel, registry lookups) never raise;
these are only raised for programming errors detected at definition time.
"""


class OneWayError(Exception):
    """Base class for OneWay errors."""
    pass


class FeatureDefinitionError(OneWayError):
    """Raised when a Feature is declared with an invalid id or reducer."""
    pass
