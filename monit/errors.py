"""Exception hierarchy for monit."""

from __future__ import annotations


class MonitError(Exception):
    """Base class for all monit errors."""


class ConfigResolutionError(MonitError):
    """A required setting is missing or invalid in both explicit config and environment."""


class SerializationError(MonitError):
    """A report could not be encoded as JSON."""


class DeliveryError(MonitError):
    """A report could not be delivered to the sink."""
