"""
Errors raised by the data providers.

Cache and storage trouble never shows up here: those faults are recovered
inside the cache layer. Everything below reaches the HTTP layer, which maps
it to a client-visible status.
"""


class DataProviderError(Exception):
    """Base class for failures while producing a dataset."""

    status = 500


class ConfigurationMissing(DataProviderError):
    """A path or root the provider needs is not configured."""

    status = 400


class DataNotFound(DataProviderError):
    """The requested file, zone or column does not exist."""

    status = 404
