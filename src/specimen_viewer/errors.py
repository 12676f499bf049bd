"""Exceptions raised by the orchestration layer.

The core engine never raises on missing or malformed data; these cover
the remote repository and identifiers supplied by callers.
"""


class DataverseRequestError(RuntimeError):
    """The remote repository could not be reached or returned bad data."""


class DatasetNotFoundError(LookupError):
    """No dataset exists under the requested persistent identifier."""


class ModelNotFoundError(LookupError):
    """The requested model key is not part of the dataset."""
