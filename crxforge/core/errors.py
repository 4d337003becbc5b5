"""Error taxonomy for the publish pipeline.

Errors raised inside a single component's pipeline terminate that pipeline
only; the orchestrator records them on the component's ``PublishResult``
and carries on with the remaining components.
"""

from __future__ import annotations


class CrxForgeError(RuntimeError):
    """Base class for all crxforge errors."""


class ConfigurationError(CrxForgeError):
    """A required input is missing (packer binary, signing key, bucket).

    Raised before any network or storage side effect takes place.
    """


class TransientNetworkError(CrxForgeError):
    """A network fetch kept failing after the bounded retry loop."""


class NotFoundError(CrxForgeError):
    """An expected object or record does not exist.

    Benign in the tagging and previous-window download paths.
    """


class DiffError(CrxForgeError):
    """The external binary-diff tool failed for one source artifact."""


class CrxFormatError(CrxForgeError):
    """A file is not a readable CRX package."""


class VersionError(CrxForgeError, ValueError):
    """A version string cannot be parsed or decremented."""


class PartialBatchFailure(CrxForgeError):
    """Some members of a batch failed while the others succeeded.

    Parameters
    ----------
    message:
        Human readable summary.
    failures:
        Mapping of batch member (file name or key) to its error text.
    """

    def __init__(self, message: str, failures: dict[str, str]) -> None:
        super().__init__(message)
        self.failures = dict(failures)


class PersistenceInconsistency(CrxForgeError):
    """Storage was updated but the ledger write failed.

    Not recovered automatically; ``crxforge reconcile`` reports the drift.
    """

    def __init__(self, message: str, storage_key: str) -> None:
        super().__init__(message)
        self.storage_key = storage_key
