"""Exception hierarchy for the scan lifecycle and its collaborators.

The classification path (hash lookup, file-type and content heuristics,
verdict fusion) never raises for ordinary input; only the lifecycle and
the payment / feed collaborators signal failures through these types.
"""


class TrojanTrapError(Exception):
    """Base exception for all TrojanTrap errors."""


class NotFoundError(TrojanTrapError):
    """Raised when an opaque scan or report identifier is unknown."""

    def __init__(self, identifier: str) -> None:
        super().__init__(identifier)
        self.identifier = identifier


class ScanNotFoundError(NotFoundError):
    """No pending scan exists for the id (never created or already consumed)."""

    def __str__(self) -> str:
        return f"Scan not found: {self.identifier}"


class ReportNotFoundError(NotFoundError):
    """No completed report exists for the id (never created or expired)."""

    def __str__(self) -> str:
        return f"Report not found: {self.identifier}"


class PaymentIncompleteError(TrojanTrapError):
    """Raised when the payment gate did not report a successful payment.

    Attributes:
        status: The gate status (``"failed"``, ``"pending"``, ``"timeout"``
            or ``"unreachable"``).
        retryable: ``True`` when the same scan id may be confirmed again.
    """

    def __init__(self, message: str, status: str = "pending", retryable: bool = True) -> None:
        super().__init__(message)
        self.status = status
        self.retryable = retryable


class PaymentGateError(TrojanTrapError):
    """Raised by a payment gate when the provider cannot be reached or rejects a call."""


class FeedDownloadError(TrojanTrapError):
    """Raised when the malware hash feed cannot be fetched or unpacked."""


class UploadTooLargeError(TrojanTrapError):
    """Raised when an upload exceeds the hard size ceiling."""

    def __init__(self, limit_bytes: int) -> None:
        super().__init__(f"File exceeds the {limit_bytes // (1024 * 1024)}MB upload limit")
        self.limit_bytes = limit_bytes
