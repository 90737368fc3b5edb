"""
Exceptions raised by the Reflector contract client.
Every network-side failure carries enough context (status, hash, raw XDR) to be
diagnosed offline without re-running the flow.
"""
from typing import Any


class ReflectorClientError(Exception):
    """Base class for all client errors."""


class ConfigurationError(ReflectorClientError, ValueError):
    """Missing or invalid options / network configuration. Never retried."""


class RpcRequestError(ReflectorClientError):
    """Every configured RPC endpoint failed for a single request."""

    def __init__(self, errors: list[tuple[str, BaseException]]):
        self.errors = errors
        urls = ", ".join(url for url, _ in errors) or "<none>"
        super().__init__(f"Failed to make request. Tried: {urls}")


class SimulationError(ReflectorClientError):
    """The contract rejected the call during simulation, or the simulation response was malformed."""

    def __init__(self, error: Any):
        self.error = error
        super().__init__(str(error))


class UnsupportedOperationError(ReflectorClientError):
    """The selected contract version does not expose this method."""


class CodecError(ReflectorClientError, ValueError):
    """A value could not be encoded to or decoded from the contract value format."""


class TransactionSubmitError(ReflectorClientError):
    """The initial send did not report PENDING."""

    def __init__(self, status: str, tx_hash: str | None, error_result_xdr: str | None = None):
        self.status = status
        self.hash = tx_hash
        self.error_result_xdr = error_result_xdr
        super().__init__(f"Transaction submit failed: {status}")


class TransactionFailedError(ReflectorClientError):
    """The network reported FAILED for a submitted transaction."""

    def __init__(
        self,
        status: str,
        tx_hash: str,
        envelope_xdr: str | None = None,
        result_xdr: str | None = None,
        result_meta_xdr: str | None = None,
    ):
        self.status = status
        self.hash = tx_hash
        self.envelope_xdr = envelope_xdr
        self.result_xdr = result_xdr
        self.result_meta_xdr = result_meta_xdr
        super().__init__(f"Transaction submit failed, result: {status}")


class TransactionTimeoutError(ReflectorClientError):
    """Polling gave up while the transaction was still PENDING / NOT_FOUND. Outcome unknown."""

    def __init__(self, tx_hash: str, status: str, tries: int):
        self.hash = tx_hash
        self.status = status
        self.tries = tries
        super().__init__(f"Transaction {tx_hash} still {status} after {tries} tries")


class TransactionCancelledError(ReflectorClientError):
    """The caller cancelled polling before the transaction reached a terminal state."""

    def __init__(self, tx_hash: str):
        self.hash = tx_hash
        super().__init__(f"Polling for transaction {tx_hash} was cancelled")
