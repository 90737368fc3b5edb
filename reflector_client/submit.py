"""
Submit signed transactions and poll them to a terminal state.

Built -> Sent (must be PENDING) -> Polling (NOT_FOUND / PENDING) -> SUCCESS | FAILED | timeout | cancelled
"""
import logging
import threading
import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from stellar_sdk import Keypair, TransactionEnvelope
from stellar_sdk.decorated_signature import DecoratedSignature

from . import rpc
from .config import NetworkConfig
from .errors import (
    TransactionCancelledError,
    TransactionFailedError,
    TransactionSubmitError,
    TransactionTimeoutError,
)
from .signing import sign_transaction

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.5
MAX_POLL_TRIES = 20

_IN_PROGRESS = ("PENDING", "NOT_FOUND")


def status_name(status: Any) -> str:
    """SDK enums and plain strings compare the same way."""
    return status.value if isinstance(status, Enum) else str(status)


@dataclass(frozen=True)
class SubmittedTransaction:
    """Terminal SUCCESS response with the transaction hash attached."""

    hash: str
    status: str
    response: Any

    @property
    def envelope_xdr(self) -> str | None:
        return getattr(self.response, "envelope_xdr", None)

    @property
    def result_xdr(self) -> str | None:
        return getattr(self.response, "result_xdr", None)

    @property
    def result_meta_xdr(self) -> Any:
        return getattr(self.response, "result_meta_xdr", None)


def attach_signatures(
    transaction: TransactionEnvelope,
    signatures: Sequence[DecoratedSignature],
    network_passphrase: str,
) -> TransactionEnvelope:
    """Copy transaction through its XDR and add signatures to the copy only."""
    signed = TransactionEnvelope.from_xdr(transaction.to_xdr(), network_passphrase)
    signed.signatures.extend(signatures)
    return signed


def submit_transaction(
    network: NetworkConfig,
    transaction: TransactionEnvelope,
    signatures: Sequence[DecoratedSignature] = (),
    poll_interval: float = POLL_INTERVAL,
    max_tries: int = MAX_POLL_TRIES,
    cancel_event: threading.Event | None = None,
    deadline: float | None = None,
) -> SubmittedTransaction:
    """
    Send transaction with signatures and wait for the outcome.

    cancel_event, when set by another thread, stops polling with TransactionCancelledError.
    deadline is an absolute time.monotonic() value; passing it stops polling with
    TransactionTimeoutError, as does exceeding max_tries.
    """
    signed = attach_signatures(transaction, signatures, network.network_passphrase)

    submit_result = rpc.send(network.rpc_urls, signed)
    status = status_name(submit_result.status)
    if status != "PENDING":
        raise TransactionSubmitError(
            status,
            submit_result.hash,
            getattr(submit_result, "error_result_xdr", None),
        )
    tx_hash = submit_result.hash
    logger.info("Transaction %s submitted, status %s", tx_hash, status)

    response = rpc.get_transaction(network.rpc_urls, tx_hash)
    status = status_name(response.status)
    tries = 0
    while status in _IN_PROGRESS:
        tries += 1
        if tries > max_tries or (deadline is not None and time.monotonic() >= deadline):
            raise TransactionTimeoutError(tx_hash, status, tries - 1)
        if cancel_event is not None:
            if cancel_event.wait(poll_interval):
                raise TransactionCancelledError(tx_hash)
        else:
            time.sleep(poll_interval)
        response = rpc.get_transaction(network.rpc_urls, tx_hash)
        status = status_name(response.status)
        logger.debug("Transaction %s poll %s: %s", tx_hash, tries, status)

    logger.info("Transaction %s finished with status %s", tx_hash, status)
    if status != "SUCCESS":
        raise TransactionFailedError(
            status,
            tx_hash,
            envelope_xdr=getattr(response, "envelope_xdr", None),
            result_xdr=getattr(response, "result_xdr", None),
            result_meta_xdr=getattr(response, "result_meta_xdr", None),
        )
    return SubmittedTransaction(hash=tx_hash, status=status, response=response)


def sign_and_submit(
    network: NetworkConfig,
    transaction: TransactionEnvelope,
    signers: Sequence[Keypair],
    **submit_kwargs,
) -> SubmittedTransaction:
    """Sign with a random majority of signers, then submit and wait."""
    signatures = sign_transaction(transaction, signers)
    return submit_transaction(network, transaction, signatures, **submit_kwargs)
