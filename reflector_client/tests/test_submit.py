"""Submission and polling state machine."""
import threading
import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from stellar_sdk import Keypair, TransactionBuilder
from stellar_sdk.soroban_rpc import GetTransactionStatus, SendTransactionStatus

from reflector_client.errors import (
    TransactionCancelledError,
    TransactionFailedError,
    TransactionSubmitError,
    TransactionTimeoutError,
)
from reflector_client.submit import sign_and_submit, status_name, submit_transaction


def _sent(status=SendTransactionStatus.PENDING, tx_hash="abc123", error_result_xdr=None):
    return SimpleNamespace(status=status, hash=tx_hash, error_result_xdr=error_result_xdr)


def _polled(status, **payload):
    return SimpleNamespace(
        status=status,
        envelope_xdr=payload.get("envelope_xdr"),
        result_xdr=payload.get("result_xdr"),
        result_meta_xdr=payload.get("result_meta_xdr"),
    )


@pytest.fixture
def server():
    server = MagicMock()
    with patch("reflector_client.rpc.SorobanServer", return_value=server):
        yield server


@pytest.fixture
def transaction(network, account):
    return (
        TransactionBuilder(account, network.network_passphrase, 100)
        .add_time_bounds(0, 0)
        .append_bump_sequence_op(0)
        .build()
    )


def test_status_name_accepts_enums_and_strings():
    assert status_name(GetTransactionStatus.SUCCESS) == "SUCCESS"
    assert status_name("NOT_FOUND") == "NOT_FOUND"


def test_success_after_polling(server, network, transaction):
    server.send_transaction.return_value = _sent()
    final = _polled(GetTransactionStatus.SUCCESS, result_meta_xdr="meta")
    server.get_transaction.side_effect = [
        _polled(GetTransactionStatus.NOT_FOUND),
        _polled(GetTransactionStatus.NOT_FOUND),
        final,
    ]

    result = submit_transaction(network, transaction, poll_interval=0)

    assert result.hash == "abc123"
    assert result.status == "SUCCESS"
    assert result.response is final
    assert result.result_meta_xdr == "meta"
    assert server.get_transaction.call_count == 3


@pytest.mark.parametrize(
    "status",
    [SendTransactionStatus.ERROR, SendTransactionStatus.DUPLICATE, SendTransactionStatus.TRY_AGAIN_LATER],
)
def test_non_pending_send_raises_without_polling(server, network, transaction, status):
    server.send_transaction.return_value = _sent(status=status, error_result_xdr="AAAA")

    with pytest.raises(TransactionSubmitError) as exc_info:
        submit_transaction(network, transaction, poll_interval=0)

    assert exc_info.value.status == status.value
    assert exc_info.value.hash == "abc123"
    assert exc_info.value.error_result_xdr == "AAAA"
    server.get_transaction.assert_not_called()


def test_failed_carries_all_payloads(server, network, transaction):
    server.send_transaction.return_value = _sent()
    server.get_transaction.side_effect = [
        _polled(GetTransactionStatus.NOT_FOUND),
        _polled(GetTransactionStatus.FAILED, envelope_xdr="env", result_xdr="res", result_meta_xdr="meta"),
    ]

    with pytest.raises(TransactionFailedError) as exc_info:
        submit_transaction(network, transaction, poll_interval=0)

    err = exc_info.value
    assert (err.status, err.hash) == ("FAILED", "abc123")
    assert (err.envelope_xdr, err.result_xdr, err.result_meta_xdr) == ("env", "res", "meta")


def test_timeout_is_distinct_from_failure(server, network, transaction):
    server.send_transaction.return_value = _sent()
    server.get_transaction.return_value = _polled(GetTransactionStatus.NOT_FOUND)

    with pytest.raises(TransactionTimeoutError) as exc_info:
        submit_transaction(network, transaction, poll_interval=0, max_tries=3)

    assert not isinstance(exc_info.value, TransactionFailedError)
    assert exc_info.value.status == "NOT_FOUND"
    assert exc_info.value.tries == 3
    # initial lookup plus one per try
    assert server.get_transaction.call_count == 4


def test_expired_deadline_stops_polling(server, network, transaction):
    server.send_transaction.return_value = _sent()
    server.get_transaction.return_value = _polled("PENDING")

    with pytest.raises(TransactionTimeoutError) as exc_info:
        submit_transaction(network, transaction, poll_interval=0, deadline=time.monotonic() - 1)

    assert exc_info.value.status == "PENDING"
    assert server.get_transaction.call_count == 1


def test_cancel_event_stops_polling(server, network, transaction):
    server.send_transaction.return_value = _sent()
    server.get_transaction.return_value = _polled(GetTransactionStatus.NOT_FOUND)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(TransactionCancelledError) as exc_info:
        submit_transaction(network, transaction, poll_interval=10, cancel_event=cancel)

    assert exc_info.value.hash == "abc123"
    assert server.get_transaction.call_count == 1


def test_signatures_attached_to_sent_copy_only(server, network, transaction):
    server.send_transaction.return_value = _sent()
    server.get_transaction.return_value = _polled(GetTransactionStatus.SUCCESS)
    signers = [Keypair.random() for _ in range(2)]
    signatures = [kp.sign_decorated(transaction.hash()) for kp in signers]

    submit_transaction(network, transaction, signatures, poll_interval=0)

    sent = server.send_transaction.call_args[0][0]
    assert len(sent.signatures) == 2
    assert sent.hash() == transaction.hash()
    assert transaction.signatures == []


def test_sign_and_submit_uses_majority(server, network, transaction):
    server.send_transaction.return_value = _sent()
    server.get_transaction.return_value = _polled(GetTransactionStatus.SUCCESS)
    signers = [Keypair.random() for _ in range(5)]

    result = sign_and_submit(network, transaction, signers, poll_interval=0)

    assert result.status == "SUCCESS"
    assert len(server.send_transaction.call_args[0][0].signatures) == 3
