"""
Shared fixtures. No test reaches the network: SorobanServer is patched with MagicMock
or with FakeSorobanServer below.
"""
import os
from types import SimpleNamespace

import pytest
from stellar_sdk import Account, Keypair, Network, StrKey, scval
from stellar_sdk.soroban_data_builder import SorobanDataBuilder
from stellar_sdk.soroban_rpc import GetTransactionStatus, SendTransactionStatus

from reflector_client.config import NetworkConfig, TimeBounds, TxOptions
from reflector_client.values import build_map, to_native


def make_transaction_data(instructions=1234, read_bytes=15001, write_bytes=999, resource_fee=5000) -> str:
    return (
        SorobanDataBuilder()
        .set_resources(instructions, read_bytes, write_bytes)
        .set_resource_fee(resource_fee)
        .build()
        .to_xdr()
    )


def simulation_success(min_resource_fee=5000, transaction_data=None, retval=None, auth=()):
    return SimpleNamespace(
        error=None,
        restore_preamble=None,
        min_resource_fee=min_resource_fee,
        transaction_data=transaction_data or make_transaction_data(),
        results=[SimpleNamespace(auth=list(auth), xdr=(retval or scval.to_void()).to_xdr())],
        latest_ledger=100,
    )


def new_contract_id() -> str:
    return StrKey.encode_contract(os.urandom(32))


@pytest.fixture
def network():
    return NetworkConfig(
        rpc_urls=("http://rpc-1.test", "http://rpc-2.test"),
        network_passphrase=Network.TESTNET_NETWORK_PASSPHRASE,
        friendbot_url="http://friendbot.test",
    )


@pytest.fixture
def keypair():
    return Keypair.random()


@pytest.fixture
def account(keypair):
    return Account(keypair.public_key, 1000)


@pytest.fixture
def options():
    return TxOptions(fee=10_000_000, timebounds=TimeBounds(0, 0))


@pytest.fixture
def contract_id():
    return new_contract_id()


class FakeLedger:
    """
    Minimal in-memory oracle: remembers assets on config, stores prices on set_price
    (sparse mask encoding) and answers price queries. Calls execute on send only.
    """

    def __init__(self):
        self.assets = []
        self.prices = {}
        self.transactions = {}
        self.sent = []

    def server(self, rpc_url):
        return FakeSorobanServer(self)

    def execute(self, operation, commit: bool):
        invoke = operation.host_function.invoke_contract
        function_name = invoke.function_name.sc_symbol.decode()
        args = [to_native(a) for a in invoke.args]
        if function_name == "config" and commit:
            self.assets = [tuple(a) for a in args[0]["assets"]]
        elif function_name == "set_price" and commit:
            mask, values, timestamp = args
            present = iter(values)
            for i, asset in enumerate(self.assets):
                if mask[i // 8] & (1 << (i % 8)):
                    self.prices[(asset, timestamp)] = next(present)
        elif function_name == "price":
            asset, timestamp = tuple(args[0]), args[1]
            if (asset, timestamp) in self.prices:
                return build_map({
                    "price": scval.to_int128(self.prices[(asset, timestamp)]),
                    "timestamp": scval.to_uint64(timestamp),
                })
        return scval.to_void()


class FakeSorobanServer:
    def __init__(self, ledger: FakeLedger):
        self.ledger = ledger

    def load_account(self, account_id):
        return Account(account_id, 100)

    def simulate_transaction(self, transaction):
        retval = self.ledger.execute(transaction.transaction.operations[0], commit=False)
        return simulation_success(min_resource_fee=123_456, retval=retval)

    def send_transaction(self, transaction):
        tx_hash = transaction.hash_hex()
        self.ledger.sent.append(transaction)
        retval = self.ledger.execute(transaction.transaction.operations[0], commit=True)
        self.ledger.transactions[tx_hash] = (transaction, retval)
        return SimpleNamespace(status=SendTransactionStatus.PENDING, hash=tx_hash, error_result_xdr=None)

    def get_transaction(self, tx_hash):
        transaction, retval = self.ledger.transactions[tx_hash]
        meta = SimpleNamespace(v=3, v3=SimpleNamespace(soroban_meta=SimpleNamespace(return_value=retval)))
        return SimpleNamespace(
            status=GetTransactionStatus.SUCCESS,
            envelope_xdr=transaction.to_xdr(),
            result_xdr=None,
            result_meta_xdr=meta,
        )


@pytest.fixture
def ledger():
    return FakeLedger()
