"""
Soroban RPC access through a list of equivalent endpoints.
Every outbound call (simulate, send, get transaction, load account) goes through
make_server_request so one unreachable node does not fail the whole flow.
"""
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from stellar_sdk import Account, SorobanServer

from .errors import RpcRequestError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def make_server_request(rpc_urls: Iterable[str], request_fn: Callable[[SorobanServer], T]) -> T:
    """
    Call request_fn with a SorobanServer for each URL in order and return the first success.
    Each endpoint is tried once. If all fail, every error is logged and RpcRequestError is raised.
    """
    errors: list[tuple[str, BaseException]] = []
    for rpc_url in rpc_urls:
        try:
            server = SorobanServer(rpc_url)
            return request_fn(server)
        except Exception as e:
            # try the next endpoint
            logger.debug("Soroban RPC request failed. url=%s error=%s", rpc_url, e)
            errors.append((rpc_url, e))
    for rpc_url, e in errors:
        logger.error("Soroban RPC %s: %r", rpc_url, e)
    raise RpcRequestError(errors)


def load_account(rpc_urls: Iterable[str], account_id: str) -> Account:
    """Fetch the current account snapshot (sequence number) from the network."""
    return make_server_request(rpc_urls, lambda server: server.load_account(account_id))


def simulate(rpc_urls: Iterable[str], transaction: Any):
    return make_server_request(rpc_urls, lambda server: server.simulate_transaction(transaction))


def send(rpc_urls: Iterable[str], transaction: Any):
    return make_server_request(rpc_urls, lambda server: server.send_transaction(transaction))


def get_transaction(rpc_urls: Iterable[str], tx_hash: str):
    return make_server_request(rpc_urls, lambda server: server.get_transaction(tx_hash))
