"""
Account helpers: friendbot funding, loading snapshots, converting an account to majority multisig.
"""
import logging
from collections.abc import Sequence

import requests
from stellar_sdk import Account, TransactionBuilder, TransactionEnvelope

from . import rpc
from .config import NetworkConfig
from .errors import ConfigurationError
from .signing import get_majority

logger = logging.getLogger(__name__)

FRIENDBOT_TIMEOUT = 30
SETUP_FEE = 1_000_000


def fund_account(network: NetworkConfig, public_key: str) -> dict:
    """Create and fund public_key on a test network via friendbot. Returns friendbot's JSON."""
    if not network.friendbot_url:
        raise ConfigurationError("friendbot_url is not configured for this network")
    r = requests.get(network.friendbot_url, params={"addr": public_key}, timeout=FRIENDBOT_TIMEOUT)
    r.raise_for_status()
    logger.info("Funded account %s", public_key)
    try:
        return r.json()
    except ValueError:
        return {"response": r.text}


def load_account(network: NetworkConfig, account_id: str) -> Account:
    """Current account snapshot. Callers increment its sequence after each successful submit."""
    return rpc.load_account(network.rpc_urls, account_id)


def build_multisig_setup(
    network: NetworkConfig,
    account: Account,
    signer_public_keys: Sequence[str],
    fee: int = SETUP_FEE,
    timeout: int = 30,
) -> TransactionEnvelope:
    """
    Set-options transaction that disables the master key, sets every threshold to
    majority(N) and adds each signer with weight 1. Must be signed by the current master key.
    account is not modified.
    """
    if not signer_public_keys:
        raise ConfigurationError("At least one signer is required")
    majority = get_majority(len(signer_public_keys))
    builder = TransactionBuilder(
        source_account=Account(account.account, account.sequence),
        network_passphrase=network.network_passphrase,
        base_fee=fee,
    ).set_timeout(timeout)
    builder.append_set_options_op(
        master_weight=0,
        low_threshold=majority,
        med_threshold=majority,
        high_threshold=majority,
    )
    for public_key in signer_public_keys:
        builder.append_ed25519_public_key_signer(public_key, weight=1)
    return builder.build()
