"""
Threshold signing: a random majority of the configured signers signs the transaction hash.
"""
import random
from collections.abc import Sequence

from stellar_sdk import Keypair, TransactionEnvelope
from stellar_sdk.decorated_signature import DecoratedSignature


def get_majority(total_signers: int) -> int:
    """floor(N/2) + 1"""
    if total_signers < 1:
        raise ValueError("At least one signer is required")
    return total_signers // 2 + 1


def sign_transaction(
    transaction: TransactionEnvelope,
    signers: Sequence[Keypair],
    rng: random.Random | None = None,
) -> list[DecoratedSignature]:
    """
    Shuffle signers, take the first majority of them and return one detached signature
    each over the transaction hash. Neither the transaction nor signers is modified.
    """
    tx_hash = transaction.hash()
    shuffled = list(signers)
    (rng or random).shuffle(shuffled)
    selected = shuffled[: get_majority(len(shuffled))]
    return [signer.sign_decorated(tx_hash) for signer in selected]
