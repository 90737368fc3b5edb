"""
Build, simulate and assemble Soroban contract invocations.

build_transaction is the entry point used by every contract client:
draft -> simulate -> (restore substitution) -> normalized resources -> assembled, unsigned envelope.
"""
import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from stellar_sdk import Account, TransactionBuilder, TransactionEnvelope
from stellar_sdk import xdr as stellar_xdr
from stellar_sdk.operation import InvokeHostFunction, RestoreFootprint
from stellar_sdk.soroban_data_builder import SorobanDataBuilder

from . import rpc
from .config import NetworkConfig, TimeBounds, TxOptions
from .errors import SimulationError
from .fees import normalize, normalize_resource_fee

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invocation:
    """A single contract call: target, function, ordered arguments, optional authorizing source."""

    contract_id: str
    function_name: str
    args: tuple[stellar_xdr.SCVal, ...] = ()
    source: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))


def _new_builder(network: NetworkConfig, source: Account, options: TxOptions, base_fee: int) -> TransactionBuilder:
    # TransactionBuilder.build() increments the account it holds; give it a copy so the
    # caller's snapshot stays untouched (and reusable for a restore transaction)
    builder = TransactionBuilder(
        source_account=copy.deepcopy(source),
        network_passphrase=network.network_passphrase,
        base_fee=base_fee,
    )
    bounds = options.timebounds or TimeBounds()
    builder.add_time_bounds(bounds.min_time, bounds.max_time)
    if options.memo:
        builder.add_text_memo(options.memo)
    return builder


def build_draft(network: NetworkConfig, source: Account, invocation: Invocation, options: TxOptions) -> TransactionEnvelope:
    """Unsigned, unsimulated invocation transaction."""
    builder = _new_builder(network, source, options, options.fee)
    builder.append_invoke_contract_function_op(
        contract_id=invocation.contract_id,
        function_name=invocation.function_name,
        parameters=list(invocation.args),
        source=invocation.source,
    )
    return builder.build()


def build_restore_transaction(
    network: NetworkConfig,
    source: Account,
    restore_preamble: Any,
    options: TxOptions,
) -> TransactionEnvelope:
    """
    Restore-footprint transaction for the archived entries reported by a simulation.
    The total fee is normalize(fee + min_resource_fee); everything above options.fee
    goes to the resource fee.
    """
    total_fee = normalize(options.fee + int(restore_preamble.min_resource_fee))
    # build() adds soroban_data.resource_fee on top of base_fee
    soroban_data = (
        SorobanDataBuilder.from_xdr(restore_preamble.transaction_data)
        .set_resource_fee(total_fee - options.fee)
        .build()
    )
    builder = _new_builder(network, source, options, options.fee)
    builder.set_soroban_data(soroban_data)
    builder.append_restore_footprint_op()
    return builder.build()


def is_restore_transaction(transaction: TransactionEnvelope) -> bool:
    """True if build_transaction substituted a restore transaction for the requested call."""
    operations = transaction.transaction.operations
    return len(operations) == 1 and isinstance(operations[0], RestoreFootprint)


def assemble_transaction(
    draft: TransactionEnvelope,
    simulation: Any,
    network: NetworkConfig,
) -> TransactionEnvelope:
    """
    Merge simulated footprint, auth and normalized resources into a copy of draft.
    The resource fee is added to the draft's classic fee.
    """
    try:
        raw_fee = int(simulation.min_resource_fee)
    except (TypeError, ValueError) as e:
        raise SimulationError("Failed to get resource fee from the simulation response.") from e
    resource_fee = normalize_resource_fee(raw_fee)

    resources = stellar_xdr.SorobanTransactionData.from_xdr(simulation.transaction_data).resources
    raw_instructions = resources.instructions.uint32
    raw_read_bytes = resources.disk_read_bytes.uint32
    raw_write_bytes = resources.write_bytes.uint32
    instructions = normalize(raw_instructions)
    read_bytes = normalize(raw_read_bytes)
    write_bytes = normalize(raw_write_bytes)

    soroban_data = (
        SorobanDataBuilder.from_xdr(simulation.transaction_data)
        .set_resource_fee(resource_fee)
        .set_resources(instructions, read_bytes, write_bytes)
        .build()
    )

    assembled = TransactionEnvelope.from_xdr(draft.to_xdr(), network.network_passphrase)
    tx = assembled.transaction
    tx.fee += resource_fee
    tx.soroban_data = soroban_data
    op = tx.operations[0]
    if isinstance(op, InvokeHostFunction) and not op.auth and simulation.results:
        op.auth = [
            stellar_xdr.SorobanAuthorizationEntry.from_xdr(entry)
            for entry in (simulation.results[0].auth or [])
        ]

    logger.debug(
        "Transaction %s cost: cpuInsns=%s:%s readBytes=%s:%s writeBytes=%s:%s fee=%s:%s",
        assembled.hash_hex(),
        raw_instructions, instructions,
        raw_read_bytes, read_bytes,
        raw_write_bytes, write_bytes,
        raw_fee, resource_fee,
    )
    return assembled


def build_transaction(
    network: NetworkConfig,
    source: Account,
    invocation: Invocation,
    options: TxOptions | Mapping[str, Any] | None,
):
    """
    Build and simulate invocation, returning one of:
    - the assembled, unsigned TransactionEnvelope, ready to sign;
    - a restore-footprint TransactionEnvelope when the call touches archived entries
      (check with is_restore_transaction; the original call must be re-issued after it lands);
    - the raw simulation response when options.simulation_only is set.
    Raises SimulationError if the contract rejects the call.
    """
    tx_options = TxOptions.coerce(options)
    draft = build_draft(network, source, invocation, tx_options)

    simulation = rpc.simulate(network.rpc_urls, draft)
    if getattr(simulation, "error", None):
        raise SimulationError(simulation.error)

    if tx_options.simulation_only:
        return simulation

    restore_preamble = getattr(simulation, "restore_preamble", None)
    if restore_preamble is not None:
        logger.warning(
            "Footprint of %s.%s needs restoration; returning restore transaction",
            invocation.contract_id,
            invocation.function_name,
        )
        return build_restore_transaction(network, source, restore_preamble, tx_options)

    return assemble_transaction(draft, simulation, network)
