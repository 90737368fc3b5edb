"""
Client for the Reflector oracle, subscriptions and DAO Soroban contracts.

Typical flow::

    network = NetworkConfig.from_env()
    oracle = OracleClient(network, contract_id, OracleVersion.PULSE)
    account = load_account(network, admin_public_key)
    tx = oracle.set_price(account, admin_public_key, prices, timestamp, TxOptions(fee=10_000_000))
    result = sign_and_submit(network, tx, node_keypairs)
    account.increment_sequence_number()
"""
from .accounts import build_multisig_setup, fund_account, load_account
from .config import NetworkConfig, TimeBounds, TxOptions
from .contracts import (
    ContractFacade,
    CreateSubscription,
    DAOClient,
    DAOConfig,
    OracleClient,
    OracleConfig,
    OracleVersion,
    SubscriptionsClient,
)
from .errors import (
    CodecError,
    ConfigurationError,
    ReflectorClientError,
    RpcRequestError,
    SimulationError,
    TransactionCancelledError,
    TransactionFailedError,
    TransactionSubmitError,
    TransactionTimeoutError,
    UnsupportedOperationError,
)
from .fees import MIN_RESOURCE_FEE, normalize, normalize_resource_fee
from .rpc import make_server_request
from .signing import get_majority, sign_transaction
from .submit import SubmittedTransaction, sign_and_submit, submit_transaction
from .transaction import Invocation, build_transaction, is_restore_transaction
from .values import (
    NO_RESULT,
    Asset,
    AssetType,
    FeeConfig,
    Price,
    Subscription,
    TickerAsset,
    decode_admin,
    decode_asset,
    decode_assets,
    decode_fee_config,
    decode_price,
    decode_prices,
    decode_simulation_result,
    decode_subscription,
    parse_soroban_result,
    to_native,
)

__version__ = "0.1.0"
