"""
Reflector oracle client.

The contract exists in three generations with different function names and argument
layouts; OracleVersion is fixed at construction and selects them.
Timestamps, resolution and retention periods are in seconds.
"""
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from stellar_sdk import Account, scval

from ..config import NetworkConfig
from ..errors import ConfigurationError, UnsupportedOperationError
from ..values import (
    Asset,
    FeeConfig,
    build_map,
    encode_asset,
    encode_assets,
    encode_fee_config,
    encode_i128_vec,
    encode_price_update,
    encode_u64_vec,
)
from .base import ContractFacade, Options


class OracleVersion(Enum):
    V1 = "v1"
    PULSE = "pulse"
    BEAM = "beam"

    @property
    def retention_functions(self) -> tuple[str, str]:
        """(setter, getter) for the history retention period."""
        if self is OracleVersion.V1:
            return "set_period", "period"
        return "set_history_retention_period", "history_retention_period"

    @property
    def sparse_prices(self) -> bool:
        return self is not OracleVersion.V1

    @property
    def fee_config(self) -> bool:
        return self is not OracleVersion.V1

    @property
    def invocation_costs(self) -> bool:
        return self is OracleVersion.BEAM

    @property
    def paid_reads(self) -> bool:
        """Price queries take the paying caller as first argument."""
        return self is OracleVersion.BEAM


@dataclass(frozen=True)
class OracleConfig:
    admin: str
    assets: Sequence[Asset]
    base_asset: Asset
    decimals: int
    resolution: int
    history_retention_period: int
    cache_size: int = 0
    fee_config: FeeConfig | None = None


class OracleClient:
    def __init__(self, network: NetworkConfig, contract_id: str, version: OracleVersion = OracleVersion.PULSE):
        self.contract = ContractFacade(network, contract_id)
        self.version_type = OracleVersion(version)

    @property
    def contract_id(self) -> str:
        return self.contract.contract_id

    def _require(self, supported: bool, function_name: str):
        if not supported:
            raise UnsupportedOperationError(
                f"{function_name} is not available on {self.version_type.value} oracles"
            )

    def _read_args(self, caller: str | None, *args):
        if not self.version_type.paid_reads:
            return list(args), None
        if not caller:
            raise ConfigurationError(f"caller is required for {self.version_type.value} oracle queries")
        return [scval.to_address(caller), *args], caller

    def _query(self, source: Account, function_name: str, caller: str | None, args, options: Options):
        call_args, op_source = self._read_args(caller, *args)
        return self.contract.invoke(source, function_name, call_args, options, op_source=op_source)

    # ---- admin --------------------------------------------------------------

    def config(self, source: Account, config: OracleConfig, options: Options):
        entries = {
            "admin": scval.to_address(config.admin),
            "assets": encode_assets(config.assets),
            "base_asset": encode_asset(config.base_asset),
            "decimals": scval.to_uint32(config.decimals),
            "resolution": scval.to_uint32(config.resolution),
        }
        if self.version_type is OracleVersion.V1:
            entries["period"] = scval.to_uint64(config.history_retention_period)
        else:
            entries["history_retention_period"] = scval.to_uint64(config.history_retention_period)
            entries["cache_size"] = scval.to_uint32(config.cache_size)
            entries["fee_config"] = encode_fee_config(config.fee_config)
        return self.contract.invoke(source, "config", [build_map(entries)], options, op_source=config.admin)

    def add_assets(self, source: Account, admin: str, assets: Sequence[Asset], options: Options):
        return self.contract.invoke(source, "add_assets", [encode_assets(assets)], options, op_source=admin)

    def set_history_retention_period(self, source: Account, admin: str, period: int, options: Options):
        setter, _ = self.version_type.retention_functions
        return self.contract.invoke(source, setter, [scval.to_uint64(period)], options, op_source=admin)

    def set_price(self, source: Account, admin: str, prices: Sequence[int], timestamp: int, options: Options):
        """
        Record prices (ordered like the contract's asset list) for timestamp.
        On sparse-update oracles a price <= 0 means "no update for this asset".
        """
        if self.version_type.sparse_prices:
            mask, present = encode_price_update(prices)
            args = [scval.to_bytes(mask), encode_i128_vec(present), scval.to_uint64(timestamp)]
        else:
            args = [encode_i128_vec(prices), scval.to_uint64(timestamp)]
        return self.contract.invoke(source, "set_price", args, options, op_source=admin)

    def set_fee_config(self, source: Account, admin: str, fee_config: FeeConfig | None, options: Options):
        self._require(self.version_type.fee_config, "set_fee_config")
        return self.contract.invoke(
            source, "set_fee_config", [encode_fee_config(fee_config)], options, op_source=admin
        )

    def set_cache_size(self, source: Account, admin: str, cache_size: int, options: Options):
        self._require(self.version_type.fee_config, "set_cache_size")
        return self.contract.invoke(
            source, "set_cache_size", [scval.to_uint32(cache_size)], options, op_source=admin
        )

    def set_invocation_costs_config(self, source: Account, admin: str, costs: Sequence[int], options: Options):
        self._require(self.version_type.invocation_costs, "set_invocation_costs_config")
        return self.contract.invoke(
            source, "set_invocation_costs_config", [encode_u64_vec(costs)], options, op_source=admin
        )

    def extend_asset_ttl(self, source: Account, sponsor: str, asset: Asset, days: int, options: Options):
        """Sponsor pays the fee token to keep asset's price history alive; days is the extension."""
        self._require(self.version_type.fee_config, "extend_asset_ttl")
        return self.contract.invoke(
            source,
            "extend_asset_ttl",
            [scval.to_address(sponsor), encode_asset(asset), scval.to_uint32(int(days))],
            options,
            op_source=sponsor,
        )

    # ---- views --------------------------------------------------------------

    def base(self, source: Account, options: Options):
        return self.contract.invoke(source, "base", options=options)

    def decimals(self, source: Account, options: Options):
        return self.contract.invoke(source, "decimals", options=options)

    def resolution(self, source: Account, options: Options):
        return self.contract.invoke(source, "resolution", options=options)

    def history_retention_period(self, source: Account, options: Options):
        _, getter = self.version_type.retention_functions
        return self.contract.invoke(source, getter, options=options)

    def assets(self, source: Account, options: Options):
        return self.contract.invoke(source, "assets", options=options)

    def last_timestamp(self, source: Account, options: Options):
        return self.contract.invoke(source, "last_timestamp", options=options)

    def fee_config(self, source: Account, options: Options):
        self._require(self.version_type.fee_config, "fee_config")
        return self.contract.invoke(source, "fee_config", options=options)

    def cache_size(self, source: Account, options: Options):
        self._require(self.version_type.fee_config, "cache_size")
        return self.contract.invoke(source, "cache_size", options=options)

    def asset_ttl(self, source: Account, asset: Asset, options: Options):
        """Expiration of asset's price history."""
        self._require(self.version_type.fee_config, "asset_ttl")
        return self.contract.invoke(source, "asset_ttl", [encode_asset(asset)], options)

    def invocation_costs(self, source: Account, options: Options):
        self._require(self.version_type.invocation_costs, "invocation_costs")
        return self.contract.invoke(source, "invocation_costs", options=options)

    # ---- prices -------------------------------------------------------------

    def price(self, source: Account, asset: Asset, timestamp: int, options: Options, caller: str | None = None):
        return self._query(
            source, "price", caller, [encode_asset(asset), scval.to_uint64(timestamp)], options
        )

    def x_price(
        self,
        source: Account,
        base_asset: Asset,
        quote_asset: Asset,
        timestamp: int,
        options: Options,
        caller: str | None = None,
    ):
        return self._query(
            source,
            "x_price",
            caller,
            [encode_asset(base_asset), encode_asset(quote_asset), scval.to_uint64(timestamp)],
            options,
        )

    def lastprice(self, source: Account, asset: Asset, options: Options, caller: str | None = None):
        return self._query(source, "lastprice", caller, [encode_asset(asset)], options)

    def x_last_price(
        self,
        source: Account,
        base_asset: Asset,
        quote_asset: Asset,
        options: Options,
        caller: str | None = None,
    ):
        return self._query(
            source, "x_last_price", caller, [encode_asset(base_asset), encode_asset(quote_asset)], options
        )

    def prices(self, source: Account, asset: Asset, records: int, options: Options, caller: str | None = None):
        return self._query(
            source, "prices", caller, [encode_asset(asset), scval.to_uint32(records)], options
        )

    def x_prices(
        self,
        source: Account,
        base_asset: Asset,
        quote_asset: Asset,
        records: int,
        options: Options,
        caller: str | None = None,
    ):
        return self._query(
            source,
            "x_prices",
            caller,
            [encode_asset(base_asset), encode_asset(quote_asset), scval.to_uint32(records)],
            options,
        )

    def twap(self, source: Account, asset: Asset, records: int, options: Options, caller: str | None = None):
        return self._query(
            source, "twap", caller, [encode_asset(asset), scval.to_uint32(records)], options
        )

    def x_twap(
        self,
        source: Account,
        base_asset: Asset,
        quote_asset: Asset,
        records: int,
        options: Options,
        caller: str | None = None,
    ):
        return self._query(
            source,
            "x_twap",
            caller,
            [encode_asset(base_asset), encode_asset(quote_asset), scval.to_uint32(records)],
            options,
        )

    # ---- shared -------------------------------------------------------------

    def admin(self, source: Account, options: Options):
        return self.contract.admin(source, options)

    def version(self, source: Account, options: Options):
        return self.contract.version(source, options)

    def update_contract(self, source: Account, admin: str, wasm_hash: str | bytes, options: Options):
        return self.contract.update_contract(source, admin, wasm_hash, options)
