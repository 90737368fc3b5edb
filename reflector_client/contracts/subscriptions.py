"""Reflector subscriptions (price-change notification) client."""
from collections.abc import Sequence
from dataclasses import dataclass

from stellar_sdk import Account, scval

from ..config import NetworkConfig
from ..values import TickerAsset, build_map, encode_ticker_asset, encode_u64_vec
from .base import ContractFacade, Options


@dataclass(frozen=True)
class CreateSubscription:
    owner: str
    asset1: TickerAsset
    asset2: TickerAsset
    threshold: int
    heartbeat: int
    webhook: bytes
    amount: int


class SubscriptionsClient:
    def __init__(self, network: NetworkConfig, contract_id: str):
        self.contract = ContractFacade(network, contract_id)

    @property
    def contract_id(self) -> str:
        return self.contract.contract_id

    def config(self, source: Account, admin: str, token: str, fee: int, options: Options):
        config = build_map({
            "admin": scval.to_address(admin),
            "fee": scval.to_uint64(fee),
            "token": scval.to_address(token),
        })
        return self.contract.invoke(source, "config", [config], options, op_source=admin)

    def create_subscription(self, source: Account, subscription: CreateSubscription, options: Options):
        """Returns (id, subscription) once executed. threshold is a percentage, heartbeat minutes."""
        data = build_map({
            "asset1": encode_ticker_asset(subscription.asset1),
            "asset2": encode_ticker_asset(subscription.asset2),
            "heartbeat": scval.to_uint32(subscription.heartbeat),
            "owner": scval.to_address(subscription.owner),
            "threshold": scval.to_uint32(subscription.threshold),
            "webhook": scval.to_bytes(bytes(subscription.webhook)),
        })
        return self.contract.invoke(
            source,
            "create_subscription",
            [data, scval.to_uint64(subscription.amount)],
            options,
        )

    def trigger(self, source: Account, admin: str, timestamp: int, trigger_hash: bytes, options: Options):
        return self.contract.invoke(
            source,
            "trigger",
            [scval.to_uint64(timestamp), scval.to_bytes(bytes(trigger_hash))],
            options,
            op_source=admin,
        )

    def cancel(self, source: Account, subscription_id: int, options: Options):
        return self.contract.invoke(
            source,
            "cancel",
            [scval.to_uint64(subscription_id)],
            options,
            op_source=source.account.account_id,
        )

    def set_fee(self, source: Account, admin: str, fee: int, options: Options):
        return self.contract.invoke(source, "set_fee", [scval.to_uint64(fee)], options, op_source=admin)

    def deposit(self, source: Account, from_: str, subscription_id: int, amount: int, options: Options):
        return self.contract.invoke(
            source,
            "deposit",
            [scval.to_address(from_), scval.to_uint64(subscription_id), scval.to_uint64(amount)],
            options,
            op_source=from_,
        )

    def charge(self, source: Account, admin: str, ids: Sequence[int], options: Options):
        return self.contract.invoke(source, "charge", [encode_u64_vec(ids)], options, op_source=admin)

    def get_subscription(self, source: Account, subscription_id: int, options: Options):
        return self.contract.invoke(source, "get_subscription", [scval.to_uint64(subscription_id)], options)

    def fee(self, source: Account, options: Options):
        return self.contract.invoke(source, "fee", options=options)

    def token(self, source: Account, options: Options):
        return self.contract.invoke(source, "token", options=options)

    def admin(self, source: Account, options: Options):
        return self.contract.admin(source, options)

    def version(self, source: Account, options: Options):
        return self.contract.version(source, options)

    def update_contract(self, source: Account, admin: str, wasm_hash: str | bytes, options: Options):
        return self.contract.update_contract(source, admin, wasm_hash, options)
