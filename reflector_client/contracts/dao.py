"""Reflector DAO (deposits, operator unlocks, ballots) client."""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from stellar_sdk import Account, scval

from ..config import NetworkConfig
from ..values import build_map, encode_address_vec, encode_deposit_params
from .base import ContractFacade, Options


@dataclass(frozen=True)
class DAOConfig:
    admin: str
    token: str
    amount: int
    deposit_params: Mapping[int, int]
    start_date: int


class DAOClient:
    def __init__(self, network: NetworkConfig, contract_id: str):
        self.contract = ContractFacade(network, contract_id)

    @property
    def contract_id(self) -> str:
        return self.contract.contract_id

    def config(self, source: Account, config: DAOConfig, options: Options):
        data = build_map({
            "admin": scval.to_address(config.admin),
            "amount": scval.to_int128(int(config.amount)),
            "deposit_params": encode_deposit_params(config.deposit_params),
            "start_date": scval.to_uint64(int(config.start_date)),
            "token": scval.to_address(config.token),
        })
        return self.contract.invoke(source, "config", [data], options, op_source=config.admin)

    def set_deposit(self, source: Account, admin: str, deposit_params: Mapping[int, int], options: Options):
        """Ballot deposit amount per category."""
        return self.contract.invoke(
            source, "set_deposit", [encode_deposit_params(deposit_params)], options, op_source=admin
        )

    def unlock(self, source: Account, admin: str, developer: str, operators: Sequence[str], options: Options):
        return self.contract.invoke(
            source,
            "unlock",
            [scval.to_address(developer), encode_address_vec(operators)],
            options,
            op_source=admin,
        )

    def vote(self, source: Account, admin: str, ballot_id: int, accepted: bool, options: Options):
        return self.contract.invoke(
            source,
            "vote",
            [scval.to_uint64(int(ballot_id)), scval.to_bool(accepted)],
            options,
            op_source=admin,
        )

    def available(self, source: Account, claimant: str, options: Options):
        return self.contract.invoke(source, "available", [scval.to_address(claimant)], options)

    def claim(self, source: Account, claimant: str, to: str, amount: int, options: Options):
        return self.contract.invoke(
            source,
            "claim",
            [scval.to_address(claimant), scval.to_address(to), scval.to_int128(int(amount))],
            options,
        )

    def create_ballot(self, source: Account, category: int, title: str, description: str, options: Options):
        """The source account is the ballot initiator and pays the deposit."""
        initiator = source.account.account_id
        ballot = build_map({
            "category": scval.to_uint32(int(category)),
            "description": scval.to_string(description),
            "initiator": scval.to_address(initiator),
            "title": scval.to_string(title),
        })
        return self.contract.invoke(source, "create_ballot", [ballot], options, op_source=initiator)

    def get_ballot(self, source: Account, ballot_id: int, options: Options):
        return self.contract.invoke(source, "get_ballot", [scval.to_uint64(int(ballot_id))], options)

    def retract_ballot(self, source: Account, ballot_id: int, options: Options):
        return self.contract.invoke(
            source,
            "retract_ballot",
            [scval.to_uint64(int(ballot_id))],
            options,
            op_source=source.account.account_id,
        )
