"""
Shared contract capability: generic invocation plus the admin / version / update_contract
methods every Reflector contract exposes. Concrete clients embed a ContractFacade.
"""
from collections.abc import Mapping, Sequence
from typing import Any

from stellar_sdk import Account, StrKey, scval
from stellar_sdk import xdr as stellar_xdr

from ..config import NetworkConfig, TxOptions
from ..errors import ConfigurationError
from ..transaction import Invocation, build_transaction

Options = TxOptions | Mapping[str, Any] | None


class ContractFacade:
    def __init__(self, network: NetworkConfig, contract_id: str):
        if not StrKey.is_valid_contract(contract_id):
            raise ConfigurationError(f"Invalid contract id: {contract_id!r}")
        self.network = network
        self.contract_id = contract_id

    def invocation(
        self,
        function_name: str,
        args: Sequence[stellar_xdr.SCVal] = (),
        op_source: str | None = None,
    ) -> Invocation:
        return Invocation(self.contract_id, function_name, tuple(args), op_source)

    def invoke(
        self,
        source: Account,
        function_name: str,
        args: Sequence[stellar_xdr.SCVal] = (),
        options: Options = None,
        op_source: str | None = None,
    ):
        """Build and simulate a call; see transaction.build_transaction for the result shapes."""
        return build_transaction(
            self.network,
            source,
            self.invocation(function_name, args, op_source),
            options,
        )

    def admin(self, source: Account, options: Options):
        return self.invoke(source, "admin", options=options)

    def version(self, source: Account, options: Options):
        return self.invoke(source, "version", options=options)

    def update_contract(self, source: Account, admin: str, wasm_hash: str | bytes, options: Options):
        """Upgrade the contract code; authorized by admin."""
        raw_hash = bytes.fromhex(wasm_hash) if isinstance(wasm_hash, str) else bytes(wasm_hash)
        if len(raw_hash) != 32:
            raise ConfigurationError("wasm_hash must be 32 bytes")
        return self.invoke(
            source,
            "update_contract",
            [scval.to_bytes(raw_hash)],
            options,
            op_source=admin,
        )
