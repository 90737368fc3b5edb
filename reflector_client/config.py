"""Network context and transaction options, loaded from the environment."""
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from stellar_sdk import Network

from .errors import ConfigurationError

DEFAULT_RPC_URL = "https://soroban-testnet.stellar.org"
DEFAULT_FRIENDBOT_URL = "https://friendbot.stellar.org"


@dataclass(frozen=True)
class NetworkConfig:
    """Immutable network context shared by every client and helper."""

    rpc_urls: tuple[str, ...]
    network_passphrase: str = Network.TESTNET_NETWORK_PASSPHRASE
    friendbot_url: str | None = None

    def __post_init__(self):
        urls = (self.rpc_urls,) if isinstance(self.rpc_urls, str) else tuple(self.rpc_urls)
        urls = tuple(u.strip() for u in urls if u and u.strip())
        if not urls:
            raise ConfigurationError("At least one Soroban RPC URL is required")
        if not self.network_passphrase:
            raise ConfigurationError("Network passphrase is required")
        # frozen: write through object.__setattr__
        object.__setattr__(self, "rpc_urls", urls)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "NetworkConfig":
        """
        Build from SOROBAN_RPC_URL (comma-separated, tried in order), NETWORK_PASSPHRASE
        and FRIENDBOT_URL. A .env file is loaded first when present.
        """
        load_dotenv(env_file)
        raw_urls = os.environ.get("SOROBAN_RPC_URL", DEFAULT_RPC_URL)
        return cls(
            rpc_urls=tuple(raw_urls.split(",")),
            network_passphrase=os.environ.get(
                "NETWORK_PASSPHRASE",
                Network.TESTNET_NETWORK_PASSPHRASE,
            ).strip(),
            friendbot_url=os.environ.get("FRIENDBOT_URL", DEFAULT_FRIENDBOT_URL).strip() or None,
        )


def _unix_seconds(value: int | float | datetime | None) -> int:
    if value is None:
        return 0
    if isinstance(value, datetime):
        return int(value.timestamp())
    return int(value)


@dataclass(frozen=True)
class TimeBounds:
    """Validity window in Unix seconds. 0 means unbounded."""

    min_time: int = 0
    max_time: int = 0

    def __post_init__(self):
        object.__setattr__(self, "min_time", _unix_seconds(self.min_time))
        object.__setattr__(self, "max_time", _unix_seconds(self.max_time))
        if self.max_time and self.min_time > self.max_time:
            raise ConfigurationError("min_time must not be after max_time")


@dataclass(frozen=True)
class TxOptions:
    """
    Per-call transaction options.
    fee is the classic (inclusion) fee in stroops; the simulated resource fee is added on top.
    """

    fee: int
    memo: str | None = None
    timebounds: TimeBounds | None = None
    simulation_only: bool = False

    def __post_init__(self):
        if isinstance(self.fee, bool) or not isinstance(self.fee, int) or self.fee <= 0:
            raise ConfigurationError(f"fee must be a positive integer, got {self.fee!r}")

    @classmethod
    def coerce(cls, options: "TxOptions | Mapping[str, Any] | None") -> "TxOptions":
        """
        Return a fresh TxOptions built from options. Accepts a TxOptions instance or a
        mapping with snake_case or camelCase keys. The input is never mutated.
        """
        if options is None:
            raise ConfigurationError("options are required")
        if isinstance(options, TxOptions):
            return cls(
                fee=options.fee,
                memo=options.memo,
                timebounds=options.timebounds,
                simulation_only=options.simulation_only,
            )
        if not isinstance(options, Mapping):
            raise ConfigurationError(f"Unsupported options type: {type(options).__name__}")

        data = dict(options)
        if "fee" not in data:
            raise ConfigurationError("options.fee is required")
        bounds = data.pop("timebounds", None)
        if isinstance(bounds, Mapping):
            bounds = TimeBounds(
                min_time=bounds.get("min_time", bounds.get("minTime", 0)),
                max_time=bounds.get("max_time", bounds.get("maxTime", 0)),
            )
        simulation_only = data.pop("simulation_only", data.pop("simulationOnly", False))
        fee = data.pop("fee")
        memo = data.pop("memo", None)
        return cls(
            fee=int(fee) if isinstance(fee, str) else fee,
            memo=memo or None,
            timebounds=bounds,
            simulation_only=bool(simulation_only),
        )
