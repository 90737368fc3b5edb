"""
Contract value codec.

Encodes domain types (assets, fee configs, deposit params, price updates, subscriptions)
into SCVal trees with stellar_sdk.scval, and converts contract results back to native values.
"""
import base64
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum

from stellar_sdk import scval
from stellar_sdk import xdr as stellar_xdr

from .errors import CodecError

SCValType = stellar_xdr.SCValType

# set_price bitmask capacity: 32 bytes -> 256 assets
PRICE_MASK_BYTES = 32


class AssetType(IntEnum):
    STELLAR = 1
    OTHER = 2


@dataclass(frozen=True)
class Asset:
    """Stellar asset (contract address, 56 chars) or off-chain symbol such as "BTC"."""

    type: AssetType
    code: str

    @classmethod
    def stellar(cls, address: str) -> "Asset":
        return cls(AssetType.STELLAR, address)

    @classmethod
    def other(cls, symbol: str) -> "Asset":
        return cls(AssetType.OTHER, symbol)


@dataclass(frozen=True)
class TickerAsset:
    """Asset code as the subscriptions contract names it ("BTC", "EURC") and its price source."""

    asset: str
    source: str


@dataclass(frozen=True)
class Price:
    price: int
    timestamp: int


@dataclass(frozen=True)
class FeeConfig:
    token: str
    fee: int


@dataclass(frozen=True)
class Subscription:
    id: int
    asset1: TickerAsset | None
    asset2: TickerAsset | None
    heartbeat: int
    owner: str
    threshold: int
    webhook: bytes
    last_notification: int


class _NoResult:
    """Marker for a result suppressed because the declared footprint did not match execution."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "NO_RESULT"


NO_RESULT = _NoResult()


# ---- encoding --------------------------------------------------------------

def build_map(entries: Mapping[str, stellar_xdr.SCVal]) -> stellar_xdr.SCVal:
    """Struct-style map with symbol keys, sorted by key as the contract host requires."""
    return stellar_xdr.SCVal(
        SCValType.SCV_MAP,
        map=stellar_xdr.SCMap(
            [
                stellar_xdr.SCMapEntry(key=scval.to_symbol(key), val=entries[key])
                for key in sorted(entries)
            ]
        ),
    )


def encode_asset(asset: Asset) -> stellar_xdr.SCVal:
    """Asset as the 2-element vector [Symbol(variant), payload]."""
    asset_type = getattr(asset, "type", None)
    if asset_type == AssetType.STELLAR:
        return scval.to_vec([scval.to_symbol("Stellar"), scval.to_address(asset.code)])
    if asset_type == AssetType.OTHER:
        return scval.to_vec([scval.to_symbol("Other"), scval.to_symbol(asset.code)])
    raise CodecError(f"Invalid asset type: {asset_type!r}")


def encode_assets(assets: Iterable[Asset]) -> stellar_xdr.SCVal:
    return scval.to_vec([encode_asset(a) for a in assets])


def encode_ticker_asset(ticker: TickerAsset) -> stellar_xdr.SCVal:
    return build_map({
        "asset": scval.to_string(ticker.asset),
        "source": scval.to_string(ticker.source),
    })


def encode_fee_config(fee_config: FeeConfig | None) -> stellar_xdr.SCVal:
    """Option<(token, fee)>: [None] or [Some, [token, fee]]."""
    if fee_config is None:
        return scval.to_vec([scval.to_symbol("None")])
    return scval.to_vec([
        scval.to_symbol("Some"),
        scval.to_vec([scval.to_address(fee_config.token), scval.to_int128(int(fee_config.fee))]),
    ])


def encode_deposit_params(deposit_params: Mapping[int | str, int | str]) -> stellar_xdr.SCVal:
    """
    Map<u32, i128> of tier -> amount. Entries are emitted in ascending numeric key order
    regardless of input order, so every client produces the same bytes.
    """
    try:
        items = sorted((int(k), int(v)) for k, v in deposit_params.items())
    except (TypeError, ValueError) as e:
        raise CodecError(f"Malformed deposit params: {e}") from e
    keys = [k for k, _ in items]
    if len(set(keys)) != len(keys):
        raise CodecError(f"Duplicate deposit param keys: {keys}")
    return stellar_xdr.SCVal(
        SCValType.SCV_MAP,
        map=stellar_xdr.SCMap(
            [stellar_xdr.SCMapEntry(key=scval.to_uint32(k), val=scval.to_int128(v)) for k, v in items]
        ),
    )


def encode_price_update(prices: Sequence[int]) -> tuple[bytes, list[int]]:
    """
    Sparse price update: bit i of byte i // 8 is set when prices[i] > 0; only those prices
    are kept, in their original order. Indices beyond the mask capacity get no mask bit.
    """
    mask = bytearray(PRICE_MASK_BYTES)
    present = []
    for i, price in enumerate(prices):
        price = int(price)
        if price <= 0:
            continue
        present.append(price)
        if i < PRICE_MASK_BYTES * 8:
            mask[i // 8] |= 1 << (i % 8)
    return bytes(mask), present


def encode_i128_vec(values: Iterable[int]) -> stellar_xdr.SCVal:
    return scval.to_vec([scval.to_int128(int(v)) for v in values])


def encode_u64_vec(values: Iterable[int]) -> stellar_xdr.SCVal:
    return scval.to_vec([scval.to_uint64(int(v)) for v in values])


def encode_address_vec(addresses: Iterable[str]) -> stellar_xdr.SCVal:
    return scval.to_vec([scval.to_address(a) for a in addresses])


# ---- decoding --------------------------------------------------------------

def _text(raw: bytes | str) -> str:
    return raw.decode("utf-8") if isinstance(raw, bytes) else raw


def _hashable(value):
    if isinstance(value, list):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, dict):
        return tuple((k, _hashable(v)) for k, v in value.items())
    return value


def _as_scval(value: stellar_xdr.SCVal | str | bytes) -> stellar_xdr.SCVal:
    if isinstance(value, str):
        return stellar_xdr.SCVal.from_xdr(value)
    if isinstance(value, bytes):
        return stellar_xdr.SCVal.from_xdr_bytes(value)
    return value


def to_native(value: stellar_xdr.SCVal | str | bytes):
    """
    stellar_sdk scval.to_native, except that addresses become strkeys, strings and symbols are
    decoded to str, and maps become dicts in contract order with duplicate keys rejected.
    """
    sc_val = _as_scval(value)
    t = sc_val.type
    if t == SCValType.SCV_ADDRESS:
        return scval.from_address(sc_val).address
    if t == SCValType.SCV_VEC:
        return [to_native(v) for v in (sc_val.vec.sc_vec if sc_val.vec else [])]
    if t == SCValType.SCV_MAP:
        result = {}
        for entry in sc_val.map.sc_map if sc_val.map else []:
            key = _hashable(to_native(entry.key))
            if key in result:
                raise CodecError(f"Duplicate map key: {key!r}")
            result[key] = to_native(entry.val)
        return result
    try:
        native = scval.to_native(sc_val)
    except ValueError as e:
        raise CodecError(f"Unsupported value type: {t}") from e
    return _text(native) if t in (SCValType.SCV_STRING, SCValType.SCV_SYMBOL) else native


def parse_return_value(value: stellar_xdr.SCVal | None):
    """
    Native result of a contract call. A bare `false` is what the host returns when the
    footprint did not match execution; that yields NO_RESULT, never None.
    """
    if value is None:
        return NO_RESULT
    if value.type == SCValType.SCV_BOOL and value.b is False:
        return NO_RESULT
    return to_native(value)


def extract_return_value(result_meta) -> stellar_xdr.SCVal | None:
    """Return value from a TransactionMeta (object, base64 XDR or raw bytes)."""
    if isinstance(result_meta, str):
        result_meta = stellar_xdr.TransactionMeta.from_xdr(result_meta)
    elif isinstance(result_meta, bytes):
        result_meta = stellar_xdr.TransactionMeta.from_xdr(base64.b64encode(result_meta).decode())
    if result_meta is None:
        return None
    if result_meta.v == 3:
        soroban_meta = result_meta.v3.soroban_meta
    elif result_meta.v == 4:
        soroban_meta = result_meta.v4.soroban_meta
    else:
        return None
    if soroban_meta is None:
        return None
    return soroban_meta.return_value


def parse_soroban_result(result_meta):
    """Decode the return value of a submitted call; NO_RESULT if it was suppressed."""
    return parse_return_value(extract_return_value(result_meta))


def decode_simulation_result(simulation):
    """Return value of a simulation-only call."""
    results = getattr(simulation, "results", None)
    if not results:
        return NO_RESULT
    return parse_return_value(stellar_xdr.SCVal.from_xdr(results[0].xdr))


def decode_asset(value) -> Asset | None:
    """[Symbol("Stellar"), Address] | [Symbol("Other"), Symbol] -> Asset."""
    if value is None:
        return None
    if isinstance(value, (stellar_xdr.SCVal, str, bytes)):
        sc_val = _as_scval(value)
        if sc_val.type == SCValType.SCV_VOID:
            return None
        value = to_native(sc_val)
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise CodecError(f"Malformed asset value: {value!r}")
    variant, code = value
    if variant == "Stellar":
        return Asset(AssetType.STELLAR, code)
    if variant == "Other":
        return Asset(AssetType.OTHER, code)
    raise CodecError(f"Invalid asset type: {variant!r}")


def decode_assets(value) -> list[Asset]:
    native = to_native(value) if isinstance(value, (stellar_xdr.SCVal, str, bytes)) else value
    return [decode_asset(a) for a in native]


def decode_price(value) -> Price | None:
    """
    PriceData struct {price, timestamp} (or a (price, timestamp) tuple) -> Price.
    None when the contract has no record; NO_RESULT passes through unchanged.
    """
    if value is NO_RESULT or value is None:
        return value
    if isinstance(value, (stellar_xdr.SCVal, str, bytes)):
        value = to_native(value)
        if value is None:
            return None
    if isinstance(value, Mapping):
        try:
            return Price(price=int(value["price"]), timestamp=int(value["timestamp"]))
        except KeyError as e:
            raise CodecError(f"Malformed price value: {value!r}") from e
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return Price(price=int(value[0]), timestamp=int(value[1]))
    raise CodecError(f"Malformed price value: {value!r}")


def decode_prices(value) -> list[Price] | None:
    if isinstance(value, (stellar_xdr.SCVal, str, bytes)):
        value = to_native(value)
    if value is None or value is NO_RESULT:
        return value
    return [decode_price(p) for p in value]


def decode_fee_config(value) -> FeeConfig | None:
    """[None] | [Some, [token, fee]] -> FeeConfig or None."""
    if isinstance(value, (stellar_xdr.SCVal, str, bytes)):
        value = to_native(value)
    if value is None or value == ["None"]:
        return None
    if isinstance(value, (list, tuple)) and len(value) == 2 and value[0] == "Some":
        token, fee = value[1]
        return FeeConfig(token=token, fee=int(fee))
    raise CodecError(f"Malformed fee config value: {value!r}")


def decode_admin(value) -> str | None:
    """Admin address -> G... / C... strkey."""
    if isinstance(value, (stellar_xdr.SCVal, str, bytes)) and not _is_strkey(value):
        value = to_native(value)
    if value is None or isinstance(value, str):
        return value
    raise CodecError(f"Malformed admin value: {value!r}")


def _is_strkey(value) -> bool:
    return isinstance(value, str) and len(value) == 56 and value[0] in "GC"


def _decode_ticker(value) -> TickerAsset | None:
    if value is None:
        return None
    if not isinstance(value, Mapping) or not isinstance(value.get("asset"), str):
        raise CodecError(f"Malformed ticker asset: {value!r}")
    return TickerAsset(asset=value["asset"], source=value.get("source"))


def decode_subscription(value) -> Subscription | None:
    """
    Subscription struct -> Subscription. Accepts the struct itself or the (id, struct)
    tuple returned by create_subscription.
    """
    if isinstance(value, (stellar_xdr.SCVal, str, bytes)):
        value = to_native(value)
    if value is None:
        return None
    sub_id = None
    if isinstance(value, (list, tuple)):
        if len(value) != 2 or not isinstance(value[1], Mapping):
            raise CodecError(f"Malformed subscription value: {value!r}")
        sub_id, value = value
    if not isinstance(value, Mapping):
        raise CodecError(f"Malformed subscription value: {value!r}")
    try:
        return Subscription(
            id=int(value.get("id", sub_id) or 0),
            asset1=_decode_ticker(value.get("asset1")),
            asset2=_decode_ticker(value.get("asset2")),
            heartbeat=int(value["heartbeat"]),
            owner=value["owner"],
            threshold=int(value["threshold"]),
            webhook=value.get("webhook") or b"",
            last_notification=int(value.get("last_notification") or 0),
        )
    except KeyError as e:
        raise CodecError(f"Subscription is missing field {e}") from e
