"""
Resource-fee normalization.

Nodes simulating the same call can report slightly different costs. Rounding every
figure up onto a coarse grid keeps independently assembled transactions byte-identical,
so all threshold signers sign the same hash.
"""

# 1 XLM
MIN_RESOURCE_FEE = 10_000_000


def _factor(n: int) -> int:
    # integer digit count; float log10 is off by one just below powers of ten
    return 10 ** (len(str(n)) - 1)


def normalize(n: int) -> int:
    """
    Round n up to the next multiple of its leading power of ten:
    1234 -> 2000, 15001 -> 20000, 2000 -> 2000. Idempotent, never below n.
    The JS Reflector client rounds with floor(2n / f) * f instead, so transactions assembled
    here are not byte-identical to the ones it assembles. All signers of one transaction
    must use the same client.
    """
    n = int(n)
    if n < 0:
        raise ValueError(f"Cannot normalize negative value {n}")
    if n == 0:
        return 0
    factor = _factor(n)
    return -(-n // factor) * factor


def normalize_resource_fee(raw_fee: int, minimum: int = MIN_RESOURCE_FEE) -> int:
    """Normalize a simulated resource fee and apply the floor."""
    return max(normalize(raw_fee), minimum)
