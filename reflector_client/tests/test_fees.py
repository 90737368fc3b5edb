import pytest

from reflector_client.fees import MIN_RESOURCE_FEE, normalize, normalize_resource_fee


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0, 0),
        (1, 1),
        (9, 9),
        (10, 10),
        (11, 20),
        (1234, 2000),
        (15001, 20000),
        (99999, 100000),
        (100000, 100000),
        (123_456_789, 200_000_000),
    ],
)
def test_normalize_examples(raw, expected):
    assert normalize(raw) == expected


def test_normalize_never_below_input_and_idempotent():
    for n in list(range(1, 2500)) + [10**k + d for k in range(3, 12) for d in (-1, 0, 1)]:
        once = normalize(n)
        assert once >= n
        assert normalize(once) == once


def test_normalize_rejects_negative():
    with pytest.raises(ValueError):
        normalize(-1)


def test_resource_fee_floor():
    assert normalize_resource_fee(0) == MIN_RESOURCE_FEE
    assert normalize_resource_fee(1234) == MIN_RESOURCE_FEE
    assert normalize_resource_fee(10_000_001) == 20_000_000
    assert normalize_resource_fee(50, minimum=10) == 50


def test_normalize_rounds_up_not_to_double():
    # floor(2n / f) * f would give 1900, 3000 and 30
    assert normalize(999) == 1000
    assert normalize(1500) == 2000
    assert normalize(15) == 20
