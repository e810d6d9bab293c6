import pytest

from espcrypt.des_key import (
    DesKeyError,
    KeyParityError,
    WeakKeyError,
    check_key_parity,
    is_weak_key,
    set_key,
    set_key_checked,
    set_key_unchecked,
    set_odd_parity,
)

NORMAL_KEY = bytes.fromhex("133457799bbcdff1")

WEAK = [
    bytes([0x01] * 8),
    bytes([0xFE] * 8),
    bytes([0x1F, 0x1F, 0x1F, 0x1F, 0x0E, 0x0E, 0x0E, 0x0E]),
    bytes([0xE0, 0xE0, 0xE0, 0xE0, 0xF1, 0xF1, 0xF1, 0xF1]),
]

SEMI_WEAK_PAIRS = [
    (
        bytes([0x01, 0xFE, 0x01, 0xFE, 0x01, 0xFE, 0x01, 0xFE]),
        bytes([0xFE, 0x01, 0xFE, 0x01, 0xFE, 0x01, 0xFE, 0x01]),
    ),
    (
        bytes([0x1F, 0xE0, 0x1F, 0xE0, 0x0E, 0xF1, 0x0E, 0xF1]),
        bytes([0xE0, 0x1F, 0xE0, 0x1F, 0xF1, 0x0E, 0xF1, 0x0E]),
    ),
    (
        bytes([0x01, 0xE0, 0x01, 0xE0, 0x01, 0xF1, 0x01, 0xF1]),
        bytes([0xE0, 0x01, 0xE0, 0x01, 0xF1, 0x01, 0xF1, 0x01]),
    ),
    (
        bytes([0x1F, 0xFE, 0x1F, 0xFE, 0x0E, 0xFE, 0x0E, 0xFE]),
        bytes([0xFE, 0x1F, 0xFE, 0x1F, 0xFE, 0x0E, 0xFE, 0x0E]),
    ),
    (
        bytes([0x01, 0x1F, 0x01, 0x1F, 0x01, 0x0E, 0x01, 0x0E]),
        bytes([0x1F, 0x01, 0x1F, 0x01, 0x0E, 0x01, 0x0E, 0x01]),
    ),
    (
        bytes([0xE0, 0xFE, 0xE0, 0xFE, 0xF1, 0xFE, 0xF1, 0xFE]),
        bytes([0xFE, 0xE0, 0xFE, 0xE0, 0xFE, 0xF1, 0xFE, 0xF1]),
    ),
]


def _round_keys(schedule):
    return [tuple(schedule[i:i + 2]) for i in range(0, len(schedule), 2)]


def test_set_odd_parity_pins_table_values():
    assert set_odd_parity(bytes(8)) == bytes([1] * 8)
    assert set_odd_parity(bytes([0xFF] * 8)) == bytes([254] * 8)


def test_set_odd_parity_result_has_odd_parity_and_keeps_high_bits():
    key = bytes(range(0x10, 0x18))
    fixed = set_odd_parity(key)
    assert check_key_parity(fixed)
    assert all((a & 0xFE) == (b & 0xFE) for a, b in zip(key, fixed))
    assert all(bin(b).count("1") % 2 == 1 for b in fixed)


def test_set_odd_parity_is_idempotent():
    fixed = set_odd_parity(NORMAL_KEY)
    assert set_odd_parity(fixed) == fixed


def test_check_key_parity():
    assert check_key_parity(NORMAL_KEY) is True
    assert check_key_parity(bytes(8)) is False


def test_is_weak_key_all_listed():
    for key in WEAK:
        assert is_weak_key(key) is True
    for a, b in SEMI_WEAK_PAIRS:
        assert is_weak_key(a) is True
        assert is_weak_key(b) is True


def test_is_weak_key_normal_key():
    assert is_weak_key(NORMAL_KEY) is False
    assert is_weak_key(bytearray(NORMAL_KEY)) is False


def test_schedule_shape():
    schedule = set_key_unchecked(NORMAL_KEY)
    assert len(schedule) == 32
    assert all(0 <= word <= 0xFFFFFFFF for word in schedule)


def test_zero_key_gives_zero_schedule():
    assert set_key_unchecked(bytes(8)) == (0,) * 32


def test_parity_bits_do_not_affect_schedule():
    key = bytes.fromhex("0123456789abcdef")
    assert set_key_unchecked(key) == set_key_unchecked(set_odd_parity(key))
    stripped = bytes(b & 0xFE for b in key)
    assert set_key_unchecked(key) == set_key_unchecked(stripped)


def test_different_keys_give_different_schedules():
    other = set_odd_parity(bytes.fromhex("fedcba9876543210"))
    assert set_key_unchecked(NORMAL_KEY) != set_key_unchecked(other)


@pytest.mark.parametrize("key", WEAK)
def test_weak_keys_have_identical_round_keys(key):
    rounds = _round_keys(set_key_unchecked(key))
    assert len(set(rounds)) == 1


@pytest.mark.parametrize("pair", SEMI_WEAK_PAIRS)
def test_semi_weak_pairs_have_reversed_round_keys(pair):
    first, second = pair
    rounds_a = _round_keys(set_key_unchecked(first))
    rounds_b = _round_keys(set_key_unchecked(second))
    assert rounds_a[::-1] == rounds_b
    assert rounds_a != rounds_b


def test_set_key_checked_accepts_good_key():
    assert set_key_checked(NORMAL_KEY) == set_key_unchecked(NORMAL_KEY)


def test_set_key_checked_rejects_bad_parity():
    with pytest.raises(KeyParityError):
        set_key_checked(bytes(8))


@pytest.mark.parametrize("key", WEAK + [k for pair in SEMI_WEAK_PAIRS for k in pair])
def test_set_key_checked_rejects_weak_keys(key):
    with pytest.raises(WeakKeyError):
        set_key_checked(key)


def test_error_hierarchy():
    with pytest.raises(DesKeyError):
        set_key_checked(WEAK[0])
    with pytest.raises(ValueError):
        set_key_checked(bytes(8))


def test_set_key_unchecked_by_default():
    assert set_key(bytes(8)) == (0,) * 32
    assert set_key(WEAK[1], False) == set_key_unchecked(WEAK[1])


def test_set_key_checked_flag():
    assert set_key(NORMAL_KEY, True) == set_key_unchecked(NORMAL_KEY)
    with pytest.raises(KeyParityError):
        set_key(bytes(8), True)
    with pytest.raises(WeakKeyError):
        set_key(WEAK[2], checked=True)


@pytest.mark.parametrize(
    "func", [set_odd_parity, check_key_parity, is_weak_key, set_key_unchecked, set_key_checked]
)
def test_wrong_key_length_raises(func):
    with pytest.raises(ValueError):
        func(b"\x01" * 7)
    with pytest.raises(ValueError):
        func(b"\x01" * 9)