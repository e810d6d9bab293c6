import pytest

from espcrypt.des_cipher import (
    cipher_3des_cbc,
    crypt_block,
    decrypt3_block,
    ede3_cbc_encrypt,
    encrypt3_block,
    ncbc_encrypt,
)
from espcrypt.des_key import (
    KeyParityError,
    WeakKeyError,
    set_key_unchecked,
    set_odd_parity,
)

KEY_A = bytes.fromhex("133457799BBCDFF1")
KEY_B = set_odd_parity(b"abcdefgh")
KEY_C = set_odd_parity(b"ijklmnop")
IV = bytes(range(8))


def _xor(a, b):
    return bytes(x ^ y for x, y in zip(a, b))


def test_single_des_known_vector():
    schedule = set_key_unchecked(KEY_A)
    ciphertext = crypt_block(bytes.fromhex("0123456789ABCDEF"), schedule, True)
    assert ciphertext == bytes.fromhex("85E813540F0AB405")


def test_single_des_decrypt_inverts_encrypt():
    schedule = set_key_unchecked(KEY_B)
    block = b"8 bytes!"
    assert crypt_block(crypt_block(block, schedule, True), schedule, False) == block


def test_des_cbc_known_vector():
    schedule = set_key_unchecked(bytes.fromhex("0123456789abcdef"))
    iv = bytes.fromhex("1234567890abcdef")
    out, next_iv = ncbc_encrypt(b"Now is the time for all ", schedule, iv, True)
    expected = bytes.fromhex("e5c7cdde872bf27c43e934008c389c0f683788499a7c05f6")
    assert out == expected
    assert next_iv == out[-8:]


def test_triple_des_with_equal_keys_is_single_des():
    schedule = set_key_unchecked(KEY_B)
    block = b"ABCDEFGH"
    assert encrypt3_block(block, schedule, schedule, schedule) == crypt_block(
        block, schedule, True
    )


def test_triple_des_block_round_trip():
    ks1, ks2, ks3 = (set_key_unchecked(k) for k in (KEY_A, KEY_B, KEY_C))
    block = b"\x00\xffpayload"[:8]
    encrypted = encrypt3_block(block, ks1, ks2, ks3)
    assert encrypted != block
    assert decrypt3_block(encrypted, ks1, ks2, ks3) == block


def test_ncbc_round_trip_and_iv_chaining():
    schedule = set_key_unchecked(KEY_A)
    plaintext = b"sixteen byte msg" * 3
    ciphertext, next_iv = ncbc_encrypt(plaintext, schedule, IV, True)
    assert len(ciphertext) == len(plaintext)
    assert next_iv == ciphertext[-8:]
    assert ciphertext[:8] == crypt_block(_xor(plaintext[:8], IV), schedule, True)
    decrypted, dec_iv = ncbc_encrypt(ciphertext, schedule, IV, False)
    assert decrypted == plaintext
    assert dec_iv == ciphertext[-8:]


def test_ncbc_chaining_across_calls_matches_one_call():
    schedule = set_key_unchecked(KEY_B)
    plaintext = b"0123456789abcdefFEDCBA9876543210"
    whole, _ = ncbc_encrypt(plaintext, schedule, IV, True)
    first, iv2 = ncbc_encrypt(plaintext[:16], schedule, IV, True)
    second, _ = ncbc_encrypt(plaintext[16:], schedule, iv2, True)
    assert first + second == whole


def test_ncbc_partial_block_is_zero_padded():
    schedule = set_key_unchecked(KEY_A)
    plaintext = b"twelve bytes"
    ciphertext, _ = ncbc_encrypt(plaintext, schedule, IV, True)
    assert len(ciphertext) == 16
    padded, _ = ncbc_encrypt(plaintext + b"\0" * 4, schedule, IV, True)
    assert ciphertext == padded
    decrypted, _ = ncbc_encrypt(ciphertext, schedule, IV, False)
    assert decrypted == plaintext + b"\0" * 4


def test_ncbc_decrypt_rejects_partial_block():
    schedule = set_key_unchecked(KEY_A)
    with pytest.raises(ValueError):
        ncbc_encrypt(b"short", schedule, IV, False)


def test_ncbc_empty_input_keeps_iv():
    schedule = set_key_unchecked(KEY_A)
    assert ncbc_encrypt(b"", schedule, IV, True) == (b"", IV)
    assert ncbc_encrypt(b"", schedule, IV, False) == (b"", IV)


def test_ede3_with_equal_keys_matches_des_cbc():
    schedule = set_key_unchecked(KEY_C)
    plaintext = b"triple des equals single des here"
    assert ede3_cbc_encrypt(plaintext, schedule, schedule, schedule, IV, True) == (
        ncbc_encrypt(plaintext, schedule, IV, True)
    )


def test_ede3_round_trip():
    ks1, ks2, ks3 = (set_key_unchecked(k) for k in (KEY_A, KEY_B, KEY_C))
    plaintext = b"an ESP payload of several blocks"
    ciphertext, next_iv = ede3_cbc_encrypt(plaintext, ks1, ks2, ks3, IV, True)
    assert next_iv == ciphertext[-8:]
    decrypted, _ = ede3_cbc_encrypt(ciphertext, ks1, ks2, ks3, IV, False)
    assert decrypted == plaintext


def test_cipher_3des_cbc_matches_ede3_and_round_trips():
    key = KEY_A + KEY_B + KEY_C
    plaintext = b"datagram payload" * 2
    ciphertext = cipher_3des_cbc(plaintext, key, IV, True)
    ks = [set_key_unchecked(k) for k in (KEY_A, KEY_B, KEY_C)]
    assert ciphertext == ede3_cbc_encrypt(plaintext, *ks, IV, True)[0]
    assert cipher_3des_cbc(ciphertext, key, IV, False) == plaintext


def test_cipher_3des_cbc_rejects_weak_key():
    key = KEY_A + bytes([0x01] * 8) + KEY_C
    with pytest.raises(WeakKeyError):
        cipher_3des_cbc(b"12345678", key, IV, True)


def test_cipher_3des_cbc_rejects_bad_parity():
    key = KEY_A + KEY_B + b"\x00" * 8
    with pytest.raises(KeyParityError):
        cipher_3des_cbc(b"12345678", key, IV, True)


def test_cipher_3des_cbc_rejects_wrong_key_length():
    with pytest.raises(ValueError):
        cipher_3des_cbc(b"12345678", KEY_A + KEY_B, IV, True)


def test_block_functions_reject_wrong_sizes():
    schedule = set_key_unchecked(KEY_A)
    with pytest.raises(ValueError):
        crypt_block(b"seven!!", schedule, True)
    with pytest.raises(ValueError):
        ncbc_encrypt(b"12345678", schedule, b"shortiv", True)
    with pytest.raises(ValueError):
        crypt_block(b"12345678", schedule[:30], True)