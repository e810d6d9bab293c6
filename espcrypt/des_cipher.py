"""DES and triple-DES block encryption and CBC mode."""

from __future__ import annotations

import struct
from collections.abc import Callable, Sequence

from .des_key import KeySchedule, _perm_op, _rotate, set_key_checked

BLOCK_SIZE = 8
_MASK32 = 0xFFFFFFFF

_SP_TRANS = (
    (
        # nibble 0
        0x02080800, 0x00080000, 0x02000002, 0x02080802,
        0x02000000, 0x00080802, 0x00080002, 0x02000002,
        0x00080802, 0x02080800, 0x02080000, 0x00000802,
        0x02000802, 0x02000000, 0x00000000, 0x00080002,
        0x00080000, 0x00000002, 0x02000800, 0x00080800,
        0x02080802, 0x02080000, 0x00000802, 0x02000800,
        0x00000002, 0x00000800, 0x00080800, 0x02080002,
        0x00000800, 0x02000802, 0x02080002, 0x00000000,
        0x00000000, 0x02080802, 0x02000800, 0x00080002,
        0x02080800, 0x00080000, 0x00000802, 0x02000800,
        0x02080002, 0x00000800, 0x00080800, 0x02000002,
        0x00080802, 0x00000002, 0x02000002, 0x02080000,
        0x02080802, 0x00080800, 0x02080000, 0x02000802,
        0x02000000, 0x00000802, 0x00080002, 0x00000000,
        0x00080000, 0x02000000, 0x02000802, 0x02080800,
        0x00000002, 0x02080002, 0x00000800, 0x00080802,
    ),
    (
        # nibble 1
        0x40108010, 0x00000000, 0x00108000, 0x40100000,
        0x40000010, 0x00008010, 0x40008000, 0x00108000,
        0x00008000, 0x40100010, 0x00000010, 0x40008000,
        0x00100010, 0x40108000, 0x40100000, 0x00000010,
        0x00100000, 0x40008010, 0x40100010, 0x00008000,
        0x00108010, 0x40000000, 0x00000000, 0x00100010,
        0x40008010, 0x00108010, 0x40108000, 0x40000010,
        0x40000000, 0x00100000, 0x00008010, 0x40108010,
        0x00100010, 0x40108000, 0x40008000, 0x00108010,
        0x40108010, 0x00100010, 0x40000010, 0x00000000,
        0x40000000, 0x00008010, 0x00100000, 0x40100010,
        0x00008000, 0x40000000, 0x00108010, 0x40008010,
        0x40108000, 0x00008000, 0x00000000, 0x40000010,
        0x00000010, 0x40108010, 0x00108000, 0x40100000,
        0x40100010, 0x00100000, 0x00008010, 0x40008000,
        0x40008010, 0x00000010, 0x40100000, 0x00108000,
    ),
    (
        # nibble 2
        0x04000001, 0x04040100, 0x00000100, 0x04000101,
        0x00040001, 0x04000000, 0x04000101, 0x00040100,
        0x04000100, 0x00040000, 0x04040000, 0x00000001,
        0x04040101, 0x00000101, 0x00000001, 0x04040001,
        0x00000000, 0x00040001, 0x04040100, 0x00000100,
        0x00000101, 0x04040101, 0x00040000, 0x04000001,
        0x04040001, 0x04000100, 0x00040101, 0x04040000,
        0x00040100, 0x00000000, 0x04000000, 0x00040101,
        0x04040100, 0x00000100, 0x00000001, 0x00040000,
        0x00000101, 0x00040001, 0x04040000, 0x04000101,
        0x00000000, 0x04040100, 0x00040100, 0x04040001,
        0x00040001, 0x04000000, 0x04040101, 0x00000001,
        0x00040101, 0x04000001, 0x04000000, 0x04040101,
        0x00040000, 0x04000100, 0x04000101, 0x00040100,
        0x04000100, 0x00000000, 0x04040001, 0x00000101,
        0x04000001, 0x00040101, 0x00000100, 0x04040000,
    ),
    (
        # nibble 3
        0x00401008, 0x10001000, 0x00000008, 0x10401008,
        0x00000000, 0x10400000, 0x10001008, 0x00400008,
        0x10401000, 0x10000008, 0x10000000, 0x00001008,
        0x10000008, 0x00401008, 0x00400000, 0x10000000,
        0x10400008, 0x00401000, 0x00001000, 0x00000008,
        0x00401000, 0x10001008, 0x10400000, 0x00001000,
        0x00001008, 0x00000000, 0x00400008, 0x10401000,
        0x10001000, 0x10400008, 0x10401008, 0x00400000,
        0x10400008, 0x00001008, 0x00400000, 0x10000008,
        0x00401000, 0x10001000, 0x00000008, 0x10400000,
        0x10001008, 0x00000000, 0x00001000, 0x00400008,
        0x00000000, 0x10400008, 0x10401000, 0x00001000,
        0x10000000, 0x10401008, 0x00401008, 0x00400000,
        0x10401008, 0x00000008, 0x10001000, 0x00401008,
        0x00400008, 0x00401000, 0x10400000, 0x10001008,
        0x00001008, 0x10000000, 0x10000008, 0x10401000,
    ),
    (
        # nibble 4
        0x08000000, 0x00010000, 0x00000400, 0x08010420,
        0x08010020, 0x08000400, 0x00010420, 0x08010000,
        0x00010000, 0x00000020, 0x08000020, 0x00010400,
        0x08000420, 0x08010020, 0x08010400, 0x00000000,
        0x00010400, 0x08000000, 0x00010020, 0x00000420,
        0x08000400, 0x00010420, 0x00000000, 0x08000020,
        0x00000020, 0x08000420, 0x08010420, 0x00010020,
        0x08010000, 0x00000400, 0x00000420, 0x08010400,
        0x08010400, 0x08000420, 0x00010020, 0x08010000,
        0x00010000, 0x00000020, 0x08000020, 0x08000400,
        0x08000000, 0x00010400, 0x08010420, 0x00000000,
        0x00010420, 0x08000000, 0x00000400, 0x00010020,
        0x08000420, 0x00000400, 0x00000000, 0x08010420,
        0x08010020, 0x08010400, 0x00000420, 0x00010000,
        0x00010400, 0x08010020, 0x08000400, 0x00000420,
        0x00000020, 0x00010420, 0x08010000, 0x08000020,
    ),
    (
        # nibble 5
        0x80000040, 0x00200040, 0x00000000, 0x80202000,
        0x00200040, 0x00002000, 0x80002040, 0x00200000,
        0x00002040, 0x80202040, 0x00202000, 0x80000000,
        0x80002000, 0x80000040, 0x80200000, 0x00202040,
        0x00200000, 0x80002040, 0x80200040, 0x00000000,
        0x00002000, 0x00000040, 0x80202000, 0x80200040,
        0x80202040, 0x80200000, 0x80000000, 0x00002040,
        0x00000040, 0x00202000, 0x00202040, 0x80002000,
        0x00002040, 0x80000000, 0x80002000, 0x00202040,
        0x80202000, 0x00200040, 0x00000000, 0x80002000,
        0x80000000, 0x00002000, 0x80200040, 0x00200000,
        0x00200040, 0x80202040, 0x00202000, 0x00000040,
        0x80202040, 0x00202000, 0x00200000, 0x80002040,
        0x80000040, 0x80200000, 0x00202040, 0x00000000,
        0x00002000, 0x80000040, 0x80002040, 0x80202000,
        0x80200000, 0x00002040, 0x00000040, 0x80200040,
    ),
    (
        # nibble 6
        0x00004000, 0x00000200, 0x01000200, 0x01000004,
        0x01004204, 0x00004004, 0x00004200, 0x00000000,
        0x01000000, 0x01000204, 0x00000204, 0x01004000,
        0x00000004, 0x01004200, 0x01004000, 0x00000204,
        0x01000204, 0x00004000, 0x00004004, 0x01004204,
        0x00000000, 0x01000200, 0x01000004, 0x00004200,
        0x01004004, 0x00004204, 0x01004200, 0x00000004,
        0x00004204, 0x01004004, 0x00000200, 0x01000000,
        0x00004204, 0x01004000, 0x01004004, 0x00000204,
        0x00004000, 0x00000200, 0x01000000, 0x01004004,
        0x01000204, 0x00004204, 0x00004200, 0x00000000,
        0x00000200, 0x01000004, 0x00000004, 0x01000200,
        0x00000000, 0x01000204, 0x01000200, 0x00004200,
        0x00000204, 0x00004000, 0x01004204, 0x01000000,
        0x01004200, 0x00000004, 0x00004004, 0x01004204,
        0x01000004, 0x01004200, 0x01004000, 0x00004004,
    ),
    (
        # nibble 7
        0x20800080, 0x20820000, 0x00020080, 0x00000000,
        0x20020000, 0x00800080, 0x20800000, 0x20820080,
        0x00000080, 0x20000000, 0x00820000, 0x00020080,
        0x00820080, 0x20020080, 0x20000080, 0x20800000,
        0x00020000, 0x00820080, 0x00800080, 0x20020000,
        0x20820080, 0x20000080, 0x00000000, 0x00820000,
        0x20000000, 0x00800000, 0x20020080, 0x20800080,
        0x00800000, 0x00020000, 0x20820000, 0x00000080,
        0x00800000, 0x00020000, 0x20000080, 0x20820080,
        0x00020080, 0x20000000, 0x00000000, 0x00820000,
        0x20800080, 0x20020080, 0x20020000, 0x00800080,
        0x20820000, 0x00000080, 0x00800080, 0x20020000,
        0x20820080, 0x00800000, 0x20800000, 0x20000080,
        0x00820000, 0x00020080, 0x20020080, 0x20800000,
        0x00000080, 0x20820000, 0x00820080, 0x00000000,
        0x20000000, 0x20800080, 0x00020000, 0x00820080,
    ),
)

Block = bytes | bytearray | memoryview
_BlockFn = Callable[[bytes], bytes]


def _as_block(block: Block, what: str = "block") -> bytes:
    data = bytes(block)
    if len(data) != BLOCK_SIZE:
        raise ValueError(f"DES {what} must be {BLOCK_SIZE} bytes, got {len(data)}")
    return data


def _as_schedule(schedule: Sequence[int]) -> KeySchedule:
    words = tuple(schedule)
    if len(words) != 32:
        raise ValueError(f"DES key schedule must have 32 words, got {len(words)}")
    return words


def _ip(l: int, r: int) -> tuple[int, int]:
    r, l = _perm_op(r, l, 4, 0x0F0F0F0F)
    l, r = _perm_op(l, r, 16, 0x0000FFFF)
    r, l = _perm_op(r, l, 2, 0x33333333)
    l, r = _perm_op(l, r, 8, 0x00FF00FF)
    r, l = _perm_op(r, l, 1, 0x55555555)
    return l, r


def _fp(l: int, r: int) -> tuple[int, int]:
    l, r = _perm_op(l, r, 1, 0x55555555)
    r, l = _perm_op(r, l, 8, 0x00FF00FF)
    l, r = _perm_op(l, r, 2, 0x33333333)
    r, l = _perm_op(r, l, 16, 0x0000FFFF)
    l, r = _perm_op(l, r, 4, 0x0F0F0F0F)
    return l, r


def _round(value: int, schedule: KeySchedule, index: int) -> int:
    sp = _SP_TRANS
    u = value ^ schedule[index]
    t = _rotate(value ^ schedule[index + 1], 4)
    return (
        sp[0][(u >> 2) & 0x3F]
        ^ sp[2][(u >> 10) & 0x3F]
        ^ sp[4][(u >> 18) & 0x3F]
        ^ sp[6][(u >> 26) & 0x3F]
        ^ sp[1][(t >> 2) & 0x3F]
        ^ sp[3][(t >> 10) & 0x3F]
        ^ sp[5][(t >> 18) & 0x3F]
        ^ sp[7][(t >> 26) & 0x3F]
    )


def _crypt2(d0: int, d1: int, schedule: KeySchedule, encrypt: bool) -> tuple[int, int]:
    """Sixteen DES rounds without the initial and final permutations."""
    r = _rotate(d0, 29)
    l = _rotate(d1, 29)
    if encrypt:
        pairs = ((i, i + 2) for i in range(0, 32, 4))
    else:
        pairs = ((i, i - 2) for i in range(30, 0, -4))
    for first, second in pairs:
        l ^= _round(r, schedule, first)
        r ^= _round(l, schedule, second)
    return _rotate(l, 3), _rotate(r, 3)


def _crypt1(d0: int, d1: int, schedule: KeySchedule, encrypt: bool) -> tuple[int, int]:
    a, b = _ip(d0, d1)
    l, r = _crypt2(a, b, schedule, encrypt)
    r, l = _fp(r, l)
    return l, r


def crypt_block(block: Block, schedule: Sequence[int], encrypt: bool = True) -> bytes:
    """Encrypt or decrypt one 8-byte block with single DES."""
    d0, d1 = struct.unpack("<II", _as_block(block))
    return struct.pack("<II", *_crypt1(d0, d1, _as_schedule(schedule), encrypt))


def _crypt3(
    block: Block,
    steps: tuple[tuple[KeySchedule, bool], ...],
) -> bytes:
    d0, d1 = struct.unpack("<II", _as_block(block))
    d0, d1 = _ip(d0, d1)
    for schedule, encrypt in steps:
        d0, d1 = _crypt2(d0, d1, schedule, encrypt)
    r, l = _fp(d1, d0)
    return struct.pack("<II", l, r)


def encrypt3_block(
    block: Block, ks1: Sequence[int], ks2: Sequence[int], ks3: Sequence[int]
) -> bytes:
    """Encrypt one block with triple DES (encrypt-decrypt-encrypt)."""
    return _crypt3(
        block,
        ((_as_schedule(ks1), True), (_as_schedule(ks2), False), (_as_schedule(ks3), True)),
    )


def decrypt3_block(
    block: Block, ks1: Sequence[int], ks2: Sequence[int], ks3: Sequence[int]
) -> bytes:
    """Decrypt one block with triple DES, the inverse of encrypt3_block."""
    return _crypt3(
        block,
        ((_as_schedule(ks3), False), (_as_schedule(ks2), True), (_as_schedule(ks1), False)),
    )


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


def _cbc(
    data: Block,
    iv: Block,
    block_encrypt: _BlockFn,
    block_decrypt: _BlockFn,
    encrypt: bool,
) -> tuple[bytes, bytes]:
    payload = bytes(data)
    chain = _as_block(iv, "IV")
    out = bytearray()
    if encrypt:
        for start in range(0, len(payload), BLOCK_SIZE):
            block = payload[start:start + BLOCK_SIZE].ljust(BLOCK_SIZE, b"\0")
            chain = block_encrypt(_xor(block, chain))
            out += chain
    else:
        if len(payload) % BLOCK_SIZE:
            raise ValueError(
                f"ciphertext length must be a multiple of {BLOCK_SIZE}, got {len(payload)}"
            )
        for start in range(0, len(payload), BLOCK_SIZE):
            block = payload[start:start + BLOCK_SIZE]
            out += _xor(block_decrypt(block), chain)
            chain = block
    return bytes(out), chain


def ncbc_encrypt(
    data: Block, schedule: Sequence[int], iv: Block, encrypt: bool = True
) -> tuple[bytes, bytes]:
    """DES in CBC mode.

    Returns the output and the IV for the next call (the last ciphertext
    block). A trailing partial block is zero-padded on encryption.
    """
    words = _as_schedule(schedule)
    return _cbc(
        data,
        iv,
        lambda block: crypt_block(block, words, True),
        lambda block: crypt_block(block, words, False),
        encrypt,
    )


def ede3_cbc_encrypt(
    data: Block,
    ks1: Sequence[int],
    ks2: Sequence[int],
    ks3: Sequence[int],
    iv: Block,
    encrypt: bool = True,
) -> tuple[bytes, bytes]:
    """Triple DES in CBC mode; returns the output and the next IV."""
    k1, k2, k3 = _as_schedule(ks1), _as_schedule(ks2), _as_schedule(ks3)
    return _cbc(
        data,
        iv,
        lambda block: encrypt3_block(block, k1, k2, k3),
        lambda block: decrypt3_block(block, k1, k2, k3),
        encrypt,
    )


def cipher_3des_cbc(text: Block, key: Block, iv: Block, encrypt: bool = True) -> bytes:
    """Encrypt or decrypt with 3DES-CBC using a 24-byte key.

    Each 8-byte part of the key is checked; a bad part raises
    KeyParityError or WeakKeyError.
    """
    key_bytes = bytes(key)
    if len(key_bytes) != 3 * BLOCK_SIZE:
        raise ValueError(f"3DES key must be {3 * BLOCK_SIZE} bytes, got {len(key_bytes)}")
    ks1, ks2, ks3 = (
        set_key_checked(key_bytes[i:i + BLOCK_SIZE]) for i in range(0, 24, BLOCK_SIZE)
    )
    output, _ = ede3_cbc_encrypt(text, ks1, ks2, ks3, iv, encrypt)
    return output