"""MD5 message digest (RFC 1321) and HMAC-MD5 (RFC 2104)."""

from __future__ import annotations

import struct

DIGEST_SIZE = 16
BLOCK_SIZE = 64
_MASK32 = 0xFFFFFFFF

_INIT_STATE = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)

_K = (
    0xD76AA478, 0xE8C7B756, 0x242070DB, 0xC1BDCEEE,
    0xF57C0FAF, 0x4787C62A, 0xA8304613, 0xFD469501,
    0x698098D8, 0x8B44F7AF, 0xFFFF5BB1, 0x895CD7BE,
    0x6B901122, 0xFD987193, 0xA679438E, 0x49B40821,
    0xF61E2562, 0xC040B340, 0x265E5A51, 0xE9B6C7AA,
    0xD62F105D, 0x02441453, 0xD8A1E681, 0xE7D3FBC8,
    0x21E1CDE6, 0xC33707D6, 0xF4D50D87, 0x455A14ED,
    0xA9E3E905, 0xFCEFA3F8, 0x676F02D9, 0x8D2A4C8A,
    0xFFFA3942, 0x8771F681, 0x6D9D6122, 0xFDE5380C,
    0xA4BEEA44, 0x4BDECFA9, 0xF6BB4B60, 0xBEBFBC70,
    0x289B7EC6, 0xEAA127FA, 0xD4EF3085, 0x04881D05,
    0xD9D4D039, 0xE6DB99E5, 0x1FA27CF8, 0xC4AC5665,
    0xF4292244, 0x432AFF97, 0xAB9423A7, 0xFC93A039,
    0x655B59C3, 0x8F0CCC92, 0xFFEFF47D, 0x85845DD1,
    0x6FA87E4F, 0xFE2CE6E0, 0xA3014314, 0x4E0811A1,
    0xF7537E82, 0xBD3AF235, 0x2AD7D2BB, 0xEB86D391,
)

_SHIFTS = (
    (7, 12, 17, 22),
    (5, 9, 14, 20),
    (4, 11, 16, 23),
    (6, 10, 15, 21),
)


def _rotl(value: int, n: int) -> int:
    return ((value << n) | (value >> (32 - n))) & _MASK32


def _mix(step: int, b: int, c: int, d: int) -> tuple[int, int]:
    """Return the round function value and the message word index for a step."""
    rnd, i = divmod(step, 16)
    if rnd == 0:
        return ((c ^ d) & b) ^ d, i
    if rnd == 1:
        return ((b ^ c) & d) ^ c, (5 * i + 1) % 16
    if rnd == 2:
        return b ^ c ^ d, (3 * i + 5) % 16
    return ((~d & _MASK32) | b) ^ c, (7 * i) % 16


def _compress(state: tuple[int, int, int, int], block: bytes) -> tuple[int, int, int, int]:
    x = struct.unpack("<16I", block)
    a, b, c, d = state
    for step in range(64):
        f, g = _mix(step, b, c, d)
        tmp = (a + f + _K[step] + x[g]) & _MASK32
        shift = _SHIFTS[step // 16][step % 4]
        a, d, c, b = d, c, b, (b + _rotl(tmp, shift)) & _MASK32
    return (
        (state[0] + a) & _MASK32,
        (state[1] + b) & _MASK32,
        (state[2] + c) & _MASK32,
        (state[3] + d) & _MASK32,
    )


class Md5Context:
    """Incremental MD5 computation.

    ``a``..``d`` hold the chaining state, ``nl``/``nh`` the low and high
    words of the message length in bits.
    """

    __slots__ = ("a", "b", "c", "d", "nl", "nh", "_buffer")

    def __init__(self) -> None:
        self.a, self.b, self.c, self.d = _INIT_STATE
        self.nl = 0
        self.nh = 0
        self._buffer = bytearray()

    @property
    def num(self) -> int:
        """Number of bytes waiting in the partial block."""
        return len(self._buffer)

    @property
    def data(self) -> tuple[int, ...]:
        """The partial block as sixteen little-endian words, zero-filled."""
        return struct.unpack("<16I", bytes(self._buffer).ljust(BLOCK_SIZE, b"\0"))

    @property
    def state(self) -> tuple[int, int, int, int]:
        return self.a, self.b, self.c, self.d

    def _set_state(self, state: tuple[int, int, int, int]) -> None:
        self.a, self.b, self.c, self.d = state

    def update(self, data: bytes | bytearray | memoryview) -> None:
        """Feed more message bytes into the digest."""
        chunk = bytes(data)
        if not chunk:
            return
        length = len(chunk)
        low = (self.nl + (length << 3)) & _MASK32
        if low < self.nl:
            self.nh += 1
        self.nh = (self.nh + (length >> 29)) & _MASK32
        self.nl = low

        buffer = self._buffer
        buffer += chunk
        full = len(buffer) - len(buffer) % BLOCK_SIZE
        state = self.state
        for start in range(0, full, BLOCK_SIZE):
            state = _compress(state, bytes(buffer[start:start + BLOCK_SIZE]))
        self._set_state(state)
        del buffer[:full]

    def transform(self, block: bytes | bytearray | memoryview) -> None:
        """Run the compression function on one 64-byte block.

        Neither the length counters nor the pending partial block change.
        """
        raw = bytes(block)
        if len(raw) != BLOCK_SIZE:
            raise ValueError(f"MD5 block must be {BLOCK_SIZE} bytes, got {len(raw)}")
        self._set_state(_compress(self.state, raw))

    def final(self) -> bytes:
        """Pad the message, finish the digest and return its 16 bytes.

        The pending block is consumed; the context is not meant to be fed
        further afterwards.
        """
        tail = bytes(self._buffer) + b"\x80"
        if len(tail) > BLOCK_SIZE - 8:
            tail = tail.ljust(BLOCK_SIZE, b"\0")
            self._set_state(_compress(self.state, tail))
            tail = b""
        tail = tail.ljust(BLOCK_SIZE - 8, b"\0") + struct.pack("<II", self.nl, self.nh)
        self._set_state(_compress(self.state, tail))
        self._buffer.clear()
        return struct.pack("<4I", *self.state)

    def copy(self) -> Md5Context:
        """Return an independent copy of this context."""
        other = Md5Context()
        other._set_state(self.state)
        other.nl = self.nl
        other.nh = self.nh
        other._buffer = bytearray(self._buffer)
        return other


def md5(data: bytes | bytearray | memoryview) -> bytes:
    """Return the MD5 digest of ``data``."""
    context = Md5Context()
    context.update(data)
    return context.final()


def hmac_md5(text: bytes | bytearray | memoryview, key: bytes | bytearray | memoryview) -> bytes:
    """Return the HMAC-MD5 of ``text`` under ``key`` (RFC 2104)."""
    key_bytes = bytes(key)
    if len(key_bytes) > BLOCK_SIZE:
        key_bytes = md5(key_bytes)
    padded = key_bytes.ljust(BLOCK_SIZE, b"\0")
    k_ipad = bytes(b ^ 0x36 for b in padded)
    k_opad = bytes(b ^ 0x5C for b in padded)

    inner = Md5Context()
    inner.update(k_ipad)
    inner.update(text)
    inner_digest = inner.final()

    outer = Md5Context()
    outer.update(k_opad)
    outer.update(inner_digest)
    return outer.final()