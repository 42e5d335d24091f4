"""Blowfish block cipher (64-bit blocks, big-endian word order)."""

from __future__ import annotations

import struct
from functools import lru_cache

_MASK = 0xFFFFFFFF
_ROUNDS = 16
_P_WORDS = _ROUNDS + 2
_S_WORDS = 4 * 256
_KEY_WORDS = _P_WORDS + _S_WORDS  # 1042
_BLOCK = struct.Struct(">II")


@lru_cache(maxsize=1)
def _init_key() -> tuple[int, ...]:
    """Return the initial P-array and S-boxes: the hex digits of pi after the point."""
    bits = _KEY_WORDS * 32
    guard = 64
    precision = bits + guard
    one = 1 << precision

    def arctan_inv(x: int) -> int:
        term = one // x
        total = term
        x_squared = x * x
        divisor = 1
        sign = 1
        while term:
            term //= x_squared
            divisor += 2
            sign = -sign
            total += sign * (term // divisor)
        return total

    pi = 16 * arctan_inv(5) - 4 * arctan_inv(239)
    fraction = (pi - (3 << precision)) >> guard
    raw = fraction.to_bytes(_KEY_WORDS * 4, "big")
    return struct.unpack(f">{_KEY_WORDS}I", raw)


class Blowfish:
    """A Blowfish cipher keyed with a user key of any non-negative length.

    The user key is cycled over the P-array; an empty key behaves like a
    single zero byte.
    """

    def __init__(self, key: bytes | bytearray | str) -> None:
        if isinstance(key, str):
            key = key.encode("utf-8")
        key = bytes(key) or b"\x00"
        init = _init_key()
        schedule = list(init)
        length = len(key)
        j = 0
        for i in range(_P_WORDS):
            word = 0
            for _ in range(4):
                word = (word << 8) | key[j]
                j = (j + 1) % length
            schedule[i] = init[i] ^ word
        self._key = schedule
        left = right = 0
        for i in range(0, _KEY_WORDS, 2):
            left, right = self._encrypt_words(left, right)
            schedule[i] = left
            schedule[i + 1] = right

    def _f(self, x: int) -> int:
        k = self._key
        a = k[18 + (x >> 24)]
        b = k[274 + ((x >> 16) & 255)]
        c = k[530 + ((x >> 8) & 255)]
        d = k[786 + (x & 255)]
        return ((((a + b) & _MASK) ^ c) + d) & _MASK

    def _encrypt_words(self, left: int, right: int) -> tuple[int, int]:
        p = self._key
        left ^= p[0]
        for i in range(1, _ROUNDS + 1, 2):
            right ^= p[i] ^ self._f(left)
            left ^= p[i + 1] ^ self._f(right)
        return right ^ p[_ROUNDS + 1], left

    def _decrypt_words(self, left: int, right: int) -> tuple[int, int]:
        p = self._key
        left ^= p[_ROUNDS + 1]
        for i in range(_ROUNDS, 0, -2):
            right ^= p[i] ^ self._f(left)
            left ^= p[i - 1] ^ self._f(right)
        return right ^ p[0], left

    @staticmethod
    def _unpack(block: bytes | bytearray) -> tuple[int, int]:
        if len(block) != _BLOCK.size:
            raise ValueError(f"block must be {_BLOCK.size} bytes, got {len(block)}")
        return _BLOCK.unpack(bytes(block))

    def encrypt_block(self, block: bytes | bytearray) -> bytes:
        """Encrypt one 8-byte block."""
        return _BLOCK.pack(*self._encrypt_words(*self._unpack(block)))

    def decrypt_block(self, block: bytes | bytearray) -> bytes:
        """Decrypt one 8-byte block."""
        return _BLOCK.pack(*self._decrypt_words(*self._unpack(block)))