"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

Seeded generation of field elements, e.g. for the coefficients of a linear
code. The generator is xoshiro256+, which is fast but NOT cryptographically
secure.
"""

import os

from fp61.field import MASK64


def generateSeed():
    """
    Generate a random 64-bit seed from the operating system's entropy source.

    Returns:
        int: The seed.
    """
    return int.from_bytes(os.urandom(8), "little")


def hashU64(x):
    """
    Mix the bits of a 64-bit integer (the splitmix64 finalizer). Used to turn
    seeds with few set bits into well distributed generator state.

    Args:
        x (int): The value to hash.

    Returns:
        int: A 64-bit hash.
    """
    x = (x + 0x9E3779B97F4A7C15) & MASK64
    x = ((x ^ (x >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
    x = ((x ^ (x >> 27)) * 0x94D049BB133111EB) & MASK64
    return x ^ (x >> 31)


def convertRandToFp(word):
    """
    Convert a random 64-bit word to a field element in [0, p - 1].

    The high 61 bits are used, since the low bits of xoshiro256+ are weak. The
    all ones pattern p is folded onto p - 1, a negligible bias.

    Args:
        word (int): A random 64-bit word.

    Returns:
        int: The field element.
    """
    fp = word >> 3
    return fp - ((fp + 1) >> 61)


def convertRandToNonzeroFp(word):
    """
    Convert a random 64-bit word to a field element in [1, p - 1]. Zero is
    folded onto 1.

    Args:
        word (int): A random 64-bit word.

    Returns:
        int: The field element.
    """
    fp = convertRandToFp(word)
    return fp if fp else 1


def _rotl(x, k):
    return ((x << k) | (x >> (64 - k))) & MASK64


class Random:
    """
    A xoshiro256+ generator of 64-bit words and field elements. Instances are
    deterministic for a given seed.
    """

    def __init__(self, seed=None):
        """
        Args:
            seed (int): Optional 64-bit seed. A random seed is drawn if omitted.
        """
        self.state = [0, 0, 0, 0]
        self.seed(generateSeed() if seed is None else seed)

    def seed(self, x):
        """
        Reset the state from a seed.

        Args:
            x (int): The seed, truncated to 64 bits.
        """
        h = x & MASK64
        for i in range(4):
            h = hashU64(h)
            self.state[i] = h

    def next(self):
        """
        Returns:
            int: The next random 64-bit word.
        """
        s0, s1, s2, s3 = self.state
        result = (s0 + s3) & MASK64
        t = (s1 << 17) & MASK64

        s2 ^= s0
        s3 ^= s1
        s1 ^= s2
        s0 ^= s3
        s2 ^= t
        s3 = _rotl(s3, 45)

        self.state = [s0, s1, s2, s3]
        return result

    def nextFp(self):
        """
        Returns:
            int: A random field element in [0, p - 1].
        """
        return convertRandToFp(self.next())

    def nextNonzeroFp(self):
        """
        Returns:
            int: A random field element in [1, p - 1].
        """
        return convertRandToNonzeroFp(self.next())

