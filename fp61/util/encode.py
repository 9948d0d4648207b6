"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

Little-endian integer <-> bytes helpers for the packing codecs.
"""

from fp61 import Fp61Error


MASK32 = (1 << 32) - 1
MASK64 = (1 << 64) - 1


def readBytesLE(b, n, offset=0):
    """
    Read n bytes, n <= 8, as a little-endian integer. Bytes past n are never
    touched, so the tail of a buffer can be read without padding.

    Args:
        b (bytes-like): The source bytes.
        n (int): The number of bytes to read, 0 to 8.
        offset (int): Index of the first byte.

    Returns:
        int: The decoded integer, 0 if n is 0.
    """
    if n < 0 or n > 8:
        raise Fp61Error(f"cannot read {n} bytes into a 64-bit word")
    if offset + n > len(b):
        raise Fp61Error(f"read of {n} bytes at {offset} overruns {len(b)} bytes")
    return int.from_bytes(b[offset : offset + n], "little")


def readU32LE(b, offset=0):
    """
    Read a 32-bit little-endian unsigned integer.

    Args:
        b (bytes-like): The source bytes.
        offset (int): Index of the first byte.

    Returns:
        int: The decoded integer.
    """
    return readBytesLE(b, 4, offset)


def readU64LE(b, offset=0):
    """
    Read a 64-bit little-endian unsigned integer.

    Args:
        b (bytes-like): The source bytes.
        offset (int): Index of the first byte.

    Returns:
        int: The decoded integer.
    """
    return readBytesLE(b, 8, offset)


def writeBytesLE(b, offset, v, n):
    """
    Write the low n bytes of v, n <= 8, into b in little-endian order.

    Args:
        b (bytearray): The destination buffer.
        offset (int): Index of the first byte.
        v (int): The value. Only the low n bytes are written.
        n (int): The number of bytes to write, 0 to 8.
    """
    if n < 0 or n > 8:
        raise Fp61Error(f"cannot write {n} bytes from a 64-bit word")
    if offset + n > len(b):
        raise Fp61Error(f"write of {n} bytes at {offset} overruns {len(b)} bytes")
    b[offset : offset + n] = (v & ((1 << (8 * n)) - 1)).to_bytes(n, "little")


def writeU64LE(b, offset, v):
    """
    Write v as a 64-bit little-endian unsigned integer.

    Args:
        b (bytearray): The destination buffer.
        offset (int): Index of the first byte.
        v (int): The value, truncated to 64 bits.
    """
    writeBytesLE(b, offset, v & MASK64, 8)


def u64ToBytesLE(v, n=8):
    """
    Encode the low n bytes of v as little-endian bytes.

    Args:
        v (int): The value.
        n (int): The output length, 0 to 8.

    Returns:
        bytearray: The encoded bytes.
    """
    b = bytearray(n)
    writeBytesLE(b, 0, v, n)
    return b
