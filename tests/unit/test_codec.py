"""
Copyright (c) 2020, the Decred developers
See LICENSE for details
"""

import logging

import pytest

from fp61 import codec
from fp61.codec import (
    ByteReader,
    ByteWriter,
    EncodingError,
    ReadResult,
    bytesToFp,
    fpToBytes,
    maxBytesNeeded,
    maxWords,
)
from fp61.field import AMBIGUITY, PRIME
from fp61.util.encode import readU64LE


def modelRead(data):
    """
    Cut the bytes into elements bit by bit, independently of ByteReader.

    Returns:
        tuple(list(int), int): The elements and the number of placeholders.
    """
    stream = int.from_bytes(data, "little")
    totalBits = len(data) * 8
    pos = 0
    packed = False
    packedBit = 0
    events = 0
    out = []
    while pos < totalBits or packed:
        if packed:
            x = (((stream >> pos) & ((1 << 60) - 1)) << 1) | packedBit
            pos += 60
        else:
            x = (stream >> pos) & PRIME
            pos += 61
        packed = x >= AMBIGUITY
        if packed:
            packedBit = int(x == PRIME)
            x = AMBIGUITY
            events += 1
        out.append(x)
    return out, events


def checkRead(data):
    words = bytesToFp(data)
    expected, events = modelRead(data)
    assert words == expected
    bits = len(data) * 8
    assert len(words) == (bits + events + 60) // 61
    assert len(words) <= maxWords(len(data))
    assert all(0 <= w < PRIME for w in words)
    return words


def checkRoundTrip(data):
    words = checkRead(data)
    writer = ByteWriter()
    for w in words:
        writer.write(w)
    total = writer.flush()
    out = writer.bytes()
    assert total == len(out)
    assert out[: len(data)] == data
    assert not any(out[len(data) :])
    assert total <= maxBytesNeeded(maxWords(len(data)))
    assert fpToBytes(words, len(data)) == data


SIMPLE = bytes(range(16))
ALL_ONES = bytes([254] + [255] * 15)
MIXED = bytes([254] + [255] * 7 + [0] + [255] * 11)


def test_first_word():
    data = bytes(range(1, 11))
    assert readU64LE(data) == 0x0807060504030201
    reader = ByteReader(data)
    result, fp = reader.readNext()
    assert result is ReadResult.Success
    assert fp == 0x0807060504030201
    # 80 bits make two elements.
    result, fp = reader.readNext()
    assert result is ReadResult.Success
    assert fp == 0x0A09 << 3
    assert reader.readNext() == (ReadResult.Empty, 0)


def test_empty():
    reader = ByteReader()
    assert reader.readNext() == (ReadResult.Empty, 0)
    reader.beginRead(b"")
    assert reader.readNext() == (ReadResult.Empty, 0)
    assert reader.readNext() == (ReadResult.Empty, 0)
    assert list(reader) == []
    assert bytesToFp(b"") == []
    assert fpToBytes([]) == b""
    assert maxWords(0) == 0


@pytest.mark.parametrize("data", [SIMPLE, ALL_ONES, MIXED, b"\xff" * 16])
def test_prefixes(data):
    for i in range(len(data) + 1):
        checkRoundTrip(data[:i])


def test_random(rng):
    for n in range(300):
        buf = bytearray()
        while len(buf) < n:
            # Occasionally inject runs of ones to force placeholders.
            if rng.randint(0, 99) <= 3:
                buf += b"\xff" * 8
            else:
                buf += rng.getrandbits(64).to_bytes(8, "little")
        checkRoundTrip(bytes(buf[:n]))


def test_placeholder_runs():
    # A zero low bit followed by ones makes a run of placeholders that all
    # resolve to p - 1.
    words, events = modelRead(ALL_ONES)
    assert words[0] == AMBIGUITY
    assert events > 1
    checkRoundTrip(ALL_ONES)

    # All ones makes a run that resolves to p. The pending bit is flushed to
    # the output before the run ends.
    data = b"\xff" * 100
    words = checkRead(data)
    assert words[:-1] == [AMBIGUITY] * (len(words) - 1)
    assert words[-1] != AMBIGUITY
    checkRoundTrip(data)


def test_maxWords():
    # Buffers of all ones reach the bound.
    for n in range(300):
        assert len(bytesToFp(b"\xff" * n)) == maxWords(n)
    for n in range(1000):
        assert maxWords(n) == (n * 8 + 59) // 60

    # A bound of ceil((8n + floor(8n / 61)) / 61) would be too small here.
    n = 46500
    assert (n * 8 + (n * 8) // 61 + 60) // 61 == 6199
    assert maxWords(n) == 6200
    assert len(bytesToFp(b"\xff" * n)) == 6200


def test_maxBytesNeeded():
    assert maxBytesNeeded(0) == 0
    assert maxBytesNeeded(1) == 8
    assert maxBytesNeeded(8) == 61
    assert maxBytesNeeded(9) == 69


def test_iteration(randBytes):
    for _ in range(20):
        data = randBytes(0, 100)
        reader = ByteReader()
        reader.beginRead(data)
        fromRead = []
        while True:
            result, fp = reader.readNext()
            if result is ReadResult.Empty:
                break
            fromRead.append(fp)
        assert list(ByteReader(data)) == fromRead


def test_reader_accepts_buffers():
    data = bytes(range(40))
    expected = bytesToFp(data)
    assert bytesToFp(bytearray(data)) == expected
    assert bytesToFp(memoryview(data)) == expected


def test_writer_errors():
    writer = ByteWriter()
    with pytest.raises(EncodingError):
        writer.write(PRIME)
    with pytest.raises(EncodingError):
        writer.write(-1)
    writer.write(5)
    assert writer.flush() == 8
    assert writer.flush() == 8
    with pytest.raises(EncodingError):
        writer.write(5)

    writer.beginWrite()
    assert writer.flush() == 0
    assert writer.bytes() == b""

    with pytest.raises(EncodingError):
        fpToBytes([1], 9)


def test_writer_dangling_placeholder(prepareLogger, caplog):
    writer = ByteWriter()
    writer.write(AMBIGUITY)
    with caplog.at_level(logging.WARNING, logger=codec.log.name):
        writer.flush()
    assert "placeholder" in caplog.text
    assert writer.bytes() == AMBIGUITY.to_bytes(8, "little")
