"""
Copyright (c) 2020, the Decred developers
See LICENSE for details
"""

import random

from fp61 import codec, words


SIZE = 4096


def data():
    rng = random.Random(0)
    return bytes(rng.getrandbits(8) for _ in range(SIZE))


def test_bytesToFp(benchmark):
    benchmark(codec.bytesToFp, data())


def test_bytesToFp_ones(benchmark):
    # Every element is a placeholder.
    benchmark(codec.bytesToFp, b"\xff" * SIZE)


def test_fpToBytes(benchmark):
    b = data()
    fps = codec.bytesToFp(b)
    out = benchmark(codec.fpToBytes, fps, len(b))
    assert out == b


def test_WordWriter(benchmark):
    rng = random.Random(0)
    fps = [rng.getrandbits(61) for _ in range(words.wordCount(SIZE))]

    def run():
        writer = words.WordWriter()
        for fp in fps:
            writer.write(fp)
        writer.flush()
        return writer.bytes()

    benchmark(run)


def test_WordReader(benchmark):
    b = data()
    n = words.wordCount(len(b))

    def run():
        reader = words.WordReader(b)
        return [reader.read() for _ in range(n)]

    benchmark(run)
