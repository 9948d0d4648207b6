"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

Conversion between arbitrary byte buffers and streams of field elements.

The bytes are read as a little-endian bit stream and cut into 61-bit values.
A 61-bit value can be p = 2^61 - 1 (all ones), which is not a field element,
so both p and p - 1 are emitted as the placeholder AMBIGUITY = p - 1, and the
low bit that tells them apart is carried into the next element as its bit #0.
An element following a placeholder therefore holds 60 bits of input.
"""

import enum

from fp61 import Fp61Error
from fp61.field import AMBIGUITY, PRIME
from fp61.util import helpers
from fp61.util.encode import MASK64, readBytesLE, u64ToBytesLE


log = helpers.getLogger("CODEC")


class EncodingError(Fp61Error):
    pass


class ReadResult(enum.Enum):
    Success = 0
    Empty = 1


def maxWords(n):
    """
    An upper bound on the number of elements a ByteReader produces for n
    bytes of input, for pre-sizing buffers.

    Every element carries at least 60 bits of input, and a placeholder only
    costs one extra bit, so the count never exceeds ceil(8n / 60). The bound is
    reached by buffers of all 0xFF bytes, where every element is ambiguous.

    Args:
        n (int): The number of input bytes.

    Returns:
        int: The maximum number of elements.
    """
    bits = n * 8
    return (bits + bits // 60 + 60) // 61


def maxBytesNeeded(words):
    """
    The most bytes a ByteWriter can produce for the given number of elements.

    Args:
        words (int): The number of elements.

    Returns:
        int: The maximum number of output bytes.
    """
    return (words * 61 + 7) // 8


class ByteReader:
    """
    Read a byte buffer as a finite stream of field elements.
    """

    def __init__(self, data=None):
        """
        Args:
            data (bytes-like): Optional data to begin reading immediately.
        """
        self.beginRead(b"" if data is None else data)

    def beginRead(self, data):
        """
        Bind the reader to a new buffer and reset the cursor.

        Args:
            data (bytes-like): The data to read. It is not copied, so it must
                not change while being read.
        """
        # Use a memoryview to prevent unnecessary copying.
        self.b = memoryview(data).cast("B")
        self.offset = 0
        self.remaining = len(self.b)
        # Bits not yet emitted, least significant first.
        self.workspace = 0
        # The number of valid bits in the workspace. This goes negative when
        # the final element is padded with zeros past the end of the input.
        self.available = 0

    def readNext(self):
        """
        Read the next field element.

        Returns:
            tuple(ReadResult, int): (ReadResult.Success, element) with the
                element less than p, or (ReadResult.Empty, 0) once the input is
                exhausted.
        """
        workspace = self.workspace
        available = self.available

        if available < 61:
            n = min(self.remaining, 8)
            if n == 0 and available <= 0:
                return ReadResult.Empty, 0
            if n:
                word = readBytesLE(self.b, n, self.offset)
                self.offset += n
                self.remaining -= n
                workspace |= word << available
                available += n * 8

        fp = workspace & PRIME
        workspace >>= 61
        available -= 61

        if fp >= AMBIGUITY:
            # The 60 high bits are all ones. Push the low bit back so it
            # becomes bit #0 of the next element.
            workspace = (workspace << 1) | (fp & 1)
            available += 1
            fp = AMBIGUITY

        self.workspace = workspace
        self.available = available
        return ReadResult.Success, fp

    def __iter__(self):
        while True:
            result, fp = self.readNext()
            if result is ReadResult.Empty:
                return
            yield fp


class ByteWriter:
    """
    Write a stream of field elements produced by a ByteReader back to bytes.

    An element following a placeholder only holds 60 bits of output, and its
    bit #0 supplies bit #0 of the placeholder, which was written as a zero. In
    a run of consecutive placeholders every placeholder has the same missing
    bit, and only the first of them wrote it, so a single pending bit position
    is tracked until an element that is not a placeholder arrives.
    """

    def __init__(self):
        self.beginWrite()

    def beginWrite(self):
        """
        Reset the writer and discard any output.
        """
        self.b = bytearray()
        self.workspace = 0
        self.available = 0
        # Absolute bit position of the unresolved placeholder bit, if any.
        self.pendingBit = None
        self.packed = False
        self.flushed = False

    def _putBits(self, v, nbits):
        workspace = self.workspace | (v << self.available)
        available = self.available + nbits
        while available >= 64:
            self.b += u64ToBytesLE(workspace & MASK64)
            workspace >>= 64
            available -= 64
        self.workspace = workspace
        self.available = available

    def _setBit(self, pos):
        flushedBits = len(self.b) * 8
        if pos >= flushedBits:
            self.workspace |= 1 << (pos - flushedBits)
        else:
            self.b[pos // 8] |= 1 << (pos % 8)

    def write(self, fp):
        """
        Write the next field element.

        Args:
            fp (int): The element, at most AMBIGUITY.
        """
        if self.flushed:
            raise EncodingError("write after flush")
        if fp < 0 or fp > AMBIGUITY:
            raise EncodingError(f"{fp:#x} is not a field element")

        if self.packed:
            if fp != AMBIGUITY:
                if fp & 1:
                    self._setBit(self.pendingBit)
                self.pendingBit = None
            self._putBits(fp >> 1, 60)
        else:
            if fp == AMBIGUITY:
                self.pendingBit = len(self.b) * 8 + self.available
            self._putBits(fp, 61)

        self.packed = fp == AMBIGUITY

    def flush(self):
        """
        Write out the buffered bits, rounded up to whole bytes. The output
        ends with up to 60 bits of zero padding, so callers that need the
        exact original length must track it themselves.

        Returns:
            int: The total number of bytes written.
        """
        if not self.flushed:
            if self.pendingBit is not None:
                log.warning(
                    "stream ended on a placeholder, its low bit is left clear"
                )
                self.pendingBit = None
            n = (self.available + 7) // 8
            if n > 0:
                self.b += u64ToBytesLE(self.workspace, n)
            self.workspace = 0
            self.available = 0
            self.flushed = True
        return len(self.b)

    def bytes(self):
        """
        The bytes written so far. Call flush first to include the buffered
        tail.

        Returns:
            bytes: The output.
        """
        return bytes(self.b)


def bytesToFp(data):
    """
    Convert bytes to a list of field elements.

    Args:
        data (bytes-like): The data.

    Returns:
        list(int): The elements.
    """
    return list(ByteReader(data))


def fpToBytes(words, length=None):
    """
    Convert field elements from bytesToFp back to bytes.

    Args:
        words (iterable(int)): The elements.
        length (int): Optional original length. If provided, the zero padding
            is trimmed off.

    Returns:
        bytes: The decoded data.
    """
    writer = ByteWriter()
    for fp in words:
        writer.write(fp)
    total = writer.flush()
    if length is None:
        return writer.bytes()
    if length > total:
        raise EncodingError(f"requested {length} bytes but only {total} decoded")
    return writer.bytes()[:length]
