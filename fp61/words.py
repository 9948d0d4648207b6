"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

Packing of canonical field elements, 61 bits each, with no ambiguity
handling. Used when the number of elements is known out of band, for example
the recovery data produced from elements that were already finalized.
"""

from fp61.codec import EncodingError
from fp61.field import MASK61
from fp61.util.encode import MASK64, readBytesLE, u64ToBytesLE


def wordCount(n):
    """
    The number of whole elements stored in n bytes written by a WordWriter.

    Args:
        n (int): The number of bytes.

    Returns:
        int: The number of elements.
    """
    return (n * 8) // 61


def bytesNeeded(words):
    """
    The number of bytes a WordWriter produces for the given number of
    elements.

    Args:
        words (int): The number of elements.

    Returns:
        int: The number of bytes.
    """
    return (words * 61 + 7) // 8


class WordReader:
    """
    Read back 61-bit elements written by a WordWriter. The reader does not
    detect the end of the stream on its own. Callers read exactly
    wordCount(len(data)) elements.
    """

    def __init__(self, data=None):
        self.beginRead(b"" if data is None else data)

    def beginRead(self, data):
        """
        Args:
            data (bytes-like): The packed elements.
        """
        self.b = memoryview(data).cast("B")
        self.offset = 0
        self.remaining = len(self.b)
        self.workspace = 0
        self.available = 0
        self.wordsLeft = wordCount(self.remaining)

    def read(self):
        """
        Read the next element.

        Returns:
            int: The next 61 bits of the stream.
        """
        if self.wordsLeft <= 0:
            raise EncodingError("read past the last packed word")
        self.wordsLeft -= 1

        if self.available < 61:
            n = min(self.remaining, 8)
            word = readBytesLE(self.b, n, self.offset)
            self.offset += n
            self.remaining -= n
            self.workspace |= word << self.available
            self.available += n * 8

        fp = self.workspace & MASK61
        self.workspace >>= 61
        self.available -= 61
        return fp


class WordWriter:
    """
    Pack field elements into bytes, 61 bits each.
    """

    def __init__(self):
        self.beginWrite()

    def beginWrite(self):
        self.b = bytearray()
        self.workspace = 0
        self.available = 0
        self.count = 0
        self.flushed = False

    def write(self, fp):
        """
        Args:
            fp (int): The element. Must fit in 61 bits.
        """
        if self.flushed:
            raise EncodingError("write after flush")
        if fp < 0 or fp >> 61:
            raise EncodingError(f"{fp:#x} does not fit in 61 bits")
        workspace = self.workspace | (fp << self.available)
        available = self.available + 61
        if available >= 64:
            self.b += u64ToBytesLE(workspace & MASK64)
            workspace >>= 64
            available -= 64
        self.workspace = workspace
        self.available = available
        self.count += 1

    def flush(self):
        """
        Write out the buffered bits, rounded up to whole bytes.

        Returns:
            int: The total number of bytes written.
        """
        if not self.flushed:
            n = (self.available + 7) // 8
            if n > 0:
                self.b += u64ToBytesLE(self.workspace, n)
            self.workspace = 0
            self.available = 0
            self.flushed = True
        return len(self.b)

    def bytes(self):
        """
        Returns:
            bytes: The bytes written so far.
        """
        return bytes(self.b)
