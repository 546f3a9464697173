"""Byte stream with endian-aware encode/decode of typed values."""

import struct
from typing import List, Optional

import numpy as np

from ..constants import CPU_BIG_ENDIAN
from .formats import HEX, STRING, HEX_FORMAT, stream_format


def twos_complement(value: int, bits: int) -> int:
    """Reinterpret an unsigned integer of the given bit width as signed."""
    if value & (1 << (bits - 1)):
        return value - (1 << bits)
    return value


class ByteStream:
    """
    Positional reader/writer over a binary buffer.

    Decoding walks a cursor forward through the buffer. Encoding returns new
    bytes and never touches the buffer.
    """

    def __init__(self, data: bytes, big_endian: bool, index: int = 0,
                 diagnostics: Optional[List[str]] = None):
        """
        Initialize byte stream.

        Args:
            data: Binary data to decode from (may be empty for encoding)
            big_endian: Byte order of the data (True for big endian)
            index: Offset where decoding starts
            diagnostics: Warning list to append to (a new one if None)
        """
        self.data = bytes(data or b'')
        self.index = index
        self.diagnostics = diagnostics if diagnostics is not None else []
        self._big_endian = big_endian
        self._equal_endian = big_endian == CPU_BIG_ENDIAN
        self.format = stream_format(self._equal_endian, CPU_BIG_ENDIAN)

    @property
    def big_endian(self) -> bool:
        return self._big_endian

    @property
    def equal_endian(self) -> bool:
        """True if the data's byte order matches the host's."""
        return self._equal_endian

    def with_endian(self, big_endian: bool) -> 'ByteStream':
        """Return a stream over the same data and cursor with another byte order."""
        return ByteStream(self.data, big_endian, index=self.index,
                          diagnostics=self.diagnostics)

    def decode(self, length: int, type_code):
        """
        Decode length bytes at the cursor and advance past them.

        Args:
            length: Number of bytes to decode
            type_code: Value representation of the data

        Returns:
            Single value, list of values if several were decoded,
            or None if the data ends before index + length
        """
        if self.index + length > len(self.data):
            return None

        chunk = self.data[self.index:self.index + length]
        fmt = self._resolve(type_code)

        if fmt.kind == HEX:
            value = chunk.hex()
        elif fmt.kind == STRING:
            value = chunk.decode('latin-1').rstrip('\x00 \t\r\n\f\v')
        else:
            count = length // fmt.width
            if count * fmt.width != length:
                self.diagnostics.append(
                    f"Warning: {length} bytes is not a multiple of the {fmt.width}-byte "
                    f"element size of {type_code}; {length - count * fmt.width} trailing "
                    f"bytes ignored."
                )
            values = struct.unpack(f"{self.format.prefix}{count}{fmt.char}",
                                   chunk[:count * fmt.width])
            if fmt.sign_bits:
                values = [twos_complement(v, fmt.sign_bits) for v in values]
            value = values[0] if len(values) == 1 else list(values)

        self.skip(length)
        return value

    def encode(self, value, type_code, length: int = None) -> bytes:
        """
        Encode a value (or a sequence of values) to bytes.

        Args:
            value: Value or sequence of values
            type_code: Value representation to encode as
            length: For strings and hex, pad with NULs (or truncate) to this size

        Returns:
            Encoded bytes

        Raises:
            struct.error: If a number does not fit the element type
        """
        fmt = self._resolve(type_code)

        if fmt.kind in (HEX, STRING):
            if fmt.kind == HEX:
                encoded = bytes.fromhex(value)
            else:
                encoded = value.encode('latin-1') if isinstance(value, str) else bytes(value)
            if length is not None:
                encoded = encoded[:length].ljust(length, b'\x00')
            return encoded

        if isinstance(value, np.ndarray):
            values = value.ravel(order='K').tolist()
        elif isinstance(value, (list, tuple)):
            values = list(value)
        else:
            values = [value]
        if fmt.sign_bits:
            limit = 1 << (fmt.sign_bits - 1)
            if any(not -limit <= int(v) < limit for v in values):
                raise struct.error(f"{type_code} value out of range: {values}")
            mask = (1 << fmt.sign_bits) - 1
            values = [int(v) & mask for v in values]
        return struct.pack(f"{self.format.prefix}{len(values)}{fmt.char}", *values)

    def _resolve(self, type_code):
        fmt = self.format.resolve(type_code)
        if fmt is None:
            self.diagnostics.append(
                f"Warning: Element type {type_code} does not have a reading method "
                f"assigned to it. Decoding as hex."
            )
            return HEX_FORMAT
        return fmt

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def rest_length(self) -> int:
        """Number of bytes from the cursor to the end."""
        return len(self.data) - self.index

    @property
    def rest_string(self) -> bytes:
        """Remaining bytes from the cursor to the end."""
        return self.data[self.index:]

    def skip(self, offset: int) -> None:
        """Move the cursor forward (positive) or back (negative)."""
        self.index += offset

    def reset_index(self) -> None:
        self.index = 0

    def reset(self) -> None:
        """Clear data and cursor."""
        self.data = b''
        self.index = 0

    def set_string(self, data: bytes) -> None:
        """Replace the data and rewind the cursor."""
        self.data = bytes(data)
        self.index = 0
