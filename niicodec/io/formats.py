"""Type code to pack format lookup for the byte stream."""

import functools
from types import MappingProxyType
from typing import Mapping
from dataclasses import dataclass
from enum import Enum

# Value kinds
BYTE = 'byte'
USHORT = 'ushort'
SSHORT = 'sshort'
ULONG = 'ulong'
SLONG = 'slong'
FLOAT = 'float'
DOUBLE = 'double'
HEX = 'hex'
STRING = 'string'


class TypeCode(str, Enum):
    """Closed set of value representation codes accepted by the stream."""

    BY = 'BY'    # Byte/Character (1-byte integers)
    OB = 'OB'    # Other byte string
    US = 'US'    # Unsigned short (2 bytes)
    OW = 'OW'    # Other word string
    SS = 'SS'    # Signed short (2 bytes)
    UL = 'UL'    # Unsigned long (4 bytes)
    SL = 'SL'    # Signed long (4 bytes)
    FL = 'FL'    # Floating point single (4 bytes)
    OF = 'OF'    # Other float string
    FD = 'FD'    # Floating point double (8 bytes)
    AT = 'AT'    # Tag reference
    UN = 'UN'    # Unknown information
    HEX = 'HEX'
    AE = 'AE'
    AS = 'AS'
    CS = 'CS'
    DA = 'DA'
    DS = 'DS'
    DT = 'DT'
    IS = 'IS'
    LO = 'LO'
    LT = 'LT'
    PN = 'PN'
    SH = 'SH'
    ST = 'ST'
    TM = 'TM'
    UI = 'UI'
    UT = 'UT'
    STR = 'STR'


TYPE_KINDS = {
    TypeCode.BY: BYTE,
    TypeCode.OB: BYTE,
    TypeCode.US: USHORT,
    TypeCode.OW: USHORT,
    TypeCode.SS: SSHORT,
    TypeCode.UL: ULONG,
    TypeCode.SL: SLONG,
    TypeCode.FL: FLOAT,
    TypeCode.OF: FLOAT,
    TypeCode.FD: DOUBLE,
    TypeCode.AT: HEX,
    TypeCode.UN: HEX,
    TypeCode.HEX: HEX,
    TypeCode.AE: STRING,
    TypeCode.AS: STRING,
    TypeCode.CS: STRING,
    TypeCode.DA: STRING,
    TypeCode.DS: STRING,
    TypeCode.DT: STRING,
    TypeCode.IS: STRING,
    TypeCode.LO: STRING,
    TypeCode.LT: STRING,
    TypeCode.PN: STRING,
    TypeCode.SH: STRING,
    TypeCode.ST: STRING,
    TypeCode.TM: STRING,
    TypeCode.UI: STRING,
    TypeCode.UT: STRING,
    TypeCode.STR: STRING,
}


@dataclass(frozen=True)
class FormatDescriptor:
    """
    How to (un)pack one value kind.

    Attributes:
        kind: Value kind (one of the module-level kind names)
        char: struct format character, or None for hex/string kinds
        width: Element width in bytes (1 for hex/string)
        sign_bits: Bit width for two's-complement correction, 0 if none
    """
    kind: str
    char: str = None
    width: int = 1
    sign_bits: int = 0


HEX_FORMAT = FormatDescriptor(HEX)
STRING_FORMAT = FormatDescriptor(STRING)


@dataclass(frozen=True)
class StreamFormat:
    """
    Immutable format table for one byte-order relationship.

    In native order every numeric kind uses the native struct character.
    In the other order, struct's explicit byte order is used and signed
    shorts/longs are unpacked unsigned and corrected afterwards.
    """
    equal_endian: bool
    prefix: str
    formats: Mapping

    def resolve(self, type_code):
        """
        Look up the descriptor for a type code.

        Returns:
            FormatDescriptor, or None if the code is not in TypeCode
        """
        try:
            code = TypeCode(type_code)
        except ValueError:
            return None
        return self.formats[TYPE_KINDS[code]]


@functools.lru_cache(maxsize=None)
def stream_format(equal_endian: bool, cpu_big_endian: bool) -> StreamFormat:
    """
    Build the format table for a stream.

    Args:
        equal_endian: True if the data's byte order matches the host's
        cpu_big_endian: Byte order of the host

    Returns:
        Shared, immutable StreamFormat
    """
    if equal_endian:
        prefix = '='
        formats = {
            USHORT: FormatDescriptor(USHORT, 'H', 2),
            SSHORT: FormatDescriptor(SSHORT, 'h', 2),
            ULONG: FormatDescriptor(ULONG, 'I', 4),
            SLONG: FormatDescriptor(SLONG, 'i', 4),
        }
    else:
        prefix = '<' if cpu_big_endian else '>'
        formats = {
            USHORT: FormatDescriptor(USHORT, 'H', 2),
            SSHORT: FormatDescriptor(SSHORT, 'H', 2, sign_bits=16),
            ULONG: FormatDescriptor(ULONG, 'I', 4),
            SLONG: FormatDescriptor(SLONG, 'I', 4, sign_bits=32),
        }

    # Kinds that are the same in either byte order
    formats[BYTE] = FormatDescriptor(BYTE, 'B', 1)
    formats[FLOAT] = FormatDescriptor(FLOAT, 'f', 4)
    formats[DOUBLE] = FormatDescriptor(DOUBLE, 'd', 8)
    formats[HEX] = HEX_FORMAT
    formats[STRING] = STRING_FORMAT

    return StreamFormat(equal_endian, prefix, MappingProxyType(formats))
