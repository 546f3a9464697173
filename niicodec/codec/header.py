"""NIfTI-1 header and extension block codec."""

import logging
import struct
from typing import List, Tuple

from ..constants import (
    HEADER_SIZE, HEADER_FIELDS, ARRAY_FIELDS, VALID_MAGIC, MAGIC_SINGLE,
    MIN_VOX_OFFSET, EXTENDER_SIZE, EXTENSION_ALIGN, DEFAULT_XYZT_UNITS,
)
from ..exceptions import MalformedHeaderError
from ..io.stream import ByteStream

log = logging.getLogger(__name__)


def decode_header(data: bytes, big_endian: bool = False) -> Tuple[dict, ByteStream]:
    """
    Decode the fixed 348-byte header.

    The byte order is sniffed from sizeof_hdr: if the first attempt does not
    yield 348, the other byte order is tried once.

    Args:
        data: File contents (at least the header)
        big_endian: Byte order to try first

    Returns:
        (header dict, stream positioned just after the header)

    Raises:
        MalformedHeaderError: If sizeof_hdr is wrong in both byte orders,
            or the magic string is not 'ni1'/'n+1'
    """
    stream = ByteStream(data, big_endian)
    sizeof_hdr = stream.decode(4, 'SL')

    if sizeof_hdr != HEADER_SIZE:
        stream = stream.with_endian(not big_endian)
        stream.reset_index()
        sizeof_hdr = stream.decode(4, 'SL')
        if sizeof_hdr != HEADER_SIZE:
            raise MalformedHeaderError(
                "Not a NIfTI-1 file: header size is not 348 in either byte order",
                field='sizeof_hdr', value=sizeof_hdr
            )
        stream.diagnostics.append(
            f"Notice: Header is {'big' if stream.big_endian else 'little'} endian; "
            f"byte order was switched while reading."
        )
        log.debug("Switched header byte order to %s endian",
                  'big' if stream.big_endian else 'little')

    header = {'sizeof_hdr': sizeof_hdr}
    for name, length, type_code in HEADER_FIELDS[1:]:
        value = stream.decode(length, type_code)
        if value is None:
            raise MalformedHeaderError(
                f"Header truncated at field '{name}'", field='length', value=len(data)
            )
        if name in ARRAY_FIELDS and not isinstance(value, list):
            value = [value]
        header[name] = value

    if header['magic'] not in VALID_MAGIC:
        raise MalformedHeaderError("Invalid NIfTI-1 magic string",
                                   field='magic', value=header['magic'])

    if header['magic'] == MAGIC_SINGLE and header['vox_offset'] < MIN_VOX_OFFSET:
        stream.diagnostics.append(
            f"Warning: vox_offset {header['vox_offset']} is smaller than "
            f"{MIN_VOX_OFFSET} in a single-file NIfTI."
        )

    header['big_endian'] = stream.big_endian
    return header, stream


def encode_header(header: dict, big_endian: bool = None) -> bytes:
    """
    Encode a header dict to 348 bytes.

    Args:
        header: Header fields (as returned by decode_header or default_header)
        big_endian: Byte order to write; defaults to header['big_endian']

    Returns:
        348-byte header

    Raises:
        MalformedHeaderError: If a field has the wrong number of elements
            or a value does not fit its type
    """
    if big_endian is None:
        big_endian = header.get('big_endian', False)
    stream = ByteStream(b'', big_endian)

    parts = [stream.encode(HEADER_SIZE, 'SL')]
    for name, length, type_code in HEADER_FIELDS[1:]:
        value = header[name]
        try:
            if type_code == 'STR':
                part = stream.encode(value, type_code, length=length)
            else:
                part = stream.encode(value, type_code)
        except struct.error as e:
            raise MalformedHeaderError(f"Header field '{name}' cannot be encoded: {e}",
                                       field=name, value=value) from e
        if len(part) != length:
            raise MalformedHeaderError(
                f"Header field '{name}' encodes to {len(part)} bytes, expected {length}",
                field=name, value=value
            )
        parts.append(part)

    return b''.join(parts)


def default_header() -> dict:
    """Return a header for a new single-file volume with no orientation."""
    return {
        'sizeof_hdr': HEADER_SIZE,
        'data_type': '',
        'db_name': '',
        'extents': 0,
        'session_error': 0,
        'regular': ord('r'),
        'dim_info': 0,
        'dim': [0, 1, 1, 1, 1, 1, 1, 1],
        'intent_p1': 0.0,
        'intent_p2': 0.0,
        'intent_p3': 0.0,
        'intent_code': 0,
        'datatype': 0,
        'bitpix': 0,
        'slice_start': 0,
        'pixdim': [1.0] * 8,
        'vox_offset': float(MIN_VOX_OFFSET),
        'scl_slope': 0.0,
        'scl_inter': 0.0,
        'slice_end': 0,
        'slice_code': 0,
        'xyzt_units': DEFAULT_XYZT_UNITS,
        'cal_max': 0.0,
        'cal_min': 0.0,
        'slice_duration': 0.0,
        'toffset': 0.0,
        'glmax': 0,
        'glmin': 0,
        'descrip': '',
        'aux_file': '',
        'qform_code': 0,
        'sform_code': 0,
        'quatern_b': 0.0,
        'quatern_c': 0.0,
        'quatern_d': 0.0,
        'qoffset_x': 0.0,
        'qoffset_y': 0.0,
        'qoffset_z': 0.0,
        'srow_x': [0.0, 0.0, 0.0, 0.0],
        'srow_y': [0.0, 0.0, 0.0, 0.0],
        'srow_z': [0.0, 0.0, 0.0, 0.0],
        'intent_name': '',
        'magic': MAGIC_SINGLE,
        'big_endian': False,
    }


def decode_extensions(stream: ByteStream, limit: int) -> List[dict]:
    """
    Decode the extender bytes and any extensions following the header.

    Args:
        stream: Stream positioned right after the 348-byte header
        limit: Offset where extensions must end (vox_offset, or file length)

    Returns:
        List of {'esize', 'ecode', 'edata'} dicts (empty if none)
    """
    extender = stream.decode(EXTENDER_SIZE, 'BY')
    if extender is None or extender[0] == 0:
        return []

    extensions = []
    while stream.index + 8 <= limit:
        start = stream.index
        esize = stream.decode(4, 'SL')
        ecode = stream.decode(4, 'SL')
        if esize is None or ecode is None:
            break
        if esize < 8 or start + esize > limit:
            stream.diagnostics.append(
                f"Warning: Extension at offset {start} has invalid size {esize}; "
                f"remaining extensions skipped."
            )
            break
        edata = stream.data[stream.index:start + esize]
        stream.skip(esize - 8)
        extensions.append({'esize': esize, 'ecode': ecode, 'edata': edata})

    return extensions


def encode_extensions(extensions: List[dict], big_endian: bool) -> bytes:
    """
    Encode the extender bytes and extensions.

    Each esize is computed from the extension's data, padded with NULs to
    a multiple of 16. The given dicts are not modified.

    Returns:
        Bytes to place directly after the header
    """
    stream = ByteStream(b'', big_endian)
    if not extensions:
        return stream.encode([0, 0, 0, 0], 'BY')

    parts = [stream.encode([1, 0, 0, 0], 'BY')]
    for ext in extensions:
        edata = bytes(ext['edata'])
        esize = -(-(len(edata) + 8) // EXTENSION_ALIGN) * EXTENSION_ALIGN
        parts.append(stream.encode([esize, ext['ecode']], 'SL'))
        parts.append(edata.ljust(esize - 8, b'\x00'))
    return b''.join(parts)
