"""Voxel data block codec."""

import logging
from functools import reduce
from operator import mul
from typing import Optional, Tuple

import numpy as np

from ..constants import DATATYPES, DTYPE_TO_DATATYPE
from ..exceptions import MalformedHeaderError, UnsupportedDatatypeError
from ..io.stream import ByteStream
from ..transform.scaling import apply_scaling, remove_scaling

log = logging.getLogger(__name__)


def image_shape(header: dict) -> tuple:
    """
    Extents dim[1..dim[0]], fastest-varying first.

    Raises:
        MalformedHeaderError: If dim[0] is not 1..7 or an extent is negative
    """
    dim = header['dim']
    rank = int(dim[0])
    if not 1 <= rank <= 7 or len(dim) < rank + 1:
        raise MalformedHeaderError("Invalid number of image dimensions",
                                   field='dim', value=dim)
    shape = tuple(int(n) for n in dim[1:rank + 1])
    if any(n < 0 for n in shape):
        raise MalformedHeaderError("Negative image extent", field='dim', value=dim)
    return shape


def _datatype_info(datatype: int):
    if datatype not in DATATYPES:
        raise UnsupportedDatatypeError(datatype)
    return DATATYPES[datatype]


def decode_image(stream: ByteStream, header: dict, offset: int = None) -> Optional[np.ndarray]:
    """
    Decode the voxel block into an N-dimensional array.

    Args:
        stream: Stream over the image data
        header: Decoded header
        offset: Where the voxel data starts in the stream; defaults to vox_offset

    Returns:
        Array of shape dim[1..dim[0]] in column-major order (float64 if
        scl_slope is set), or None if the data ends early

    Raises:
        UnsupportedDatatypeError: If datatype has no decoder
        MalformedHeaderError: If dim does not describe a valid shape
    """
    type_code, dtype, _ = _datatype_info(header['datatype'])

    stream.index = int(header['vox_offset']) if offset is None else offset
    shape = image_shape(header)
    count = reduce(mul, shape, 1)
    width = header['bitpix'] // 8
    if width != np.dtype(dtype).itemsize:
        stream.diagnostics.append(
            f"Warning: bitpix {header['bitpix']} does not match datatype "
            f"{header['datatype']}; using {np.dtype(dtype).itemsize * 8} bits."
        )
        width = np.dtype(dtype).itemsize

    values = stream.decode(count * width, type_code)
    if values is None:
        stream.diagnostics.append(
            f"Warning: Image data truncated: expected {count * width} bytes "
            f"at offset {stream.index}, found {stream.rest_length}."
        )
        return None
    if not isinstance(values, list):
        values = [values]

    raw = np.asarray(values, dtype=dtype)
    data = apply_scaling(raw, header['scl_slope'], header['scl_inter'])
    log.debug("Decoded %d voxels of datatype %d, shape %s",
              count, header['datatype'], shape)
    return data.reshape(shape, order='F')


def encode_image(image: np.ndarray, header: dict, big_endian: bool = None) -> bytes:
    """
    Encode an image array as a voxel block.

    Args:
        image: Array with the header's extents
        header: Header describing datatype and scaling
        big_endian: Byte order; defaults to header['big_endian']

    Returns:
        Encoded voxel bytes (without padding)
    """
    type_code, dtype, _ = _datatype_info(header['datatype'])
    if big_endian is None:
        big_endian = header.get('big_endian', False)

    flat = np.asarray(image).ravel(order='F')
    raw = remove_scaling(flat, header['scl_slope'], header['scl_inter'], dtype)
    return ByteStream(b'', big_endian).encode(raw, type_code)


def datatype_for(dtype) -> Tuple[int, int]:
    """Return (datatype code, bitpix) for a numpy dtype."""
    dtype = np.dtype(dtype)
    if dtype not in DTYPE_TO_DATATYPE:
        raise UnsupportedDatatypeError(str(dtype))
    code = DTYPE_TO_DATATYPE[dtype]
    return code, DATATYPES[code][2]
