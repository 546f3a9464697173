"""NIfTI-1 codec: endian-aware header, extension and voxel data reading and writing."""

from .codec import NiftiVolume, decode_header, encode_header, decode_image, encode_image
from .exceptions import NiftiError, MalformedHeaderError, UnsupportedDatatypeError
from .io import ByteStream

__version__ = '0.1.0'

__all__ = [
    'NiftiVolume',
    'decode_header',
    'encode_header',
    'decode_image',
    'encode_image',
    'ByteStream',
    'NiftiError',
    'MalformedHeaderError',
    'UnsupportedDatatypeError',
]
