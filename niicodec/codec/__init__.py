"""Codec modules for the NIfTI-1 header, extensions and voxel data."""

from .header import (
    decode_header, encode_header, default_header,
    decode_extensions, encode_extensions,
)
from .image import decode_image, encode_image, image_shape, datatype_for
from .volume import NiftiVolume

__all__ = [
    'decode_header',
    'encode_header',
    'default_header',
    'decode_extensions',
    'encode_extensions',
    'decode_image',
    'encode_image',
    'image_shape',
    'datatype_for',
    'NiftiVolume',
]
