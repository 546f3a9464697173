"""I/O modules for the NIfTI-1 codec."""

from .stream import ByteStream, twos_complement
from .formats import TypeCode, StreamFormat, FormatDescriptor, stream_format
from .nifti_file import read_nifti_file, write_nifti_file, split_paths, is_pair

__all__ = [
    'ByteStream',
    'twos_complement',
    'TypeCode',
    'StreamFormat',
    'FormatDescriptor',
    'stream_format',
    'read_nifti_file',
    'write_nifti_file',
    'split_paths',
    'is_pair',
]
