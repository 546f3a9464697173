"""NIfTI file reader/writer for single (.nii) and paired (.hdr/.img) layouts."""

import logging
from pathlib import Path
from typing import Optional, Tuple

from ..exceptions import NiftiError

log = logging.getLogger(__name__)

SINGLE_SUFFIX = '.nii'
HEADER_SUFFIX = '.hdr'
IMAGE_SUFFIX = '.img'


def split_paths(path) -> Tuple[Path, Optional[Path]]:
    """
    Resolve the header and image file paths for a NIfTI path.

    Args:
        path: .nii, .hdr or .img path

    Returns:
        (header path, image path); image path is None for .nii

    Raises:
        NiftiError: If the suffix is not a NIfTI suffix
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == '.gz':
        raise NiftiError(f"Compressed NIfTI files are not supported: {path}")
    if suffix == SINGLE_SUFFIX:
        return path, None
    if suffix in (HEADER_SUFFIX, IMAGE_SUFFIX):
        # Keep the case of the given suffix for the partner file
        upper = path.suffix.isupper()
        hdr = path.with_suffix(HEADER_SUFFIX.upper() if upper else HEADER_SUFFIX)
        img = path.with_suffix(IMAGE_SUFFIX.upper() if upper else IMAGE_SUFFIX)
        return hdr, img
    raise NiftiError(f"Unsupported file format: {suffix}")


def is_pair(path) -> bool:
    """True if the path names a .hdr/.img pair."""
    return split_paths(path)[1] is not None


def read_nifti_file(path, image: bool = True) -> Tuple[bytes, Optional[bytes]]:
    """
    Read a NIfTI file fully into memory.

    Args:
        path: .nii, .hdr or .img path
        image: For pairs, whether to read the .img file too

    Returns:
        (header file contents, image file contents); the second item is
        None for .nii files or when image is False
    """
    hdr_path, img_path = split_paths(path)

    with open(hdr_path, 'rb') as f:
        header_data = f.read()
    log.debug("Read %d bytes from %s", len(header_data), hdr_path)

    image_data = None
    if img_path is not None and image:
        with open(img_path, 'rb') as f:
            image_data = f.read()
        log.debug("Read %d bytes from %s", len(image_data), img_path)

    return header_data, image_data


def write_nifti_file(path, header_data: bytes, image_data: Optional[bytes] = None) -> None:
    """
    Write NIfTI contents to disk.

    Args:
        path: .nii, .hdr or .img path
        header_data: Full .nii contents, or the .hdr contents for a pair
        image_data: .img contents for a pair (ignored for .nii)
    """
    hdr_path, img_path = split_paths(path)

    with open(hdr_path, 'wb') as f:
        f.write(header_data)

    if img_path is not None:
        with open(img_path, 'wb') as f:
            f.write(image_data or b'')
    log.debug("Wrote %s", hdr_path if img_path is None else f"{hdr_path} + {img_path}")
