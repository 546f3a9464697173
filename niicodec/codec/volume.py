"""NIfTI-1 volume: header, extensions and voxel data with a read/modify/write lifecycle."""

import logging
from typing import Optional, Tuple

import numpy as np

from ..constants import (
    DATATYPES, HEADER_SIZE, MAGIC_PAIR, MAGIC_SINGLE, EXTENSION_ALIGN,
    XFORM_ALIGNED_ANAT,
)
from ..exceptions import NiftiError, UnsupportedDatatypeError
from ..io.stream import ByteStream
from ..io.nifti_file import is_pair, read_nifti_file, split_paths, write_nifti_file
from ..transform.affine import get_affine, affine_to_srows
from ..transform.scaling import has_scaling
from .header import (
    decode_header, encode_header, default_header,
    decode_extensions, encode_extensions,
)
from .image import decode_image, encode_image, datatype_for

log = logging.getLogger(__name__)

# Lifecycle states
UNOPENED = 'unopened'
HEADER_PARSED = 'header_parsed'
IMAGE_LOADED = 'image_loaded'
CONSTRUCTED = 'constructed'
MODIFIED = 'modified'
WRITTEN = 'written'
CLOSED = 'closed'


class NiftiVolume:
    """
    A NIfTI-1 volume.

    Lifecycle:
        unopened -> header_parsed -> image_loaded -> (modified)* -> written
        unopened -> constructed -> (modified)* -> written
    closed is terminal.

    Attributes:
        header: Header fields as a dict (see constants.HEADER_FIELDS)
        extensions: List of {'esize', 'ecode', 'edata'} dicts
        diagnostics: Non-fatal warnings collected while decoding
        path: Source file, if read from disk
        state: Current lifecycle state
    """

    def __init__(self):
        self.header = None
        self.extensions = []
        self.diagnostics = []
        self.path = None
        self.state = UNOPENED
        self._image = None
        self._image_stream = None

    @classmethod
    def read(cls, path, image: bool = True) -> 'NiftiVolume':
        """
        Read a .nii file or a .hdr/.img pair.

        Args:
            path: File path
            image: Decode voxel data now (otherwise call load_image later)
        """
        header_data, image_data = read_nifti_file(path, image=image)
        volume = cls()
        volume.path = path
        volume._parse(header_data, image_data, image)
        log.info("Read %s (%s, dim=%s)", path, volume.header['magic'],
                 volume.header['dim'][:volume.header['dim'][0] + 1])
        return volume

    @classmethod
    def from_bytes(cls, data: bytes, image_data: bytes = None,
                   image: bool = True) -> 'NiftiVolume':
        """
        Parse a volume held in memory.

        Args:
            data: .nii contents, or .hdr contents for a pair
            image_data: .img contents for a pair
            image: Decode voxel data now
        """
        volume = cls()
        volume._parse(data, image_data, image)
        return volume

    @classmethod
    def from_array(cls, array: np.ndarray, affine: np.ndarray = None,
                   datatype: int = None) -> 'NiftiVolume':
        """
        Build a new single-file volume around an array.

        Args:
            array: Voxel data, 1 to 7 dimensions
            affine: Optional 4x4 voxel-to-world transform, stored as sform
            datatype: NIfTI datatype code; derived from array.dtype if None
        """
        volume = cls()
        volume.header = default_header()
        array = np.asarray(array)
        if datatype is not None:
            if datatype not in DATATYPES:
                raise UnsupportedDatatypeError(datatype)
            array = array.astype(DATATYPES[datatype][1])
        volume.image = array
        if affine is not None:
            volume.set_sform(affine)
        volume.state = CONSTRUCTED
        return volume

    def _parse(self, data: bytes, image_data: Optional[bytes], image: bool) -> None:
        self.header, stream = decode_header(data)
        self.diagnostics = stream.diagnostics

        single = self.header['magic'] == MAGIC_SINGLE
        limit = int(self.header['vox_offset']) if single else len(data)
        self.extensions = decode_extensions(stream, limit)

        if single:
            self._image_stream = stream
        elif image_data is not None:
            self._image_stream = ByteStream(image_data, stream.big_endian,
                                            diagnostics=self.diagnostics)
        self.state = HEADER_PARSED

        if image:
            self.load_image()

    def _check_open(self) -> None:
        if self.state == CLOSED:
            raise NiftiError("Volume is closed")

    def load_image(self) -> Optional[np.ndarray]:
        """
        Decode the voxel data.

        Returns:
            Image array, or None if the data was truncated (see diagnostics)
        """
        self._check_open()
        if self._image_stream is None:
            if self.path is not None and is_pair(self.path):
                _, img_path = split_paths(self.path)
                with open(img_path, 'rb') as f:
                    self._image_stream = ByteStream(f.read(), self.header['big_endian'],
                                                    diagnostics=self.diagnostics)
            else:
                raise NiftiError("No image data available for this volume")

        self._image = decode_image(self._image_stream, self.header)
        if self._image is not None:
            self.state = IMAGE_LOADED
        return self._image

    @property
    def image(self) -> Optional[np.ndarray]:
        """Voxel data. Assigning an array sets dim, datatype and bitpix to follow it."""
        return self._image

    @image.setter
    def image(self, array: np.ndarray) -> None:
        self._check_open()
        array = np.asarray(array)
        if not 1 <= array.ndim <= 7:
            raise ValueError(f"Expected 1 to 7 dimensions, got {array.ndim}D")

        header = self.header
        if not (has_scaling(header['scl_slope']) and header['datatype'] in DATATYPES):
            header['datatype'], header['bitpix'] = datatype_for(array.dtype)
        header['dim'] = [array.ndim] + list(array.shape) + [1] * (7 - array.ndim)

        self._image = array
        if self.state != UNOPENED:
            self.state = MODIFIED

    @property
    def big_endian(self) -> bool:
        return self.header['big_endian']

    @property
    def affine(self) -> Optional[np.ndarray]:
        """
        Voxel-to-world transform from sform, else qform.

        Returns None when neither sform_code nor qform_code is set; no
        identity matrix is substituted.
        """
        self._check_open()
        affine = get_affine(self.header)
        if affine is None:
            log.debug("No orientation: sform_code and qform_code are both 0")
        return affine

    def set_sform(self, affine: np.ndarray, code: int = XFORM_ALIGNED_ANAT) -> None:
        """Store an affine as the sform and update pixdim[1..3] to its voxel sizes."""
        self._check_open()
        affine = np.asarray(affine, dtype=np.float64)
        self.header.update(affine_to_srows(affine))
        self.header['sform_code'] = code

        zooms = np.sqrt(np.sum(affine[:3, :3] ** 2, axis=0))
        pixdim = list(self.header['pixdim'])
        pixdim[1:4] = zooms.tolist()
        self.header['pixdim'] = pixdim
        if self.state != UNOPENED:
            self.state = MODIFIED

    def to_bytes(self, big_endian: bool = None) -> bytes:
        """Serialize as a single .nii file. The volume's header is left unchanged."""
        _, header_data, _ = self._serialize(True, big_endian)
        return header_data

    def to_pair_bytes(self, big_endian: bool = None) -> Tuple[bytes, bytes]:
        """Serialize as .hdr and .img contents. The volume's header is left unchanged."""
        _, header_data, image_data = self._serialize(False, big_endian)
        return header_data, image_data

    def _serialize(self, single: bool,
                   big_endian: Optional[bool]) -> Tuple[dict, bytes, Optional[bytes]]:
        """Return the header as written plus the encoded bytes; self.header is not touched."""
        self._check_open()
        if self._image is None and self._image_stream is not None:
            self.load_image()

        header = dict(self.header)
        if big_endian is not None:
            header['big_endian'] = big_endian
        big_endian = header['big_endian']

        extension_data = encode_extensions(self.extensions, big_endian)
        if single:
            min_offset = HEADER_SIZE + len(extension_data)
            if header['magic'] != MAGIC_SINGLE or header['vox_offset'] < min_offset:
                header['vox_offset'] = float(
                    -(-min_offset // EXTENSION_ALIGN) * EXTENSION_ALIGN)
            header['magic'] = MAGIC_SINGLE
        else:
            if header['magic'] != MAGIC_PAIR:
                header['vox_offset'] = 0.0
            header['magic'] = MAGIC_PAIR

        head = encode_header(header, big_endian) + extension_data
        body = b''
        if self._image is not None:
            body = encode_image(self._image, header, big_endian)
        padding = b'\x00' * (int(header['vox_offset']) - (len(head) if single else 0))

        if single:
            return header, head + padding + body, None
        return header, head, padding + body

    def write(self, path, big_endian: bool = None) -> None:
        """
        Write to a .nii file or a .hdr/.img pair, chosen by the path's suffix.

        After writing, the header matches the file: magic, vox_offset and
        big_endian take the values that were written.

        Args:
            path: Output path
            big_endian: Byte order; defaults to the header's current order
        """
        header, header_data, image_data = self._serialize(not is_pair(path), big_endian)
        write_nifti_file(path, header_data, image_data)
        self.header = header
        self.state = WRITTEN
        log.info("Wrote %s", path)

    def close(self) -> None:
        """Release the image data and buffers."""
        self._image = None
        self._image_stream = None
        self.state = CLOSED
