"""Constants for the NIfTI-1 codec."""

import sys

import numpy as np

# Byte order of the running interpreter (True for big endian)
CPU_BIG_ENDIAN = sys.byteorder == 'big'

# Header size is fixed for NIfTI-1, regardless of byte order
HEADER_SIZE = 348

# Accepted magic strings (trailing NUL is stripped on decode)
MAGIC_PAIR = 'ni1'     # .hdr/.img pair
MAGIC_SINGLE = 'n+1'   # single .nii file
VALID_MAGIC = (MAGIC_PAIR, MAGIC_SINGLE)

# 4 extender bytes follow the header; image data in a .nii starts at or after this
MIN_VOX_OFFSET = 352
EXTENDER_SIZE = 4
EXTENSION_ALIGN = 16

# Header layout: (name, length in bytes, type code), in file order.
# Offsets are contiguous, so the layout is fully defined by the lengths.
HEADER_FIELDS = [
    ('sizeof_hdr', 4, 'SL'),
    ('data_type', 10, 'STR'),
    ('db_name', 18, 'STR'),
    ('extents', 4, 'SL'),
    ('session_error', 2, 'SS'),
    ('regular', 1, 'BY'),
    ('dim_info', 1, 'BY'),
    ('dim', 16, 'SS'),
    ('intent_p1', 4, 'FL'),
    ('intent_p2', 4, 'FL'),
    ('intent_p3', 4, 'FL'),
    ('intent_code', 2, 'SS'),
    ('datatype', 2, 'SS'),
    ('bitpix', 2, 'SS'),
    ('slice_start', 2, 'SS'),
    ('pixdim', 32, 'FL'),
    ('vox_offset', 4, 'FL'),
    ('scl_slope', 4, 'FL'),
    ('scl_inter', 4, 'FL'),
    ('slice_end', 2, 'SS'),
    ('slice_code', 1, 'BY'),
    ('xyzt_units', 1, 'BY'),
    ('cal_max', 4, 'FL'),
    ('cal_min', 4, 'FL'),
    ('slice_duration', 4, 'FL'),
    ('toffset', 4, 'FL'),
    ('glmax', 4, 'SL'),
    ('glmin', 4, 'SL'),
    ('descrip', 80, 'STR'),
    ('aux_file', 24, 'STR'),
    ('qform_code', 2, 'SS'),
    ('sform_code', 2, 'SS'),
    ('quatern_b', 4, 'FL'),
    ('quatern_c', 4, 'FL'),
    ('quatern_d', 4, 'FL'),
    ('qoffset_x', 4, 'FL'),
    ('qoffset_y', 4, 'FL'),
    ('qoffset_z', 4, 'FL'),
    ('srow_x', 16, 'FL'),
    ('srow_y', 16, 'FL'),
    ('srow_z', 16, 'FL'),
    ('intent_name', 16, 'STR'),
    ('magic', 4, 'STR'),
]

# Fields that always decode to a list, even if a single element would fit
ARRAY_FIELDS = ('dim', 'pixdim', 'srow_x', 'srow_y', 'srow_z')

# NIfTI datatype code -> (stream type code, numpy dtype, bits per voxel)
DATATYPES = {
    2: ('BY', np.uint8, 8),
    4: ('SS', np.int16, 16),
    8: ('SL', np.int32, 32),
    16: ('FL', np.float32, 32),
    64: ('FD', np.float64, 64),
    512: ('US', np.uint16, 16),
    768: ('UL', np.uint32, 32),
}

DTYPE_TO_DATATYPE = {np.dtype(dtype): code for code, (_, dtype, _) in DATATYPES.items()}

# Spatial transform codes
XFORM_UNKNOWN = 0
XFORM_SCANNER_ANAT = 1
XFORM_ALIGNED_ANAT = 2
XFORM_TALAIRACH = 3
XFORM_MNI_152 = 4

# Extension codes
ECODE_IGNORE = 0
ECODE_DICOM = 2
ECODE_AFNI = 4
ECODE_COMMENT = 6
ECODE_XCEDE = 8
ECODE_JIMDIMINFO = 10
ECODE_WORKFLOW_FWDS = 12
ECODE_FREESURFER = 14
ECODE_PYPICKLE = 16

# Units (xyzt_units): millimetres and seconds
DEFAULT_XYZT_UNITS = 2 | 8
