"""Voxel-to-world affine transforms from NIfTI-1 orientation fields."""

import math
from typing import Optional

import numpy as np

from ..constants import XFORM_UNKNOWN


def quaternion_to_matrix(b: float, c: float, d: float) -> np.ndarray:
    """
    Build a 3x3 rotation matrix from the quaternion (a, b, c, d).

    a is computed so that the quaternion has unit length. If b, c, d are
    already (nearly) unit length, they are renormalized and a = 0.

    Args:
        b, c, d: quatern_b, quatern_c, quatern_d from the header

    Returns:
        3x3 rotation matrix (float64)
    """
    a = 1.0 - (b * b + c * c + d * d)
    if a < 1.e-7:
        norm = 1.0 / math.sqrt(b * b + c * c + d * d)
        b, c, d = b * norm, c * norm, d * norm
        a = 0.0
    else:
        a = math.sqrt(a)

    return np.array([
        [a * a + b * b - c * c - d * d, 2 * (b * c - a * d), 2 * (b * d + a * c)],
        [2 * (b * c + a * d), a * a + c * c - b * b - d * d, 2 * (c * d - a * b)],
        [2 * (b * d - a * c), 2 * (c * d + a * b), a * a + d * d - c * c - b * b],
    ], dtype=np.float64)


def qform_affine(header: dict) -> np.ndarray:
    """
    Reconstruct the 4x4 qform affine.

    Voxel sizes come from pixdim[1..3] (non-positive sizes are taken as 1),
    and pixdim[0] < 0 flips the third axis.
    """
    rotation = quaternion_to_matrix(header['quatern_b'], header['quatern_c'],
                                    header['quatern_d'])
    pixdim = header['pixdim']
    qfac = -1.0 if pixdim[0] < 0 else 1.0
    zooms = [p if p > 0 else 1.0 for p in pixdim[1:4]]
    zooms[2] *= qfac

    affine = np.eye(4)
    affine[:3, :3] = rotation * np.array(zooms)
    affine[:3, 3] = [header['qoffset_x'], header['qoffset_y'], header['qoffset_z']]
    return affine


def sform_affine(header: dict) -> np.ndarray:
    """Return the 4x4 sform affine from srow_x/y/z."""
    affine = np.eye(4)
    affine[0] = header['srow_x']
    affine[1] = header['srow_y']
    affine[2] = header['srow_z']
    return affine


def get_affine(header: dict) -> Optional[np.ndarray]:
    """
    Return the voxel-to-world affine, preferring the sform.

    Returns:
        4x4 array, or None if neither sform_code nor qform_code is set
    """
    if header['sform_code'] > XFORM_UNKNOWN:
        return sform_affine(header)
    if header['qform_code'] > XFORM_UNKNOWN:
        return qform_affine(header)
    return None


def affine_to_srows(affine: np.ndarray) -> dict:
    """Split a 4x4 affine into srow_x/y/z header fields."""
    affine = np.asarray(affine, dtype=np.float64)
    if affine.shape != (4, 4):
        raise ValueError(f"Expected 4x4 affine, got {affine.shape}")
    return {
        'srow_x': affine[0].tolist(),
        'srow_y': affine[1].tolist(),
        'srow_z': affine[2].tolist(),
    }
