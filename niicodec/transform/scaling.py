"""Linear intensity scaling between stored and calibrated voxel values."""

import math

import numpy as np


def has_scaling(slope: float) -> bool:
    """A zero or non-finite slope means the stored values are used as is."""
    return slope != 0 and math.isfinite(slope)


def apply_scaling(raw: np.ndarray, slope: float, inter: float) -> np.ndarray:
    """
    Convert stored values to calibrated intensities.

    value = raw * scl_slope + scl_inter

    Args:
        raw: Stored voxel values
        slope: scl_slope from the header
        inter: scl_inter from the header

    Returns:
        float64 array if scaled, otherwise raw unchanged
    """
    if not has_scaling(slope):
        return raw
    return raw.astype(np.float64) * slope + inter


def remove_scaling(values: np.ndarray, slope: float, inter: float,
                   dtype) -> np.ndarray:
    """
    Convert calibrated intensities back to stored values of the given dtype.

    raw = (value - scl_inter) / scl_slope, rounded for integer dtypes
    and clipped to the dtype's range.
    """
    dtype = np.dtype(dtype)
    if has_scaling(slope):
        result = (values.astype(np.float64) - inter) / slope
    else:
        result = values

    if dtype.kind in 'iu':
        info = np.iinfo(dtype)
        result = np.clip(np.round(result), info.min, info.max)
    return np.asarray(result).astype(dtype)
