"""Intensity scaling and spatial transforms."""

from .scaling import apply_scaling, remove_scaling, has_scaling
from .affine import quaternion_to_matrix, qform_affine, sform_affine, get_affine, affine_to_srows

__all__ = [
    'apply_scaling',
    'remove_scaling',
    'has_scaling',
    'quaternion_to_matrix',
    'qform_affine',
    'sform_affine',
    'get_affine',
    'affine_to_srows',
]
