"""Affine derivation from sform/qform header fields."""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest
from niicodec.codec import default_header
from niicodec.transform import (
    quaternion_to_matrix, qform_affine, get_affine, affine_to_srows,
)


def create_oriented_header(**fields):
    header = default_header()
    header.update(fields)
    return header


def test_no_orientation_returns_none():
    """Neither code set: no affine, and no identity substituted."""
    assert get_affine(default_header()) is None


def test_sform_rows():
    header = create_oriented_header(
        sform_code=1,
        srow_x=[2.0, 0.0, 0.0, -90.0],
        srow_y=[0.0, 2.0, 0.0, -126.0],
        srow_z=[0.0, 0.0, 2.0, -72.0],
    )
    expected = np.array([
        [2, 0, 0, -90],
        [0, 2, 0, -126],
        [0, 0, 2, -72],
        [0, 0, 0, 1],
    ], dtype=np.float64)
    assert np.array_equal(get_affine(header), expected)


def test_sform_preferred_over_qform():
    header = create_oriented_header(
        sform_code=2, qform_code=1,
        srow_x=[3.0, 0.0, 0.0, 0.0],
        srow_y=[0.0, 3.0, 0.0, 0.0],
        srow_z=[0.0, 0.0, 3.0, 0.0],
    )
    assert get_affine(header)[0, 0] == 3.0


def test_identity_quaternion():
    header = create_oriented_header(
        qform_code=1,
        pixdim=[1.0, 2.0, 3.0, 4.0, 1.0, 1.0, 1.0, 1.0],
        qoffset_x=10.0, qoffset_y=-20.0, qoffset_z=30.0,
    )
    expected = np.array([
        [2, 0, 0, 10],
        [0, 3, 0, -20],
        [0, 0, 4, 30],
        [0, 0, 0, 1],
    ], dtype=np.float64)
    assert np.allclose(get_affine(header), expected)


def test_negative_qfac_flips_third_axis():
    header = create_oriented_header(
        qform_code=1,
        pixdim=[-1.0, 1.0, 1.0, 2.5, 1.0, 1.0, 1.0, 1.0],
    )
    affine = qform_affine(header)
    assert np.allclose(np.diag(affine), [1.0, 1.0, -2.5, 1.0])


def test_nonpositive_voxel_sizes_treated_as_one():
    header = create_oriented_header(
        qform_code=1,
        pixdim=[1.0, 0.0, -2.0, 3.0, 1.0, 1.0, 1.0, 1.0],
    )
    assert np.allclose(np.diag(qform_affine(header))[:3], [1.0, 1.0, 3.0])


def test_half_turn_about_z():
    """b = c = 0, d = 1 is a 180 degree rotation about z (a = 0)."""
    rotation = quaternion_to_matrix(0.0, 0.0, 1.0)
    assert np.allclose(rotation, np.diag([-1.0, -1.0, 1.0]))


def test_quarter_turn_about_x():
    half = np.sqrt(0.5)
    rotation = quaternion_to_matrix(half, 0.0, 0.0)
    expected = np.array([
        [1, 0, 0],
        [0, 0, -1],
        [0, 1, 0],
    ], dtype=np.float64)
    assert np.allclose(rotation, expected)
    assert np.allclose(rotation @ rotation.T, np.eye(3))


def test_affine_to_srows():
    affine = np.diag([1.0, 2.0, 3.0, 1.0])
    affine[:3, 3] = [4.0, 5.0, 6.0]
    rows = affine_to_srows(affine)
    assert rows['srow_y'] == [0.0, 2.0, 0.0, 5.0]

    header = create_oriented_header(sform_code=1, **rows)
    assert np.array_equal(get_affine(header), affine)

    with pytest.raises(ValueError):
        affine_to_srows(np.eye(3))


def main():
    """Run all affine tests."""
    tests = [
        test_no_orientation_returns_none,
        test_sform_rows,
        test_sform_preferred_over_qform,
        test_identity_quaternion,
        test_negative_qfac_flips_third_axis,
        test_nonpositive_voxel_sizes_treated_as_one,
        test_half_turn_about_z,
        test_quarter_turn_about_x,
        test_affine_to_srows,
    ]
    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"❌ {test.__name__} failed: {e}")

    print(f"\n{len(tests) - failed}/{len(tests)} affine tests passed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
