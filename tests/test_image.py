"""Voxel data codec and intensity scaling verification."""

import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pytest
from niicodec.codec import default_header, decode_image, encode_image, datatype_for
from niicodec.codec import image_shape
from niicodec.exceptions import MalformedHeaderError, UnsupportedDatatypeError
from niicodec.io import ByteStream
from niicodec.transform import apply_scaling, remove_scaling


def create_image_header(dim, datatype=2, bitpix=8, slope=0.0, inter=0.0):
    header = default_header()
    header.update({
        'dim': dim,
        'datatype': datatype,
        'bitpix': bitpix,
        'scl_slope': slope,
        'scl_inter': inter,
    })
    return header


def test_column_major_reshape():
    """dim [3, 2, 2, 1] with bytes 1..4 decodes in Fortran order."""
    print("=" * 60)
    print("Test 1: Column-Major Reshape")
    print("=" * 60)

    header = create_image_header([3, 2, 2, 1, 0, 0, 0, 0])
    stream = ByteStream(b'\x00' * 352 + bytes([1, 2, 3, 4]), False)

    image = decode_image(stream, header)
    print(f"   Shape: {image.shape}")

    assert image.shape == (2, 2, 1)
    assert image[0, 0, 0] == 1
    assert image[1, 0, 0] == 2
    assert image[0, 1, 0] == 3
    assert image[1, 1, 0] == 4
    print("   ✓ Fastest-varying index first")


def test_zero_slope_keeps_raw_values():
    raw = np.array([-5, 0, 7, 32767, -32768, 12], dtype=np.int16)
    header = create_image_header([2, 3, 2, 1, 1, 1, 1, 1], datatype=4, bitpix=16)
    data = b'\x00' * 352 + raw.astype('<i2').tobytes()

    image = decode_image(ByteStream(data, False), header)

    assert image.dtype == np.int16
    assert np.array_equal(image.ravel(order='F'), raw)


def test_slope_and_intercept_applied():
    """raw 10 with slope 2 and intercept 1 decodes to 21."""
    header = create_image_header([1, 2, 1, 1, 1, 1, 1, 1], datatype=4, bitpix=16,
                                 slope=2.0, inter=1.0)
    data = b'\x00' * 352 + np.array([10, -3], dtype='>i2').tobytes()

    image = decode_image(ByteStream(data, True), header)

    assert image.dtype == np.float64
    assert image[0] == 21.0
    assert image[1] == -5.0


@pytest.mark.parametrize('datatype', [2, 4, 8, 16, 64, 512, 768])
@pytest.mark.parametrize('big_endian', [False, True])
def test_encode_then_decode_each_datatype(datatype, big_endian):
    dtype, bitpix = {
        2: (np.uint8, 8), 4: (np.int16, 16), 8: (np.int32, 32),
        16: (np.float32, 32), 64: (np.float64, 64),
        512: (np.uint16, 16), 768: (np.uint32, 32),
    }[datatype]
    image = np.arange(24).reshape(2, 3, 4).astype(dtype)
    if np.dtype(dtype).kind in 'if':
        image[0, 0, 0] = -7

    header = create_image_header([3, 2, 3, 4, 1, 1, 1, 1], datatype, bitpix)
    header['vox_offset'] = 0.0
    encoded = encode_image(image, header, big_endian)
    assert len(encoded) == image.size * bitpix // 8

    decoded = decode_image(ByteStream(encoded, big_endian), header)
    assert decoded.dtype == np.dtype(dtype)
    assert np.array_equal(decoded, image)


def test_encode_removes_scaling():
    header = create_image_header([1, 3, 1, 1, 1, 1, 1, 1], datatype=4, bitpix=16,
                                 slope=2.0, inter=1.0)
    encoded = encode_image(np.array([21.0, 1.0, -5.2]), header, False)
    assert np.array_equal(np.frombuffer(encoded, dtype='<i2'), [10, 0, -3])


def test_truncated_image_returns_none():
    header = create_image_header([3, 4, 4, 4, 1, 1, 1, 1])
    stream = ByteStream(b'\x00' * 352 + b'\x01' * 10, False)

    assert decode_image(stream, header) is None
    assert len(stream.diagnostics) == 1
    assert 'truncated' in stream.diagnostics[0]


def test_unsupported_datatype():
    header = create_image_header([1, 1, 1, 1, 1, 1, 1, 1], datatype=128, bitpix=24)
    with pytest.raises(UnsupportedDatatypeError):
        decode_image(ByteStream(b'\x00' * 400, False), header)
    with pytest.raises(UnsupportedDatatypeError):
        datatype_for(np.int64)


@pytest.mark.parametrize('dim', [
    [3, -2, 2, 1, 1, 1, 1, 1],
    [0, 2, 2, 1, 1, 1, 1, 1],
    [8, 2, 2, 1, 1, 1, 1, 1],
])
def test_invalid_dim_is_rejected(dim):
    """A negative extent or a rank outside 1..7 is a malformed header, not a decode failure."""
    header = create_image_header(dim)
    with pytest.raises(MalformedHeaderError) as excinfo:
        image_shape(header)
    assert excinfo.value.field == 'dim'

    with pytest.raises(MalformedHeaderError):
        decode_image(ByteStream(b'\x00' * 372, False), header)


def test_bitpix_mismatch_uses_datatype_width():
    header = create_image_header([1, 2, 1, 1, 1, 1, 1, 1], datatype=4, bitpix=8)
    data = b'\x00' * 352 + np.array([300, -300], dtype='<i2').tobytes()
    stream = ByteStream(data, False)

    image = decode_image(stream, header)
    assert list(image) == [300, -300]
    assert len(stream.diagnostics) == 1


def test_scaling_helpers():
    raw = np.array([0, 1, 2], dtype=np.uint8)
    assert apply_scaling(raw, 0.0, 5.0) is raw
    assert apply_scaling(raw, float('nan'), 5.0) is raw
    assert np.allclose(apply_scaling(raw, 0.5, -1.0), [-1.0, -0.5, 0.0])

    restored = remove_scaling(np.array([-1.0, 300.0]), 1.0, 0.0, np.uint8)
    assert restored.dtype == np.uint8
    assert list(restored) == [0, 255]


def test_datatype_for():
    assert datatype_for(np.int16) == (4, 16)
    assert datatype_for('float32') == (16, 32)
    assert datatype_for(np.uint8) == (2, 8)


def main():
    """Run all image tests."""
    tests = [
        test_column_major_reshape,
        test_zero_slope_keeps_raw_values,
        test_slope_and_intercept_applied,
        lambda: test_encode_then_decode_each_datatype(4, True),
        lambda: test_encode_then_decode_each_datatype(16, False),
        test_encode_removes_scaling,
        test_truncated_image_returns_none,
        test_unsupported_datatype,
        lambda: test_invalid_dim_is_rejected([3, -2, 2, 1, 1, 1, 1, 1]),
        lambda: test_invalid_dim_is_rejected([0, 2, 2, 1, 1, 1, 1, 1]),
        test_bitpix_mismatch_uses_datatype_width,
        test_scaling_helpers,
        test_datatype_for,
    ]
    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"❌ {getattr(test, '__name__', 'test')} failed: {e}")

    print(f"\n{len(tests) - failed}/{len(tests)} image tests passed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
