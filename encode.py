#!/usr/bin/env python3
"""
NIfTI-1 Encoder CLI

Usage:
    python encode.py --input <path.npy> --output <path.nii|path.hdr>

Example:
    python encode.py --input volume.npy --output volume.nii --voxel-size 1 1 2
"""

import argparse
import logging
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np
from niicodec import NiftiVolume, NiftiError
from niicodec.constants import DATATYPES


def main():
    parser = argparse.ArgumentParser(
        description='NIfTI-1 Encoder - Write a NumPy array as a NIfTI-1 volume',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single .nii file
  python encode.py --input volume.npy --output volume.nii

  # .hdr/.img pair, big endian, with 1x1x2 mm voxels
  python encode.py --input volume.npy --output volume.hdr --big-endian \\
      --voxel-size 1 1 2

  # Store as int16 with a calibration slope
  python encode.py --input volume.npy --output volume.nii --datatype 4 \\
      --slope 0.5 --inter -1024
        """
    )

    # Required arguments
    parser.add_argument('--input', '-i', required=True,
                        help='Input array path (.npy)')
    parser.add_argument('--output', '-o', required=True,
                        help='Output NIfTI path (.nii, .hdr or .img)')

    # Optional arguments
    parser.add_argument('--datatype', '-d', type=int, choices=sorted(DATATYPES),
                        help='NIfTI datatype code (default: from array dtype)')
    parser.add_argument('--voxel-size', '-s', type=float, nargs=3,
                        metavar=('X', 'Y', 'Z'),
                        help='Voxel size in mm, stored as a diagonal sform')
    parser.add_argument('--slope', type=float, default=0.0,
                        help='scl_slope (default: 0, no scaling)')
    parser.add_argument('--inter', type=float, default=0.0,
                        help='scl_inter (default: 0)')
    parser.add_argument('--big-endian', action='store_true',
                        help='Write big endian (default: little endian)')
    parser.add_argument('--descrip', default='',
                        help='Header description (up to 80 characters)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    # Check input file exists
    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    try:
        start_time = time.time()

        array = np.load(args.input)
        if args.verbose:
            print(f"Reading input: {args.input}")
            print(f"  Shape: {array.shape}")
            print(f"  Dtype: {array.dtype}")

        affine = None
        if args.voxel_size is not None:
            affine = np.diag(list(args.voxel_size) + [1.0])

        if args.datatype is not None and args.slope:
            # Calibrated values are stored through the slope, not cast directly
            volume = NiftiVolume.from_array(array.astype(np.float64), affine=affine)
            volume.header['datatype'] = args.datatype
            volume.header['bitpix'] = DATATYPES[args.datatype][2]
        else:
            volume = NiftiVolume.from_array(array, affine=affine,
                                            datatype=args.datatype)
        volume.header['scl_slope'] = args.slope
        volume.header['scl_inter'] = args.inter
        volume.header['descrip'] = args.descrip[:80]

        volume.write(args.output, big_endian=args.big_endian)
        elapsed = time.time() - start_time

        if args.verbose:
            print(f"\nResults:")
            print(f"  Datatype: {volume.header['datatype']} "
                  f"({volume.header['bitpix']} bits)")
            print(f"  vox_offset: {int(volume.header['vox_offset'])}")
            print(f"  Byte order: {'big' if args.big_endian else 'little'} endian")
            print(f"  Encoding time: {elapsed:.2f}s")
            print(f"\nOutput written to: {args.output}")
        else:
            print(f"Encoded: {args.input} -> {args.output} "
                  f"(dim={volume.header['dim'][:array.ndim + 1]})")

    except (NiftiError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
