#!/usr/bin/env python3
"""
NIfTI-1 Decoder CLI

Usage:
    python decode.py --input <path.nii|path.hdr> [--output <path.npy>]

Example:
    python decode.py --input volume.nii --output volume.npy --header
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
from niicodec.constants import HEADER_FIELDS


def print_header(volume):
    """Print every header field, one per line."""
    for name, _, _ in HEADER_FIELDS:
        print(f"  {name:<15} {volume.header[name]}")
    print(f"  {'byte order':<15} {'big' if volume.big_endian else 'little'} endian")
    for ext in volume.extensions:
        print(f"  extension       ecode={ext['ecode']} esize={ext['esize']}")


def main():
    parser = argparse.ArgumentParser(
        description='NIfTI-1 Decoder - Read a NIfTI-1 volume',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the header only
  python decode.py --input volume.nii --header --no-image

  # Decode voxel data to NumPy format
  python decode.py --input volume.hdr --output volume.npy

  # Decode with verbose output and the affine
  python decode.py --input volume.nii --output volume.npy --affine --verbose
        """
    )

    # Required arguments
    parser.add_argument('--input', '-i', required=True,
                        help='Input NIfTI path (.nii, .hdr or .img)')

    # Optional arguments
    parser.add_argument('--output', '-o',
                        help='Output array path (.npy)')
    parser.add_argument('--header', action='store_true',
                        help='Print all header fields')
    parser.add_argument('--affine', action='store_true',
                        help='Print the voxel-to-world affine')
    parser.add_argument('--no-image', action='store_true',
                        help='Do not decode voxel data')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    # Check input file exists
    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    if args.output and args.no_image:
        print("Error: --output requires image decoding", file=sys.stderr)
        sys.exit(1)

    try:
        start_time = time.time()
        volume = NiftiVolume.read(args.input, image=not args.no_image)
        elapsed = time.time() - start_time

        if args.header:
            print("Header:")
            print_header(volume)

        if args.affine:
            affine = volume.affine
            if affine is None:
                print("Affine: none (sform_code and qform_code are 0)")
            else:
                print("Affine:")
                print(np.array2string(affine, precision=4, suppress_small=True))

        for message in volume.diagnostics:
            print(message, file=sys.stderr)

        image = volume.image
        if args.verbose and image is not None:
            print(f"\nDecoded image:")
            print(f"  Shape: {image.shape}")
            print(f"  Dtype: {image.dtype}")
            print(f"  Range: [{image.min()}, {image.max()}]")
            print(f"  Decoding time: {elapsed:.2f}s")

        if args.output:
            if image is None:
                print("Error: No image data decoded", file=sys.stderr)
                sys.exit(1)
            np.save(args.output, image)
            print(f"Decoded: {args.input} -> {args.output} {image.shape}")

    except NiftiError as e:
        print(f"Error: Invalid NIfTI file - {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
