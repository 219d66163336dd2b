#!/usr/bin/env python3
"""Record raw 11-bit depth frames from a Kinect to a .npy file.

The file can be replayed with:  kinstats --hardware replay hardware.sensor.path=<file>

Usage:
    python3 scripts/record_frames.py -n 100 -o frames.npy
"""

import argparse

import numpy as np
import freenect


def main():
    parser = argparse.ArgumentParser(description="Record raw Kinect depth frames")
    parser.add_argument("-n", "--count", type=int, default=100, help="Number of frames to record")
    parser.add_argument("-o", "--output", default="frames.npy", help="Output .npy file")
    parser.add_argument("--index", type=int, default=0, help="Kinect device index")
    args = parser.parse_args()

    print("Recording {} frames from Kinect #{}...".format(args.count, args.index))

    # Warm up
    for _ in range(5):
        freenect.sync_get_depth(index=args.index, format=freenect.DEPTH_11BIT)

    frames = []
    try:
        while len(frames) < args.count:
            result = freenect.sync_get_depth(index=args.index, format=freenect.DEPTH_11BIT)
            if result is None:
                print("ERROR: No Kinect device found! Check USB connection.")
                return 1
            depth, _ = result
            frames.append(np.array(depth, dtype=np.uint16))
            if len(frames) % 10 == 0:
                invalid = np.count_nonzero(depth == 2047) * 100 // depth.size
                print("  {:4d}/{} frames ({}% out of range)".format(len(frames), args.count, invalid))
    finally:
        freenect.sync_stop()

    np.save(args.output, np.stack(frames))
    print("Saved {} frames to {}".format(len(frames), args.output))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
