#!/usr/bin/env python3
"""
Minimal end-to-end demo of PMAC0 signing and verification.

Usage (from repo root):
    pip install .
    python -m examples.demo_minimal
"""

import os
import tempfile

from pmac0 import (
    PMACConfig,
    SerialRunner,
    compute_tag,
    sign_file,
    verify_file,
)


def main():
    config = PMACConfig(variant="rc4", worker_count=3)

    with tempfile.TemporaryDirectory() as workdir:
        path = os.path.join(workdir, "message.bin")
        with open(path, "wb") as f:
            f.write(b"ALARM_LEVEL_3")

        print("\n=== Sign ===")
        tag_path = sign_file(path, config)
        with open(tag_path) as f:
            print("Tag file:", tag_path, "->", f.read().strip())

        print("\n=== Same tag, different process count ===")
        serial = compute_tag(path, config, runner=SerialRunner())
        pooled = compute_tag(path, config.replace(processes=1))
        print("serial:", serial, " pool(1 process):", pooled)

        print("\n=== Verify ===")
        print("Result:", verify_file(path, tag_path, config).value.upper())

        print("\n=== Verify after a one-byte change ===")
        with open(path, "r+b") as f:
            f.write(b"B")
        print("Result:", verify_file(path, tag_path, config).value.upper())


if __name__ == "__main__":
    main()
