#!/usr/bin/env python3
"""
keygen.py - Create the Fernet key file used to encrypt question banks.

Usage:
    python tools/keygen.py --out BANK.key
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from codejudge.bank import generate_key


def main():
    parser = argparse.ArgumentParser(description="Create a key file for encrypted question banks.")
    parser.add_argument("--out", required=True, help="Where to write the key (e.g. BANK.key)")
    args = parser.parse_args()

    out_path = Path(args.out)
    if out_path.exists():
        print(f"[ERROR] {out_path} already exists; refusing to overwrite a bank key", file=sys.stderr)
        sys.exit(1)

    try:
        generate_key(out_path)
    except OSError as e:
        print(f"[ERROR] Could not write key: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"[OK] Key written to {out_path}")
    print(f"  Encrypt:  python tools/build_bank.py --in bank.json --out bank.enc --key-file {out_path}")
    print(f"  Serve:    codejudge serve --bank bank.enc --key-file {out_path}")
    print("  Keep the key out of version control; banks cannot be decrypted without it.")


if __name__ == "__main__":
    main()
