#!/usr/bin/env python3
"""
build_bank.py - Encrypt plaintext JSON question banks.

Usage with key file:
    python tools/build_bank.py --in banks/sample_bank.json --out banks/sample_bank.enc --key-file BANK.key

Usage with password:
    python tools/build_bank.py --in banks/sample_bank.json --out banks/sample_bank.enc --password
"""

import argparse
import getpass
import hashlib
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from codejudge.bank import encrypt_bank


def build_bank(in_file: str, out_file: str, key_file: str = None, use_password: bool = False) -> None:
    """Encrypt a plaintext JSON question bank."""
    try:
        password = None
        key = None

        if use_password:
            password = getpass.getpass("Enter encryption password: ")
            password_confirm = getpass.getpass("Confirm password: ")

            if password != password_confirm:
                print("[ERROR] Passwords do not match", file=sys.stderr)
                sys.exit(1)

            if len(password) < 8:
                print("[ERROR] Password must be at least 8 characters", file=sys.stderr)
                sys.exit(1)

            print("[OK] Using password-based encryption")

        elif key_file:
            with open(key_file, 'rb') as f:
                key = f.read().strip()
            print("[OK] Using key file encryption")
        else:
            print("[ERROR] Must specify either --key-file or --password", file=sys.stderr)
            sys.exit(1)

        with open(in_file, 'rb') as f:
            plaintext = f.read()

        # Verify JSON is valid before encrypting
        try:
            bank_data = json.loads(plaintext)
            print(f"[OK] Input JSON validated")
            print(f"  Group: {bank_data.get('group', 'unknown')}")
            print(f"  Version: {bank_data.get('version', 'unknown')}")
            print(f"  Questions: {len(bank_data.get('questions', []))}")
        except json.JSONDecodeError as e:
            print(f"[ERROR] Invalid JSON in input file: {e}", file=sys.stderr)
            sys.exit(1)

        final_data = encrypt_bank(plaintext, key=key, password=password)
        sha256_hash = hashlib.sha256(final_data).hexdigest()

        Path(out_file).parent.mkdir(parents=True, exist_ok=True)
        with open(out_file, 'wb') as f:
            f.write(final_data)

        print(f"\n[OK] Success: Bank encrypted")
        print(f"  Input: {in_file} ({len(plaintext)} bytes)")
        print(f"  Output: {out_file} ({len(final_data)} bytes)")
        print(f"  Method: {'Password-based' if password else 'Key file'}")
        print(f"  SHA256: {sha256_hash}")

    except FileNotFoundError as e:
        print(f"[ERROR] File not found: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"[ERROR] Error encrypting bank: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Encrypt a plaintext JSON question bank.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python tools/build_bank.py --in banks/sample_bank.json --out banks/sample_bank.enc --key-file BANK.key
  python tools/build_bank.py --in banks/sample_bank.json --out banks/sample_bank.enc --password

Notes:
  - Input file must be valid JSON
  - Output directory will be created if it doesn't exist
  - Produces SHA256 checksum for verification
        """
    )
    parser.add_argument("--in", dest="in_file", required=True, help="Input plaintext JSON file")
    parser.add_argument("--out", required=True, help="Output encrypted bank file (.enc)")
    parser.add_argument(
        "--key-file",
        help="File containing the encryption key (mutually exclusive with --password)"
    )
    parser.add_argument(
        "--password",
        action="store_true",
        help="Use password-based encryption instead of key file"
    )

    args = parser.parse_args()

    if args.password and args.key_file:
        print("[ERROR] Cannot use both --password and --key-file", file=sys.stderr)
        sys.exit(1)

    build_bank(args.in_file, args.out, args.key_file, args.password)


if __name__ == "__main__":
    main()
