#!/usr/bin/env python3
"""
verify_bank.py - Validate question bank schema and decrypt for inspection.

Usage with key file:
    python tools/verify_bank.py --bank banks/sample_bank.enc --key-file BANK.key

Usage with password:
    python tools/verify_bank.py --bank banks/sample_bank.enc --password

Usage with plaintext:
    python tools/verify_bank.py --bank banks/sample_bank.json
"""

import argparse
import getpass
import json
import sys
from pathlib import Path

from cryptography.fernet import InvalidToken

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from codejudge.bank import SALT_PREFIX, check_bank_schema, decrypt_bank


def verify_bank(bank_file: str, key_file: str = None, use_password: bool = False, verbose: bool = False) -> bool:
    """
    Verify a question bank (encrypted or plaintext).
    Returns True if valid, False otherwise.
    """
    try:
        if bank_file.endswith('.json'):
            with open(bank_file, 'rb') as f:
                plaintext = f.read()
        else:
            with open(bank_file, 'rb') as f:
                encrypted_data = f.read()

            if encrypted_data.startswith(SALT_PREFIX):
                if not use_password:
                    print("[ERROR] This bank was encrypted with a password. Use --password flag.", file=sys.stderr)
                    return False
                key_input = getpass.getpass("Enter decryption password: ")
                print(f"[OK] Using password-based decryption")
            else:
                if not key_file:
                    print("[ERROR] This bank was encrypted with a key file. Use --key-file.", file=sys.stderr)
                    return False
                with open(key_file, 'rb') as f:
                    key_input = f.read()
                print(f"[OK] Using key file decryption")

            try:
                plaintext = decrypt_bank(encrypted_data, key_input)
                print(f"[OK] Bank decrypted successfully")
            except InvalidToken:
                print(f"[ERROR] Decryption failed: Invalid key/password or corrupted file", file=sys.stderr)
                return False

        try:
            bank_data = json.loads(plaintext)
        except json.JSONDecodeError as e:
            print(f"[ERROR] Invalid JSON: {e}", file=sys.stderr)
            return False

        print(f"\n[SCHEMA] Bank Schema Validation")
        print(f"{'='*60}")

        errors, warnings = check_bank_schema(bank_data)

        questions = bank_data.get('questions', []) if isinstance(bank_data, dict) else []
        if isinstance(questions, list):
            total_tests = sum(len(q.get('testCases', [])) for q in questions
                              if isinstance(q, dict) and isinstance(q.get('testCases'), list))
            if verbose:
                for q in questions:
                    if isinstance(q, dict):
                        print(f"  [OK] {q.get('id', '?')}: {q.get('title', '?')} "
                              f"({q.get('difficulty', '?')}, {len(q.get('testCases') or [])} tests)")
            print(f"\n{'='*60}")
            print(f"[SUMMARY]")
            print(f"  Group: {bank_data.get('group', 'unknown')}")
            print(f"  Version: {bank_data.get('version', 'unknown')}")
            print(f"  Total questions: {len(questions)}")
            print(f"  Total test cases: {total_tests}")

        if warnings:
            print(f"\n[WARNING] ({len(warnings)}):")
            for warn in warnings[:10]:
                print(f"  - {warn}")
            if len(warnings) > 10:
                print(f"  ... and {len(warnings) - 10} more")

        if errors:
            print(f"\n[ERROR] ({len(errors)}):")
            for err in errors[:20]:
                print(f"  - {err}")
            if len(errors) > 20:
                print(f"  ... and {len(errors) - 20} more")
            return False

        print(f"\n[OK] Bank validation PASSED")
        return True

    except FileNotFoundError as e:
        print(f"[ERROR] File not found: {e}", file=sys.stderr)
        return False
    except ValueError as e:
        print(f"[ERROR] Unreadable bank: {e}", file=sys.stderr)
        return False


def main():
    parser = argparse.ArgumentParser(
        description="Validate question bank schema and content.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Verify encrypted bank
  python tools/verify_bank.py --bank banks/sample_bank.enc --key-file BANK.key

  # Verify plaintext bank (during authoring)
  python tools/verify_bank.py --bank banks/sample_bank.json

  # Verbose output
  python tools/verify_bank.py --bank banks/sample_bank.json --verbose
        """
    )
    parser.add_argument("--bank", required=True, help="Path to bank file (.enc or .json)")
    parser.add_argument("--key-file", help="Encryption key file (for key-file encrypted banks)")
    parser.add_argument(
        "--password",
        action="store_true",
        help="Use password to decrypt (for password-encrypted banks)"
    )
    parser.add_argument("--verbose", action="store_true", help="Show detailed question information")

    args = parser.parse_args()

    success = verify_bank(args.bank, args.key_file, args.password, args.verbose)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
