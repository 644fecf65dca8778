"""
Question bank loading and encryption.

A bank is JSON of the form {"group", "version", "questions": [...]}.
It may be stored as plain .json or encrypted with Fernet, either with a
key file or with a password (PBKDF2-derived key, salt stored in a
"SALT" + 16-byte prefix).
"""

import os
import json
import base64
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import BankLoadError
from .models import CATEGORIES, DIFFICULTIES, Question

logger = logging.getLogger(__name__)

SALT_PREFIX = b'SALT'
SALT_LENGTH = 16


def generate_key(output_path: Path) -> bytes:
    """Write a new Fernet key to output_path and return it."""
    key = Fernet.generate_key()
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(key)
    logger.info("Generated bank key at %s", output_path)
    return key


def derive_key_from_password(password: str, salt: bytes) -> bytes:
    """Derive a Fernet key from a password using PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=480000,  # OWASP recommendation for 2024
    )
    key_material = kdf.derive(password.encode('utf-8'))
    return base64.urlsafe_b64encode(key_material)


def encrypt_bank(plaintext: bytes, key: Optional[bytes] = None, password: Optional[str] = None) -> bytes:
    """
    Encrypt a plaintext bank with a key or a password.

    Password-encrypted output is prefixed with SALT + the random salt so
    the key can be re-derived on load.
    """
    if password is not None:
        salt = os.urandom(SALT_LENGTH)
        return SALT_PREFIX + salt + Fernet(derive_key_from_password(password, salt)).encrypt(plaintext)
    if key is None:
        raise ValueError("Either key or password is required")
    return Fernet(key).encrypt(plaintext)


def decrypt_bank(encrypted_data: bytes, key_input: Union[str, bytes]) -> bytes:
    """Decrypt bank bytes with a key (key-file banks) or password (salted banks)."""
    if encrypted_data.startswith(SALT_PREFIX):
        salt = encrypted_data[len(SALT_PREFIX):len(SALT_PREFIX) + SALT_LENGTH]
        encrypted_data = encrypted_data[len(SALT_PREFIX) + SALT_LENGTH:]
        password = key_input.decode('utf-8') if isinstance(key_input, bytes) else key_input
        key = derive_key_from_password(password, salt)
    else:
        key = key_input.encode('utf-8') if isinstance(key_input, str) else key_input

    return Fernet(key.strip()).decrypt(encrypted_data)


def parse_bank(bank_dict: dict) -> List[Question]:
    """Build Question objects from a decoded bank dictionary."""
    if not isinstance(bank_dict, dict) or not isinstance(bank_dict.get('questions'), list):
        raise BankLoadError("Bank must be an object with a 'questions' list")

    questions = [Question.from_dict(q) for q in bank_dict['questions']]
    ids = [q.id for q in questions]
    duplicates = sorted({qid for qid in ids if ids.count(qid) > 1})
    if duplicates:
        raise BankLoadError(f"Duplicate question ids: {', '.join(duplicates)}")
    return questions


def check_bank_schema(bank_data: dict) -> Tuple[List[str], List[str]]:
    """
    Validate a decoded bank against the question schema.

    Returns:
        Tuple of (errors, warnings); the bank is usable when errors is empty
    """
    errors: List[str] = []
    warnings: List[str] = []

    for field in ('group', 'version', 'questions'):
        if field not in bank_data:
            errors.append(f"Missing required field: {field}")
    if errors:
        return errors, warnings

    questions = bank_data['questions']
    if not isinstance(questions, list):
        return ["questions: must be a list"], warnings

    seen_ids = set()
    for idx, question in enumerate(questions, start=1):
        label = f"questions[{idx}] ({question.get('id', '?')})" if isinstance(question, dict) else f"questions[{idx}]"
        if not isinstance(question, dict):
            errors.append(f"{label}: must be an object")
            continue

        missing = [f for f in ('id', 'title', 'category', 'difficulty') if f not in question]
        if missing:
            errors.append(f"{label}: Missing fields: {', '.join(missing)}")
            continue

        if question['id'] in seen_ids:
            errors.append(f"{label}: Duplicate id")
        seen_ids.add(question['id'])

        if question['category'] not in CATEGORIES:
            errors.append(f"{label}: Invalid category: {question['category']}")
        if question['difficulty'] not in DIFFICULTIES:
            errors.append(f"{label}: Invalid difficulty: {question['difficulty']}")

        test_cases = question.get('testCases') or question.get('test_cases') or []
        if not isinstance(test_cases, list):
            errors.append(f"{label}: testCases must be a list")
        elif len(test_cases) == 0:
            errors.append(f"{label}: No test cases defined")
        else:
            for test_idx, test in enumerate(test_cases, start=1):
                if not isinstance(test, dict):
                    errors.append(f"{label} test {test_idx}: must be an object")
                    continue
                has_expected = any(k in test for k in ('expectedOutput', 'expected_output', 'output'))
                if 'input' not in test or not has_expected:
                    errors.append(f"{label} test {test_idx}: Missing input/expectedOutput")

        for limit in ('time_limit_ms', 'memory_limit_mb'):
            value = question.get(limit)
            if value is None:
                continue
            try:
                value = int(value)
            except (TypeError, ValueError):
                errors.append(f"{label}: {limit} must be an integer")
                continue
            if value <= 0:
                warnings.append(f"{label}: {limit} should be > 0")

    return errors, warnings


def load_bank(bank_path: Path, key_input: Optional[Union[str, bytes]] = None) -> List[Question]:
    """
    Load and, if needed, decrypt a question bank.

    Args:
        bank_path: Path to a .json bank or an encrypted bank
        key_input: Fernet key or password; not used for .json files

    Returns:
        The bank's questions

    Raises:
        BankLoadError: If the file cannot be read, decrypted or parsed
    """
    bank_path = Path(bank_path)
    try:
        if bank_path.suffix.lower() == '.json':
            bank_dict = json.loads(bank_path.read_text(encoding='utf-8'))
        else:
            if key_input is None:
                raise BankLoadError(f"Bank {bank_path} is encrypted; a key or password is required")
            bank_dict = json.loads(decrypt_bank(bank_path.read_bytes(), key_input))
    except InvalidToken:
        raise BankLoadError("Decryption failed: Invalid key/password or corrupted file")
    except (OSError, ValueError) as e:
        raise BankLoadError(f"Failed to load question bank {bank_path}: {e}")

    try:
        questions = parse_bank(bank_dict)
    except (KeyError, TypeError, ValueError) as e:
        raise BankLoadError(f"Invalid question entry in {bank_path}: {e}")

    logger.info("Loaded %d questions from %s (group=%s, version=%s)",
                len(questions), bank_path, bank_dict.get('group', 'unknown'),
                bank_dict.get('version', 'unknown'))
    return questions
