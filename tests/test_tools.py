"""
Tests for the bank authoring tools.

Runs keygen, build_bank and verify_bank against the sample bank.
"""

import json
import pytest
from unittest.mock import patch
from pathlib import Path

# Add parent and tools directories to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

from build_bank import build_bank
from verify_bank import verify_bank
import keygen

from codejudge.bank import generate_key, load_bank

SAMPLE_BANK = Path(__file__).parent.parent / "banks" / "sample_bank.json"


class TestBankTools:
    """Test the key file workflow end to end."""

    def test_build_and_verify_with_key_file(self, tmp_path):
        key_file = tmp_path / "BANK.key"
        bank_file = tmp_path / "out" / "sample_bank.enc"

        generate_key(str(key_file))
        build_bank(str(SAMPLE_BANK), str(bank_file), key_file=str(key_file))

        assert bank_file.exists()
        assert verify_bank(str(bank_file), key_file=str(key_file)) is True
        questions = load_bank(bank_file, key_file.read_text(encoding="utf-8"))
        assert "two-sum" in [q.id for q in questions]

    def test_verify_plaintext_sample(self):
        assert verify_bank(str(SAMPLE_BANK), verbose=True) is True

    def test_verify_rejects_wrong_key(self, tmp_path):
        key_file = tmp_path / "BANK.key"
        other_key = tmp_path / "OTHER.key"
        bank_file = tmp_path / "sample_bank.enc"
        generate_key(str(key_file))
        generate_key(str(other_key))
        build_bank(str(SAMPLE_BANK), str(bank_file), key_file=str(key_file))

        assert verify_bank(str(bank_file), key_file=str(other_key)) is False

    def test_verify_reports_schema_errors(self, tmp_path):
        bank_file = tmp_path / "broken.json"
        bank_file.write_text(json.dumps({"group": "g", "version": "1", "questions": [{"id": "x"}]}),
                             encoding="utf-8")

        assert verify_bank(str(bank_file)) is False

    def test_build_requires_key_or_password(self, tmp_path):
        with pytest.raises(SystemExit):
            build_bank(str(SAMPLE_BANK), str(tmp_path / "out.enc"))

    def test_keygen_writes_key(self, tmp_path):
        key_file = tmp_path / "BANK.key"

        with patch.object(sys, "argv", ["keygen.py", "--out", str(key_file)]):
            keygen.main()

        assert len(key_file.read_bytes()) == 44

    def test_keygen_refuses_to_overwrite(self, tmp_path):
        key_file = tmp_path / "BANK.key"
        key_file.write_bytes(b"existing")

        with patch.object(sys, "argv", ["keygen.py", "--out", str(key_file)]):
            with pytest.raises(SystemExit):
                keygen.main()

        assert key_file.read_bytes() == b"existing"
