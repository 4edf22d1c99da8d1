"""
Tests for the command-line interface
"""

import json

import pytest

from mime_sniffer.cli import main


PNG_DATA = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A]) + b"\x00" * 64


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setenv("COLUMNS", "200")


class TestCli:
    """Tests for mime-sniffer."""

    def test_list_types(self, capsys):
        assert main(["--list-types"]) == 0

        out = capsys.readouterr().out
        assert ".pdf" in out
        assert "application/zip" in out

    def test_json_output(self, tmp_path, capsys):
        path = tmp_path / "image.png"
        path.write_bytes(PNG_DATA)

        assert main(["--json", str(path)]) == 0

        entries = json.loads(capsys.readouterr().out)
        assert entries[0]["file"] == str(path)
        assert entries[0]["mime_type"] == "image/png"
        assert entries[0]["matched_by"] == "header+extension"
        assert entries[0]["size"] == len(PNG_DATA)

    def test_table_output(self, tmp_path, capsys):
        path = tmp_path / "image.dat"
        path.write_bytes(PNG_DATA)

        assert main([str(path)]) == 0

        out = capsys.readouterr().out
        assert "image/png" in out
        assert "claimed .dat" in out

    def test_unknown_file(self, tmp_path, capsys):
        """Unidentified files make the exit status 1."""
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\x13\x37" * 10)

        assert main(["--json", str(path)]) == 1

        entries = json.loads(capsys.readouterr().out)
        assert entries[0]["mime_type"] is None

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.pdf")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_no_files(self):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 2

    def test_custom_signatures(self, tmp_path, capsys):
        signatures = tmp_path / "extra.json"
        signatures.write_text(json.dumps([
            {"header": "CA FE ?? 01", "extension": "cafe", "mime_type": "application/x-cafe"},
        ]), encoding="utf-8")
        path = tmp_path / "sample"
        path.write_bytes(b"\xca\xfe\x99\x01rest")

        code = main(["--json", "--no-defaults", "--signatures", str(signatures), str(path)])

        assert code == 0
        entries = json.loads(capsys.readouterr().out)
        assert entries[0]["mime_type"] == "application/x-cafe"

    def test_bad_signature_file(self, tmp_path, capsys):
        signatures = tmp_path / "bad.json"
        signatures.write_text("not json", encoding="utf-8")

        assert main(["--signatures", str(signatures), "--list-types"]) == 1
        assert "Error" in capsys.readouterr().err

    def test_quiet(self, tmp_path, capsys):
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"%PDF-1.7")

        assert main(["-q", str(path)]) == 0
        assert capsys.readouterr().out == ""

    def test_signature_file_with_non_string_header(self, tmp_path, capsys):
        """A malformed entry exits with 1 instead of a traceback."""
        signatures = tmp_path / "bad.json"
        signatures.write_text(json.dumps([
            {"header": 1234, "extension": "x", "mime_type": "application/x-test"},
        ]), encoding="utf-8")

        assert main(["--signatures", str(signatures), "--list-types"]) == 1
        assert "entry 0" in capsys.readouterr().err

    def test_json_schema_is_uniform(self, tmp_path, capsys):
        """Identified and unidentified files carry the same keys."""
        known = tmp_path / "doc.pdf"
        known.write_bytes(b"%PDF-1.7")
        unknown = tmp_path / "blob.bin"
        unknown.write_bytes(b"\x13\x37" * 10)

        assert main(["--json", str(known), str(unknown)]) == 1

        entries = json.loads(capsys.readouterr().out)
        assert set(entries[0]) == set(entries[1])
        assert entries[1]["claimed_extension"] == ".bin"
        assert entries[1]["extension_mismatch"] is False
