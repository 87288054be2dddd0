"""Tests for local source file access"""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from errors import AccessDeniedError, SourceAccessError, SourceNotFoundError
from sync.accessor import LocalFileAccessor


class TestLocalFileAccessor:
    """Test reading tracking files from disk"""

    def test_reads_bytes(self, tmp_path, source_a_payload):
        path = tmp_path / "codingTimeData.json"
        path.write_bytes(source_a_payload)

        assert LocalFileAccessor().resolve(str(path)) == source_a_payload

    def test_does_not_modify_file(self, tmp_path, source_a_payload):
        path = tmp_path / "codingTimeData.json"
        path.write_bytes(source_a_payload)
        mtime = path.stat().st_mtime_ns

        LocalFileAccessor().resolve(str(path))

        assert path.stat().st_mtime_ns == mtime
        assert path.read_bytes() == source_a_payload

    def test_expands_home_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "log.json").write_bytes(b"{}")

        assert LocalFileAccessor().resolve("~/log.json") == b"{}"

    def test_missing_file_is_not_found(self, tmp_path):
        with pytest.raises(SourceNotFoundError) as exc_info:
            LocalFileAccessor().resolve(str(tmp_path / "missing.json"))

        assert exc_info.value.locator == str(tmp_path / "missing.json")

    def test_directory_is_not_found(self, tmp_path):
        with pytest.raises(SourceNotFoundError):
            LocalFileAccessor().resolve(str(tmp_path))

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="requires POSIX permissions as non-root")
    def test_unreadable_file_is_access_denied(self, tmp_path):
        path = tmp_path / "locked.json"
        path.write_bytes(b"{}")
        path.chmod(0)

        try:
            with pytest.raises(AccessDeniedError):
                LocalFileAccessor().resolve(str(path))
        finally:
            path.chmod(0o600)

    def test_errors_share_a_base_class(self):
        assert issubclass(AccessDeniedError, SourceAccessError)
        assert issubclass(SourceNotFoundError, SourceAccessError)
