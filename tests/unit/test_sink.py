"""
Unit tests for the output sink and input reading (playback.sink)
"""

import pytest
import os
import sys

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.errors import IOFailure, ReplayError
from playback.sink import FileSink, read_input


class TestReadInput:
    """Test cases for read_input"""

    def test_reads_bytes(self, tmp_path):
        path = tmp_path / "in.modraw"
        path.write_bytes(b"T0000000001$EFE*4C\r\n")
        assert read_input(path) == b"T0000000001$EFE*4C\r\n"

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.modraw"
        with pytest.raises(IOFailure) as exc:
            read_input(path)
        assert exc.value.path == str(path)
        assert "cannot read input" in str(exc.value)

    def test_folder_instead_of_file(self, tmp_path):
        with pytest.raises(IOFailure) as exc:
            read_input(tmp_path)
        assert exc.value.path == str(tmp_path)
        assert isinstance(exc.value, ReplayError)


class TestFileSink:
    """Test cases for FileSink"""

    def test_reset_removes_existing_output(self, tmp_path):
        path = tmp_path / "out.modraw"
        path.write_bytes(b"stale")
        sink = FileSink(path)
        sink.reset()
        assert not path.exists()

    def test_reset_on_missing_output_is_fine(self, tmp_path):
        FileSink(tmp_path / "never-written.modraw").reset()

    def test_reset_cannot_delete_folder(self, tmp_path):
        path = tmp_path / "out.modraw"
        path.mkdir()
        (path / "keep.txt").write_text("x")
        with pytest.raises(IOFailure) as exc:
            FileSink(path).reset()
        assert exc.value.path == str(path)
        assert "cannot delete existing output" in str(exc.value)
        assert (path / "keep.txt").exists()

    def test_write_appends_and_creates_parents(self, tmp_path):
        path = tmp_path / "nested" / "out.modraw"
        with FileSink(path) as sink:
            sink.write(b"abc")
            sink.write(b"def")
            # flushed after every write
            assert path.read_bytes() == b"abcdef"
        assert sink.bytes_written == 6

    def test_write_into_folder_path(self, tmp_path):
        path = tmp_path / "out.modraw"
        path.mkdir()
        with FileSink(path) as sink, pytest.raises(IOFailure) as exc:
            sink.write(b"abc")
        assert exc.value.path == str(path)
