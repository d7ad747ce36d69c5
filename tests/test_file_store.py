"""Tests for local upload storage."""

import pytest

from summaryr.core.file_store import delete_file, read_file, save_upload


class TestSaveUpload:
    def test_layout(self, tmp_path):
        path = save_upload("videos", "user-1", "vid-1", ".MP3", b"data", base_dir=tmp_path)

        assert path == (tmp_path / "videos" / "user-1" / "vid-1.mp3").resolve()
        assert read_file(path) == b"data"

    def test_refuses_path_outside_uploads(self, tmp_path):
        uploads = tmp_path / "uploads"

        with pytest.raises(ValueError, match="escapes"):
            save_upload("documents", "../../escaped", "doc-1", "pdf", b"x", base_dir=uploads)

        assert not (tmp_path / "escaped").exists()
        assert list(tmp_path.rglob("*.pdf")) == []


class TestDeleteFile:
    def test_removes_file(self, tmp_path):
        path = save_upload("videos", "user-1", "vid-1", "mp4", b"data", base_dir=tmp_path)

        assert delete_file(path) is True
        assert not path.exists()

    def test_missing_or_empty_path(self, tmp_path):
        assert delete_file(None) is False
        assert delete_file(tmp_path / "nope.mp4") is False
