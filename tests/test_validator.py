"""Tests for input file validation."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from subextract.validator import VIDEO_EXTENSIONS, has_video_extension, validate


class TestExtensionCheck:
    @pytest.mark.parametrize("name", ["a.mkv", "b.MP4", "c.M2TS", "d.ogv", "e.3gp"])
    def test_allowed(self, name: str) -> None:
        assert has_video_extension(name) is True

    @pytest.mark.parametrize("name", ["a.srt", "b.txt", "c", "d.mkv.part", "e.vob"])
    def test_rejected(self, name: str) -> None:
        assert has_video_extension(name) is False

    def test_allow_list_is_complete(self) -> None:
        assert VIDEO_EXTENSIONS == {
            ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm",
            ".m4v", ".3gp", ".ts", ".m2ts", ".mpg", ".mpeg", ".ogv",
        }


class TestValidate:
    def test_existing_video(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        video = tmp_path / "Movie.MKV"
        video.write_bytes(b"\0" * 2048)
        with caplog.at_level(logging.INFO):
            assert validate(video) is True
        assert "2.0 KB" in caplog.text

    def test_missing_file(self, tmp_path: Path) -> None:
        assert validate(tmp_path / "missing.mp4") is False

    def test_directory_rejected(self, tmp_path: Path) -> None:
        folder = tmp_path / "season.mkv"
        folder.mkdir()
        assert validate(folder) is False

    def test_existing_file_with_wrong_extension(self, tmp_path: Path) -> None:
        sub = tmp_path / "movie.srt"
        sub.write_text("1\n00:00:01,000 --> 00:00:02,000\nHi\n")
        assert validate(sub) is False

    def test_wrong_extension_never_touches_filesystem(self) -> None:
        with patch("pathlib.Path.is_file") as is_file, patch("pathlib.Path.stat") as stat:
            assert validate("/nowhere/notes.txt") is False
        is_file.assert_not_called()
        stat.assert_not_called()

    def test_content_is_not_inspected(self, tmp_path: Path) -> None:
        fake_video = tmp_path / "not_really.avi"
        fake_video.write_text("plain text")
        assert validate(fake_video) is True
