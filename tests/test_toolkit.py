"""Tests for ffmpeg/ffprobe availability checks."""

import subprocess
from unittest.mock import patch

from subextract.toolkit import ToolkitConfig, check_available

FFMPEG_BANNER = "ffmpeg version 6.1.1-3ubuntu5 Copyright (c) 2000-2023 the FFmpeg developers\nbuilt with gcc 13\n"
FFPROBE_BANNER = "ffprobe version 6.1.1-3ubuntu5 Copyright (c) 2007-2023 the FFmpeg developers\n"


def _completed(returncode: int = 0, stdout: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr="")


def _tools(ffmpeg_out: str = FFMPEG_BANNER, ffprobe_out: str = FFPROBE_BANNER, returncode: int = 0):
    def fake(cmd, **kwargs):
        out = ffprobe_out if "ffprobe" in cmd[0] else ffmpeg_out
        return _completed(returncode, out)
    return fake


class TestCheckAvailable:
    def test_available(self) -> None:
        with patch("subextract.toolkit.subprocess.run", side_effect=_tools()):
            assert check_available(ToolkitConfig()) == (True, "6.1.1-3ubuntu5")

    def test_executable_missing(self) -> None:
        with patch("subextract.toolkit.subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
            assert check_available(ToolkitConfig()) == (False, "")

    def test_permission_denied(self) -> None:
        with patch("subextract.toolkit.subprocess.run", side_effect=PermissionError("denied")):
            available, _ = check_available(ToolkitConfig())
        assert available is False

    def test_unexpected_banner(self) -> None:
        with patch("subextract.toolkit.subprocess.run", side_effect=_tools(ffmpeg_out="usage: something else\n")):
            assert check_available(ToolkitConfig()) == (False, "")

    def test_ffprobe_must_work_too(self) -> None:
        with patch("subextract.toolkit.subprocess.run", side_effect=_tools(ffprobe_out="")):
            available, _ = check_available(ToolkitConfig())
        assert available is False

    def test_nonzero_exit(self) -> None:
        with patch("subextract.toolkit.subprocess.run", side_effect=_tools(returncode=1)):
            available, _ = check_available(ToolkitConfig())
        assert available is False

    def test_uses_override_paths(self) -> None:
        seen = []

        def fake(cmd, **kwargs):
            seen.append(cmd)
            return _tools()(cmd)

        config = ToolkitConfig(ffmpeg_path="/opt/ff/ffmpeg", ffprobe_path="/opt/ff/ffprobe")
        with patch("subextract.toolkit.subprocess.run", side_effect=fake):
            check_available(config)
        assert seen == [["/opt/ff/ffmpeg", "-version"], ["/opt/ff/ffprobe", "-version"]]


class TestToolkitConfig:
    def test_defaults(self) -> None:
        config = ToolkitConfig()
        assert (config.ffmpeg_path, config.ffprobe_path, config.probe_limit) == ("ffmpeg", "ffprobe", 10)

    def test_with_ffmpeg_derives_sibling_ffprobe(self) -> None:
        config = ToolkitConfig(probe_limit=3).with_ffmpeg("/opt/ffmpeg/bin/ffmpeg")
        assert config.ffmpeg_path == "/opt/ffmpeg/bin/ffmpeg"
        assert config.ffprobe_path == "/opt/ffmpeg/bin/ffprobe"
        assert config.probe_limit == 3

    def test_with_ffmpeg_keeps_exe_suffix(self) -> None:
        config = ToolkitConfig().with_ffmpeg("tools/ffmpeg.exe")
        assert config.ffprobe_path == "tools/ffprobe.exe"

    def test_with_ffmpeg_bare_name(self) -> None:
        assert ToolkitConfig().with_ffmpeg("ffmpeg").ffprobe_path == "ffprobe"

    def test_original_unchanged(self) -> None:
        config = ToolkitConfig()
        config.with_ffmpeg("/x/ffmpeg")
        assert config.ffmpeg_path == "ffmpeg"
