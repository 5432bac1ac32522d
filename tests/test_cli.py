"""CLI integration: argument handling, mode selection and exit codes."""

import io
import logging
from pathlib import Path
from typing import List, Optional
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from subextract import cli
from subextract.extractor import ExtractionOutcome
from subextract.lister import StreamDescriptor

STREAMS = [
    StreamDescriptor(index=2, codec_name="subrip", language="eng", title="English", position=0),
    StreamDescriptor(index=3, codec_name="ass", language="jpn", title="Signs", position=1),
    StreamDescriptor(index=4, codec_name="hdmv_pgs_subtitle", position=2),
]


@pytest.fixture
def video(tmp_path: Path) -> Path:
    path = tmp_path / "movie.mkv"
    path.write_bytes(b"\0" * 100)
    return path


class CliRun:
    """Runs ``cli.main`` with the external tools replaced."""

    def __init__(self, available: bool = True, streams: Optional[List[StreamDescriptor]] = None,
                 results: Optional[List[bool]] = None) -> None:
        self.available = available
        self.streams = STREAMS if streams is None else streams
        self.results = results
        self.output = io.StringIO()
        self.extract = MagicMock(side_effect=self._extract)

    def _extract(self, video_file, stream, output_dir, number):
        ok = True if self.results is None else self.results[number - 1]
        path = Path(output_dir) / f"{Path(video_file).stem}_subtitle_{number}.srt"
        if ok:
            path.write_text("1\n00:00:01,000 --> 00:00:02,000\nHello\n")
        return ExtractionOutcome(ok, path, path.stat().st_size if ok else 0, "v" if ok else None)

    def __call__(self, argv: List[str]) -> int:
        with patch("subextract.cli.setup_logging"), \
             patch("subextract.cli.load_config", return_value={}), \
             patch("subextract.workflow.check_available",
                   return_value=(self.available, "6.1" if self.available else "")), \
             patch("subextract.lister.StreamLister.list_streams", return_value=list(self.streams)), \
             patch("subextract.extractor.StreamExtractor.extract", self.extract):
            return cli.main(argv, console=Console(file=self.output, width=120))


class TestBatchMode:
    def test_list_only(self, video: Path) -> None:
        run = CliRun()
        assert run(["--list", str(video)]) == 0
        run.extract.assert_not_called()
        assert "English" in run.output.getvalue()

    def test_toolkit_unavailable(self, video: Path) -> None:
        run = CliRun(available=False)
        assert run(["--list", str(video)]) == 1

    def test_missing_input(self, tmp_path: Path) -> None:
        assert CliRun()(["--list", str(tmp_path / "nope.mkv")]) == 1

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        doc = tmp_path / "notes.txt"
        doc.write_text("x")
        assert CliRun()(["--all", str(doc)]) == 1

    def test_no_streams(self, video: Path) -> None:
        assert CliRun(streams=[])(["--list", str(video)]) == 1

    def test_extract_all(self, video: Path, tmp_path: Path) -> None:
        run = CliRun(results=[True, True, False])
        out_dir = tmp_path / "subs"
        assert run(["--all", "--output-dir", str(out_dir), str(video)]) == 0
        assert run.extract.call_count == 3
        assert out_dir.is_dir()
        assert "Extracted 2/3 subtitle stream(s)" in run.output.getvalue()

    def test_extract_all_nothing_extracted(self, video: Path) -> None:
        run = CliRun(results=[False, False, False])
        assert run(["--all", str(video)]) == 0
        assert run.extract.call_count == 3
        assert "Extracted 0/3" in run.output.getvalue()

    def test_extract_all_defaults_to_video_folder(self, video: Path) -> None:
        run = CliRun()
        run(["--all", str(video)])
        assert run.extract.call_args.args[2] == video.resolve().parent

    def test_extract_specific_stream(self, video: Path) -> None:
        run = CliRun()
        assert run(["--stream", "2", str(video)]) == 0
        run.extract.assert_called_once()
        args = run.extract.call_args.args
        assert args[1] == STREAMS[1]
        assert args[3] == 2

    @pytest.mark.parametrize("number", ["0", "4"])
    def test_out_of_range_stream_rejected(self, video: Path, number: str) -> None:
        run = CliRun()
        assert run(["--stream", number, str(video)]) == 1
        run.extract.assert_not_called()

    def test_specific_stream_failure_is_reported(self, video: Path, caplog: pytest.LogCaptureFixture) -> None:
        run = CliRun(results=[True, True, False])
        with caplog.at_level(logging.ERROR):
            assert run(["--stream", "3", str(video)]) == 0
        assert "Saved" not in run.output.getvalue()
        assert any("stream 3" in r.getMessage().lower() for r in caplog.records)

    def test_output_dir_cannot_be_created(self, video: Path, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        run = CliRun()
        assert run(["--all", "-o", str(blocker / "subs"), str(video)]) == 1
        run.extract.assert_not_called()

    def test_modes_are_exclusive(self, video: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            CliRun()(["--all", "--list", str(video)])
        assert exc_info.value.code == 2

    def test_probe_limit_must_be_positive(self, video: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            CliRun()(["--list", "--probe-limit", "0", str(video)])
        assert exc_info.value.code == 2


class TestInteractiveFallthrough:
    def test_no_arguments_starts_session(self) -> None:
        with patch("subextract.cli.InteractiveSession") as session_cls:
            session_cls.return_value.run.return_value = 0
            assert CliRun()([]) == 0
        session_cls.return_value.run.assert_called_once_with(None)

    def test_interactive_flag_with_file(self, video: Path) -> None:
        with patch("subextract.cli.InteractiveSession") as session_cls:
            session_cls.return_value.run.return_value = 0
            CliRun()(["-i", str(video)])
        session_cls.return_value.run.assert_called_once_with(video)

    def test_file_without_mode_opens_menu_with_streams(self, video: Path) -> None:
        with patch("subextract.cli.InteractiveSession") as session_cls:
            session_cls.return_value.run.return_value = 0
            assert CliRun()([str(video)]) == 0
        session_cls.return_value.run.assert_called_once_with(video, STREAMS, check_toolkit=False)

    def test_override_paths_reach_session(self) -> None:
        with patch("subextract.cli.InteractiveSession") as session_cls:
            session_cls.return_value.run.return_value = 0
            CliRun()(["--ffmpeg", "/x/ffmpeg", "--ffprobe", "/x/ffprobe"])
        toolkit = session_cls.call_args.args[0]
        assert (toolkit.ffmpeg_path, toolkit.ffprobe_path) == ("/x/ffmpeg", "/x/ffprobe")
