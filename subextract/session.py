"""Menu-driven interactive mode."""

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence

from rich.console import Console
from rich.markup import escape

from .display import run_extract_all, show_streams
from .extractor import StreamExtractor
from .lister import StreamDescriptor, StreamLister
from .toolkit import ToolkitConfig
from .validator import VIDEO_EXTENSIONS
from .workflow import (
    DirectoryCreateFailed,
    InvalidSelection,
    SubExtractError,
    ToolkitUnavailable,
    ensure_output_dir,
    extract_one,
    load_streams,
    pick_stream,
    require_toolkit,
)

INVALID_CHOICE_PAUSE = 1.5


class PathProvider(Protocol):
    """Source of file and folder paths picked by the user."""

    def ask_open_file(self, title: str) -> Optional[Path]:
        ...

    def ask_directory(self, title: str) -> Optional[Path]:
        ...


class TkPathProvider:
    """Native open-file / choose-folder dialogs through tkinter.

    Returns ``None`` when the dialog is cancelled or no display is available.
    """

    def ask_open_file(self, title: str) -> Optional[Path]:
        patterns = " ".join(f"*{ext}" for ext in sorted(VIDEO_EXTENSIONS))
        return self._ask(
            "askopenfilename",
            title=title,
            filetypes=[("Video files", patterns), ("All files", "*.*")],
        )

    def ask_directory(self, title: str) -> Optional[Path]:
        return self._ask("askdirectory", title=title, mustexist=False)

    @staticmethod
    def _ask(dialog: str, **options) -> Optional[Path]:
        import tkinter
        from tkinter import filedialog

        try:
            root = tkinter.Tk()
        except tkinter.TclError as exc:
            logging.warning(f"File dialog unavailable ({exc}); enter the path manually instead.")
            return None
        try:
            root.withdraw()
            root.attributes("-topmost", True)
            selected = getattr(filedialog, dialog)(parent=root, **options)
        finally:
            root.destroy()
        return Path(selected) if selected else None


class InteractiveSession:
    """Guides the user from file selection to extracted subtitles.

    The loop only ends through the explicit *Exit* choice; every reported
    problem leads back to the main menu.
    """

    MAIN_MENU = ["Select a video file", "Enter a file path manually", "Exit"]
    EXTRACTION_MENU = [
        "Extract all subtitle streams",
        "Extract one subtitle stream",
        "Return to main menu",
    ]
    OUTPUT_MENU = [
        "Same folder as the video",
        "Choose a folder",
        "Enter a folder path",
    ]

    def __init__(
        self,
        config: Optional[ToolkitConfig] = None,
        path_provider: Optional[PathProvider] = None,
        console: Optional[Console] = None,
        input_func: Optional[Callable[[str], str]] = None,
        pause: Optional[Callable[[], None]] = None,
        output_dir: Optional[Path] = None,
    ) -> None:
        self.config = config or ToolkitConfig()
        self.path_provider = path_provider or TkPathProvider()
        self.console = console or Console()
        self.input_func = input_func or self.console.input
        self.pause = pause or (lambda: time.sleep(INVALID_CHOICE_PAUSE))
        # Preset output folder (from --output-dir); skips the folder menu.
        self.output_dir = output_dir
        self.lister = StreamLister(self.config)
        self.extractor = StreamExtractor(self.config)

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def _ask(self, prompt: str) -> str:
        return self.input_func(prompt).strip().strip('"').strip("'")

    def _choose(self, title: str, options: Sequence[str]) -> int:
        """Show a numbered menu until a valid choice is made; return it 1-based."""
        while True:
            self.console.print(f"\n[bold cyan]{title}[/bold cyan]")
            for number, option in enumerate(options, start=1):
                self.console.print(f"  {number}) {option}")
            answer = self._ask(f"Choose 1-{len(options)}: ")
            try:
                number = int(answer)
            except ValueError:
                number = 0
            if 1 <= number <= len(options):
                return number
            self.console.print(f"[red]Invalid choice: {escape(answer) or '(empty)'}[/red]")
            self.pause()

    # ------------------------------------------------------------------
    # Toolkit gate
    # ------------------------------------------------------------------

    def ensure_toolkit(self) -> bool:
        """Probe ffmpeg, asking for its location until it works or the user gives up."""
        while True:
            try:
                version = require_toolkit(self.config)
            except ToolkitUnavailable as exc:
                logging.error(str(exc))
                answer = self._ask("Path to the ffmpeg executable (blank to quit): ")
                if not answer:
                    return False
                self._use_config(self.config.with_ffmpeg(answer))
                continue
            self.console.print(f"[green]ffmpeg {escape(version)} found[/green]")
            return True

    def _use_config(self, config: ToolkitConfig) -> None:
        self.config = config
        self.lister = StreamLister(config)
        self.extractor = StreamExtractor(config)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(
        self,
        video_file: Optional[Path] = None,
        streams: Optional[List[StreamDescriptor]] = None,
        check_toolkit: bool = True,
    ) -> int:
        """Run the menu loop; return the process exit status.

        *video_file* (with its already listed *streams*, if any) is handled
        before the main menu is first shown.
        """
        try:
            return self._loop(video_file, streams, check_toolkit)
        except (EOFError, KeyboardInterrupt):
            # End of input at any prompt counts as choosing Exit.
            self.console.print("\nGoodbye.")
            return 0

    def _loop(
        self,
        video_file: Optional[Path],
        streams: Optional[List[StreamDescriptor]],
        check_toolkit: bool,
    ) -> int:
        if check_toolkit and not self.ensure_toolkit():
            return 1

        if video_file is not None:
            self.process_file(Path(video_file), streams)

        while True:
            choice = self._choose("Main menu", self.MAIN_MENU)
            if choice == 1:
                selected = self.path_provider.ask_open_file("Select a video file")
                if selected is None:
                    self.console.print("No file selected.")
                    continue
                self.process_file(selected)
            elif choice == 2:
                answer = self._ask("Video file path: ")
                if answer:
                    self.process_file(Path(answer).expanduser())
            else:
                self.console.print("Goodbye.")
                return 0

    def process_file(
        self, video_file: Path, streams: Optional[List[StreamDescriptor]] = None
    ) -> None:
        """Validate, list and extract from *video_file*; errors are reported, not raised."""
        if streams is None:
            try:
                streams = load_streams(self.lister, video_file)
            except SubExtractError as exc:
                logging.error(str(exc))
                return
            show_streams(video_file, streams, self.console)

        choice = self._choose("What would you like to do?", self.EXTRACTION_MENU)
        if choice == 3:
            return

        selected: Optional[int] = None
        if choice == 2:
            selected = self._ask_stream_number(streams)
            if selected is None:
                return

        output_dir = self._select_output_dir(video_file)
        if output_dir is None:
            return

        if selected is None:
            run_extract_all(self.extractor, video_file, streams, output_dir, self.console)
            return
        try:
            outcome = extract_one(
                self.extractor, video_file, streams[selected - 1], output_dir, selected
            )
        except SubExtractError as exc:
            logging.error(str(exc))
            return
        self.console.print(f"[green]Saved {escape(str(outcome.output_path))}[/green]")

    def _ask_stream_number(self, streams: List[StreamDescriptor]) -> Optional[int]:
        """Return a valid 1-based stream number, or None when the user backs out."""
        while True:
            answer = self._ask(f"Stream number (1-{len(streams)}, blank to cancel): ")
            if not answer:
                return None
            try:
                number = int(answer)
                pick_stream(streams, number)
            except ValueError:
                self.console.print(f"[red]Not a number: {escape(answer)}[/red]")
            except InvalidSelection as exc:
                self.console.print(f"[red]{escape(str(exc))}[/red]")
            else:
                return number
            self.pause()

    def _select_output_dir(self, video_file: Path) -> Optional[Path]:
        """Resolve and create the output folder; None when it cannot be created."""
        if self.output_dir is not None:
            target = self.output_dir
        else:
            choice = self._choose("Where should the subtitles go?", self.OUTPUT_MENU)
            target = None
            if choice == 2:
                target = self.path_provider.ask_directory("Choose the output folder")
            elif choice == 3:
                answer = self._ask("Output folder: ")
                target = Path(answer).expanduser() if answer else None
            if target is None:
                target = Path(video_file).resolve().parent

        try:
            return ensure_output_dir(target)
        except DirectoryCreateFailed as exc:
            logging.error(str(exc))
            return None
