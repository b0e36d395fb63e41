"""Watch mode: re-verify exercises whenever a source file changes."""

from __future__ import annotations

import queue
import subprocess
import sys
import threading
from collections.abc import Sequence
from enum import Enum, auto
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from rustlings.exercise import Exercise
from rustlings.verify import VerificationFailed, verify

HELP_TEXT = """Commands available to you in watch mode:
  hint   - prints the current exercise's hint
  clear  - clears the screen
  quit   - quits watch mode
  !<cmd> - executes a command, like `!rustc --explain E0381`
  help   - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(Enum):
    """How watch mode ended."""

    FINISHED = auto()
    UNFINISHED = auto()


class WatchShell:
    """The command prompt that runs alongside watch mode."""

    def __init__(self, hint: str | None = None) -> None:
        self.hint = hint
        self.should_quit = threading.Event()

    def handle(self, line: str) -> None:
        """Carry out one command typed by the user."""
        command = line.strip()
        if command == "hint":
            if self.hint is not None:
                print(self.hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(HELP_TEXT)
        elif command.startswith("!"):
            cmd = command[1:]
            parts = cmd.split()
            if not parts:
                print("no command provided")
                return
            try:
                subprocess.call(parts)
            except OSError as err:
                print(f"failed to execute command `{cmd}`: {err}")
        else:
            print(f"unknown command: {command}")

    def _serve(self) -> None:
        while True:
            try:
                line = sys.stdin.readline()
            except (OSError, ValueError) as err:
                print(f"error reading command: {err}")
                continue
            if not line:
                return
            self.handle(line)

    def start(self) -> threading.Thread:
        """Read commands from standard input on a background thread."""
        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        thread = threading.Thread(target=self._serve, daemon=True)
        thread.start()
        return thread


def _ends_with(path: Path, suffix: Path) -> bool:
    parts = suffix.parts
    return bool(parts) and path.parts[-len(parts):] == parts


def pending_after_change(
    exercises: Sequence[Exercise], changed_path: str | Path
) -> list[Exercise]:
    """Return the changed exercise first, then every other unfinished one in order."""
    filepath = Path(changed_path).resolve()
    changed = next((e for e in exercises if _ends_with(filepath, e.path)), None)
    rest = [
        e for e in exercises if not _ends_with(filepath, e.path) and not e.looks_done()
    ]
    return ([changed] if changed is not None else []) + rest


class _ChangeCollector(FileSystemEventHandler):
    def __init__(self, changes: queue.Queue[Path]) -> None:
        super().__init__()
        self._changes = changes

    def _collect(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._changes.put(Path(str(event.src_path)))

    def on_created(self, event: FileSystemEvent) -> None:
        self._collect(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._collect(event)


def _clear_screen() -> None:
    print("\x1bc")


def watch(
    exercises: Sequence[Exercise], verbose: bool, success_hints: bool
) -> WatchStatus:
    """Verify the exercises, then again on every edit until all are done or the user quits."""
    changes: queue.Queue[Path] = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeCollector(changes), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
        except VerificationFailed as failed:
            shell = WatchShell(failed.exercise.hint)
        else:
            return WatchStatus.FINISHED
        shell.start()

        while True:
            try:
                path = changes.get(timeout=1.0)
            except queue.Empty:
                path = None
            if path is not None and path.suffix == ".rs" and path.exists():
                pending = pending_after_change(exercises, path)
                num_done = sum(1 for e in exercises if e.looks_done())
                _clear_screen()
                try:
                    verify(pending, (num_done, len(exercises)), verbose, success_hints)
                except VerificationFailed as failed:
                    shell.hint = failed.exercise.hint
                else:
                    return WatchStatus.FINISHED
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()