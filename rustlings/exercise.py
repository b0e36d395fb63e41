"""Exercises: loading, compiling, running and checking their state."""

from __future__ import annotations

import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rustlings.ui import use_emoji

RUSTC_COLOR_ARGS = ("--color", "always")
RUSTC_EDITION_ARGS = ("--edition", "2021")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"
BUILD_SCRIPT_CARGO_TOML_PATH = "./exercises/tests/Cargo.toml"


def temp_file_path() -> str:
    """Return a temporary binary path unique to this process and thread."""
    return f"./temp_{os.getpid()}_{threading.get_ident()}"


def clean() -> None:
    """Remove the temporary binary, if there is one."""
    try:
        os.remove(temp_file_path())
    except OSError:
        pass


class Mode(Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"
    BUILD_SCRIPT = "buildscript"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the pending marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured output of a finished command."""

    stdout: str
    stderr: str

    @classmethod
    def from_process(cls, result: subprocess.CompletedProcess) -> ExerciseOutput:
        return cls(
            stdout=(result.stdout or b"").decode("utf-8", errors="replace"),
            stderr=(result.stderr or b"").decode("utf-8", errors="replace"),
        )


class CompilationError(Exception):
    """Raised when an exercise fails to compile."""

    def __init__(self, exercise: Exercise, output: ExerciseOutput) -> None:
        super().__init__(f"compilation of {exercise} failed")
        self.exercise = exercise
        self.output = output


class RunError(Exception):
    """Raised when a compiled exercise exits unsuccessfully."""

    def __init__(self, exercise: Exercise, output: ExerciseOutput) -> None:
        super().__init__(f"running {exercise} failed")
        self.exercise = exercise
        self.output = output


def _source_lines(source: str) -> list[str]:
    parts = source.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part[:-1] if part.endswith("\r") else part for part in parts]


def _rustc(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["rustc", *args, *RUSTC_COLOR_ARGS, *RUSTC_EDITION_ARGS],
        capture_output=True,
    )


def _cargo(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(["cargo", *args], capture_output=True)


@dataclass
class Exercise:
    """One exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def _manifest(self) -> str:
        return (
            "[package]\n"
            f'name = "{self.name}"\n'
            'version = "0.0.1"\n'
            'edition = "2021"\n'
            "[[bin]]\n"
            f'name = "{self.name}"\n'
            f'path = "{self.name}.rs"'
        )

    def _write_manifest(self, target: str) -> None:
        try:
            Path(target).write_text(self._manifest(), encoding="utf-8")
        except OSError as err:
            message = (
                "Failed to write 📎 Clippy 📎 Cargo.toml file."
                if use_emoji()
                else "Failed to write Clippy Cargo.toml file."
            )
            raise OSError(message) from err

    def compile(self) -> CompiledExercise:
        """Compile the exercise; raise CompilationError on failure."""
        temp = temp_file_path()
        source = str(self.path)
        match self.mode:
            case Mode.COMPILE:
                result = _rustc(source, "-o", temp)
            case Mode.TEST:
                result = _rustc("--test", source, "-o", temp)
            case Mode.CLIPPY:
                self._write_manifest(CLIPPY_CARGO_TOML_PATH)
                # Build a binary as well so clippy exercises can be run.
                _rustc(source, "-o", temp)
                # A clean is needed for clippy to report every lint.
                _cargo("clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH, *RUSTC_COLOR_ARGS)
                result = _cargo(
                    "clippy",
                    "--manifest-path",
                    CLIPPY_CARGO_TOML_PATH,
                    *RUSTC_COLOR_ARGS,
                    "--",
                    "-D",
                    "warnings",
                    "-D",
                    "clippy::float_cmp",
                )
            case Mode.BUILD_SCRIPT:
                self._write_manifest(BUILD_SCRIPT_CARGO_TOML_PATH)
                result = _cargo("test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH)

        if result.returncode == 0:
            return CompiledExercise(self)
        clean()
        raise CompilationError(self, ExerciseOutput.from_process(result))

    def _run(self) -> ExerciseOutput:
        match self.mode:
            case Mode.BUILD_SCRIPT:
                return ExerciseOutput(stdout="", stderr="")
            case Mode.TEST:
                command = [temp_file_path(), "--show-output"]
            case _:
                command = [temp_file_path()]
        result = subprocess.run(command, capture_output=True)
        output = ExerciseOutput.from_process(result)
        if result.returncode != 0:
            raise RunError(self, output)
        return output

    def state(self) -> list[ContextLine] | None:
        """Return the lines around the pending marker, or None when done."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return None

        lines = _source_lines(source)
        matched = next(
            (i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line)),
            None,
        )
        if matched is None:
            raise RuntimeError(f"pending marker in {self} does not fit on one line")

        first = max(matched - CONTEXT, 0)
        last = matched + CONTEXT
        return [
            ContextLine(line=line, number=i + 1, important=i == matched)
            for i, line in enumerate(lines[first : last + 1], start=first)
        ]

    def looks_done(self) -> bool:
        """Return True when the pending marker has been removed."""
        return self.state() is None


class CompiledExercise:
    """A successfully compiled exercise; its binary is removed on close."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise

    def run(self) -> ExerciseOutput:
        """Run the compiled exercise; raise RunError on failure."""
        return self.exercise._run()

    def close(self) -> None:
        """Remove the compiled binary."""
        clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def load_exercises(path: str | os.PathLike) -> list[Exercise]:
    """Read the exercise list from an info.toml file."""
    with open(path, "rb") as handle:
        data = tomllib.load(handle)
    try:
        return [
            Exercise(
                name=entry["name"],
                path=Path(entry["path"]),
                mode=Mode(entry["mode"]),
                hint=entry["hint"],
            )
            for entry in data["exercises"]
        ]
    except KeyError as err:
        raise ValueError(f"missing field {err.args[0]!r} in {path}") from err