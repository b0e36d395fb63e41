import subprocess
from unittest import mock

import pytest

from rustlings.exercise import Exercise, Mode
from rustlings.verify import (
    ExerciseFailed,
    VerificationFailed,
    prompt_for_completion,
    test as run_tests,
    verify,
)

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"


@pytest.fixture(autouse=True)
def _workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_EMOJI", raising=False)


def make(tmp_path, name, source, mode=Mode.COMPILE, hint=""):
    path = tmp_path / f"{name}.rs"
    path.write_text(source, encoding="utf-8")
    return Exercise(name=name, path=path, mode=mode, hint=hint)


def fake_commands(compile_code=0, run_code=0, run_stdout=b"", compile_stderr=b"error[E0001]"):
    def fake(command, **kwargs):
        if command[0] in ("rustc", "cargo"):
            return subprocess.CompletedProcess(command, compile_code, b"", compile_stderr)
        return subprocess.CompletedProcess(command, run_code, run_stdout, b"run stderr")

    return fake


def test_prompt_done_returns_true_silently(tmp_path, capsys):
    exercise = make(tmp_path, "finished", FINISHED)
    assert prompt_for_completion(exercise, None, False) is True
    assert capsys.readouterr().out == ""


def test_prompt_pending_shows_context(tmp_path, capsys):
    exercise = make(tmp_path, "pending", PENDING)
    assert prompt_for_completion(exercise, None, False) is False
    out = capsys.readouterr().out
    assert "Successfully ran" in out
    assert "The code is compiling!" in out
    assert " 3 |  // I AM NOT DONE" in out
    assert " 1 |  // fake_exercise" in out
    assert " 5 |  fn main() {" in out
    assert " 6 |" not in out
    assert "`I AM NOT DONE`" in out


def test_prompt_shows_output_and_hints(tmp_path, capsys):
    exercise = make(tmp_path, "pending", PENDING, hint="look closer")
    assert prompt_for_completion(exercise, "hello from main", True) is False
    out = capsys.readouterr().out
    assert "Output:" in out
    assert "hello from main" in out
    assert "Hints:" in out
    assert "look closer" in out
    assert "=" * 20 in out


def test_prompt_without_emoji(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = make(tmp_path, "pending", PENDING, mode=Mode.TEST)
    assert prompt_for_completion(exercise, None, False) is False
    out = capsys.readouterr().out
    assert "~*~ The code is compiling, and the tests pass! ~*~" in out
    assert "Successfully tested" in out


def test_prompt_clippy_without_emoji(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = make(tmp_path, "pending", PENDING, mode=Mode.CLIPPY)
    prompt_for_completion(exercise, None, False)
    assert "The code is compiling, and Clippy is happy!" in capsys.readouterr().out


def test_test_compile_failure_raises(tmp_path, capsys):
    exercise = make(tmp_path, "broken", FINISHED, mode=Mode.TEST)
    with mock.patch("subprocess.run", side_effect=fake_commands(compile_code=1)):
        with pytest.raises(ExerciseFailed) as excinfo:
            run_tests(exercise, False)
    assert excinfo.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Compiling of {exercise} failed!" in out
    assert "error[E0001]" in out


def test_test_verbose_shows_output(tmp_path, capsys):
    exercise = make(tmp_path, "testSuccess", FINISHED, mode=Mode.TEST)
    fake = fake_commands(run_stdout=b"THIS TEST TOO SHALL PASS")
    with mock.patch("subprocess.run", side_effect=fake):
        run_tests(exercise, True)
    assert "THIS TEST TOO SHALL PASS" in capsys.readouterr().out


def test_test_quiet_hides_output(tmp_path, capsys):
    exercise = make(tmp_path, "testSuccess", FINISHED, mode=Mode.TEST)
    fake = fake_commands(run_stdout=b"THIS TEST TOO SHALL PASS")
    with mock.patch("subprocess.run", side_effect=fake):
        run_tests(exercise, False)
    assert "THIS TEST TOO SHALL PASS" not in capsys.readouterr().out


def test_test_run_failure_raises(tmp_path, capsys):
    exercise = make(tmp_path, "testNotPassed", FINISHED, mode=Mode.TEST)
    with mock.patch("subprocess.run", side_effect=fake_commands(run_code=101)):
        with pytest.raises(ExerciseFailed):
            run_tests(exercise, False)
    assert f"Testing of {exercise} failed!" in capsys.readouterr().out


def test_verify_all_done(tmp_path, capsys):
    exercises = [
        make(tmp_path, "one", FINISHED),
        make(tmp_path, "two", FINISHED, mode=Mode.TEST),
    ]
    with mock.patch("subprocess.run", side_effect=fake_commands()) as run_mock:
        assert verify(exercises, (0, 2), False, False) is None
    assert run_mock.call_count == 4
    err = capsys.readouterr().err
    assert "Progress: [" in err
    assert "2/2 (100.0 %)" in err


def test_verify_stops_at_pending(tmp_path):
    pending = make(tmp_path, "pending", PENDING)
    later = make(tmp_path, "later", FINISHED)
    with mock.patch("subprocess.run", side_effect=fake_commands()) as run_mock:
        with pytest.raises(VerificationFailed) as excinfo:
            verify([pending, later], (0, 2), False, False)
    assert excinfo.value.exercise is pending
    assert run_mock.call_count == 2


def test_verify_reports_compile_failure(tmp_path):
    first = make(tmp_path, "first", FINISHED)
    second = make(tmp_path, "second", FINISHED)

    def fake(command, **kwargs):
        if command[0] == "rustc" and "second" in command[1]:
            return subprocess.CompletedProcess(command, 1, b"", b"bad")
        return subprocess.CompletedProcess(command, 0, b"", b"")

    with mock.patch("subprocess.run", side_effect=fake):
        with pytest.raises(VerificationFailed) as excinfo:
            verify([first, second], (0, 2), False, False)
    assert excinfo.value.exercise is second


def test_verify_reports_run_failure(tmp_path, capsys):
    exercise = make(tmp_path, "crash", FINISHED)
    with mock.patch("subprocess.run", side_effect=fake_commands(run_code=1)):
        with pytest.raises(VerificationFailed) as excinfo:
            verify([exercise], (0, 1), False, False)
    assert excinfo.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Ran {exercise} with errors" in out
    assert "run stderr" in out