import pytest

from rustlings import ui


@pytest.fixture(autouse=True)
def _plain_terminal(monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("FORCE_COLOR", raising=False)


def test_use_emoji_follows_environment(monkeypatch):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    assert ui.use_emoji() is True
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.use_emoji() is False


def test_warn_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("Ran exercises/foo.rs with errors")
    out = capsys.readouterr().out
    assert out.strip() == "! Ran exercises/foo.rs with errors"


def test_warn_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.warn("Compilation failed [x]")
    out = capsys.readouterr().out
    assert "⚠️" in out
    assert "Compilation failed [x]" in out


def test_success_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("Successfully ran exercises/foo.rs")
    out = capsys.readouterr().out
    assert out.strip() == "✓ Successfully ran exercises/foo.rs"


def test_success_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.success("Successfully tested it")
    out = capsys.readouterr().out
    assert "✅" in out
    assert "Successfully tested it" in out


def test_bold_keeps_text():
    styled = ui.bold("`I AM NOT DONE`")
    assert styled.plain == "`I AM NOT DONE`"
    assert str(styled.style) == "bold"


def test_bold_converts_numbers():
    assert ui.bold(12).plain == "12"