"""Tests for explainer.cli."""

from __future__ import annotations

import pytest

from explainer import cli
from explainer.errors import FailureReason
from explainer.reasoning import AnalysisOutcome
from tests.unit.conftest import make_steps


@pytest.fixture
def fake_explain(monkeypatch):
    calls = []
    outcome = {"value": AnalysisOutcome(steps=tuple(make_steps(2)), attempts=1)}

    async def _explain(source, language, config=None, llm_client=None):
        calls.append({"source": source, "language": language, "config": config})
        return outcome["value"]

    monkeypatch.setattr(cli, "explain_source", _explain)
    return calls, outcome


class TestMain:
    def test_explains_file_once(self, tmp_path, capsys, fake_explain):
        calls, _ = fake_explain
        path = tmp_path / "main.py"
        path.write_text("print(1)\n")

        assert cli.main([str(path), "--max-attempts", "5"]) == 0

        out = capsys.readouterr().out
        assert "Steps (2)" in out
        assert "step 0" in out
        assert calls[0]["language"] == "python"
        assert calls[0]["config"].max_attempts == 5

    def test_explicit_language_wins(self, tmp_path, fake_explain):
        calls, _ = fake_explain
        path = tmp_path / "main.txt"
        path.write_text("x")
        cli.main([str(path), "--language", "cpp"])
        assert calls[0]["language"] == "cpp"

    def test_demo_when_no_file(self, capsys, fake_explain):
        calls, _ = fake_explain
        assert cli.main([]) == 0
        assert "built-in demo" in capsys.readouterr().out
        assert calls[0]["source"] == cli.DEMO_SOURCE

    def test_exhausted_exits_nonzero(self, tmp_path, capsys, fake_explain):
        _, outcome = fake_explain
        outcome["value"] = AnalysisOutcome(failure=FailureReason.EXHAUSTED, attempts=3)
        path = tmp_path / "main.js"
        path.write_text("console.log(1)")
        assert cli.main([str(path)]) == 1
        assert "Analysis unavailable" in capsys.readouterr().err

    def test_watch_requires_file(self, capsys):
        assert cli.main(["--watch"]) == 2


class TestPollFile:
    def test_missing_file_reports_no_change(self, tmp_path):
        path = str(tmp_path / "gone.py")
        assert cli._poll_file(path, 12.5) == (12.5, None)

    def test_first_poll_reads_contents(self, tmp_path):
        source = tmp_path / "prog.py"
        source.write_text("x = 1\n")
        mtime, code = cli._poll_file(str(source), None)
        assert code == "x = 1\n"
        assert mtime == source.stat().st_mtime

    def test_unchanged_file_not_reread(self, tmp_path):
        source = tmp_path / "prog.py"
        source.write_text("x = 1\n")
        mtime, _ = cli._poll_file(str(source), None)
        assert cli._poll_file(str(source), mtime) == (mtime, None)
