"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from jobportal import cli

runner = CliRunner()


@pytest.fixture
def logging_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "configure_logging", lambda: calls.append(True))
    return calls


def write_input(tmp_path, data):
    path = tmp_path / "match.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestScoreCommand:
    """The score command reads a JSON match description."""

    def test_scores_a_valid_file(self, tmp_path, logging_calls):
        path = write_input(tmp_path, {
            "candidate_skills": [{"name": "Python", "proficiency": "expert"}],
            "job_skills": [{"name": "Python", "is_required": True}],
        })

        result = runner.invoke(cli.app, ["score", str(path)])

        assert result.exit_code == 0
        assert "Skills match" in result.output
        assert logging_calls == [True]

    def test_skill_without_name_is_reported(self, tmp_path, logging_calls):
        path = write_input(tmp_path, {
            "candidate_skills": [{"proficiency": "expert"}],
            "job_skills": [{"name": "Python", "is_required": True}],
        })

        result = runner.invoke(cli.app, ["score", str(path)])

        assert result.exit_code == 1
        assert "Invalid skill entry" in result.output
        assert not isinstance(result.exception, KeyError)

    def test_invalid_json_is_reported(self, tmp_path, logging_calls):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        result = runner.invoke(cli.app, ["score", str(path)])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.output


def test_transitions_lists_every_status(logging_calls):
    result = runner.invoke(cli.app, ["transitions"])

    assert result.exit_code == 0
    assert "Terminal statuses: rejected, withdrawn" in result.output
