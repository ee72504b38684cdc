"""Tests for the CLI entry point."""

import json
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from reviewapps_cli.cli import main
from reviewapps_core.heroku.client import HerokuClient, HerokuError
from reviewapps_core.models import Outcome, ReviewApp


def _make_config(**overrides):
    config = {
        "heroku_api_token": "heroku-token",
        "github_token": "gh-token",
        "pipeline_id": "pipe-1",
        "event_path": None,
        "repository": "owner/repo",
        "action": None,
        "heroku_api_url": "https://api.heroku.com",
        "request_timeout": 30,
        "fail_on_error": False,
    }
    config.update(overrides)
    return config


def _write_event(tmp_path, fork=False):
    path = tmp_path / "event.json"
    path.write_text(
        json.dumps(
            {
                "pull_request": {
                    "number": 7,
                    "head": {"ref": "feature/login", "sha": "abc123", "repo": {"fork": fork}},
                },
                "repository": {"name": "repo", "owner": {"login": "owner"}},
            }
        )
    )
    return str(path)


def _patch_config(mocker, config=None):
    cfg = config or _make_config()
    mocker.patch("reviewapps_core.config.load_config", return_value=cfg)
    return cfg


@pytest.fixture(autouse=True)
def _outside_actions(monkeypatch):
    monkeypatch.delenv("GITHUB_ACTIONS", raising=False)


class TestRunCommand:
    def test_passes_cli_overrides_to_run_action(self, mocker, tmp_path):
        _patch_config(mocker)
        mock_run = mocker.patch(
            "reviewapps_cli.commands.run.run_action",
            return_value=Outcome(action="destroy", status="destroyed", app_id="a1"),
        )
        event_path = _write_event(tmp_path)

        result = CliRunner().invoke(
            main, ["run", "--action", "destroy", "--event", event_path, "--pipeline", "pipe-cli"]
        )

        assert result.exit_code == 0
        config, event = mock_run.call_args.args
        assert config["action"] == "destroy"
        assert config["pipeline_id"] == "pipe-cli"
        assert event["pull_request"]["number"] == 7

    def test_action_falls_back_to_input(self, mocker, tmp_path):
        _patch_config(mocker, _make_config(action="update", event_path=_write_event(tmp_path)))
        mock_run = mocker.patch(
            "reviewapps_cli.commands.run.run_action",
            return_value=Outcome(action="update", status="updated"),
        )

        CliRunner().invoke(main, ["run"])

        assert mock_run.call_args.args[0]["action"] == "update"

    def test_missing_event_is_usage_error(self, mocker):
        _patch_config(mocker)
        mock_run = mocker.patch("reviewapps_cli.commands.run.run_action")

        result = CliRunner().invoke(main, ["run", "--action", "create"])

        assert result.exit_code != 0
        assert "GITHUB_EVENT_PATH" in result.output
        mock_run.assert_not_called()

    def test_failure_exits_zero_by_default(self, mocker, tmp_path):
        _patch_config(mocker)
        mocker.patch(
            "reviewapps_cli.commands.run.run_action",
            return_value=Outcome(action="create", status="failed", detail="boom"),
        )

        result = CliRunner().invoke(main, ["run", "--action", "create", "--event", _write_event(tmp_path)])

        assert result.exit_code == 0

    def test_fail_on_error_flag_exits_nonzero(self, mocker, tmp_path):
        _patch_config(mocker)
        mocker.patch(
            "reviewapps_cli.commands.run.run_action",
            return_value=Outcome(action="create", status="failed", detail="boom"),
        )

        result = CliRunner().invoke(
            main, ["run", "--action", "create", "--event", _write_event(tmp_path), "--fail-on-error"]
        )

        assert result.exit_code == 1

    def test_fail_on_error_from_config(self, mocker, tmp_path):
        _patch_config(mocker, _make_config(fail_on_error=True))
        mocker.patch(
            "reviewapps_cli.commands.run.run_action",
            return_value=Outcome(action="create", status="failed", detail="boom"),
        )

        result = CliRunner().invoke(main, ["run", "--action", "create", "--event", _write_event(tmp_path)])

        assert result.exit_code == 1

    def test_fail_on_error_ignores_skips(self, mocker, tmp_path):
        _patch_config(mocker)
        mocker.patch(
            "reviewapps_cli.commands.run.run_action",
            return_value=Outcome(action="destroy", status="skipped"),
        )

        result = CliRunner().invoke(
            main, ["run", "--action", "destroy", "--event", _write_event(tmp_path), "--fail-on-error"]
        )

        assert result.exit_code == 0

    def test_fork_pr_end_to_end_makes_no_calls(self, mocker, tmp_path):
        _patch_config(mocker)
        build = mocker.patch("reviewapps_core.runner.build_heroku_client")
        get_repo = mocker.patch("reviewapps_core.reconciler.get_repo")

        result = CliRunner().invoke(main, ["run", "--action", "create", "--event", _write_event(tmp_path, fork=True)])

        assert result.exit_code == 0
        assert "forked repos" in result.output
        build.assert_not_called()
        get_repo.assert_not_called()

    def test_destroy_end_to_end(self, mocker, tmp_path):
        _patch_config(mocker)
        heroku = MagicMock(spec=HerokuClient)
        heroku.list_review_apps.return_value = [ReviewApp(id="a1", pr_number=7, status="running")]
        mocker.patch("reviewapps_core.runner.build_heroku_client", return_value=heroku)

        result = CliRunner().invoke(main, ["run", "--action", "destroy", "--event", _write_event(tmp_path)])

        assert result.exit_code == 0
        heroku.delete_review_app.assert_called_once_with("a1")
        assert "Review App destroyed" in result.output


class TestStatusCommand:
    def _patch_heroku(self, mocker, apps=None, error=None):
        heroku = MagicMock(spec=HerokuClient)
        if error is not None:
            heroku.list_review_apps.side_effect = error
        else:
            heroku.list_review_apps.return_value = apps or []
        mocker.patch("reviewapps_cli.commands.status.build_heroku_client", return_value=heroku)
        return heroku

    def test_reports_usable_app(self, mocker):
        _patch_config(mocker)
        heroku = self._patch_heroku(mocker, [ReviewApp(id="a1", pr_number=7, status="created", branch="feat")])

        result = CliRunner().invoke(main, ["status", "--pr", "7"])

        assert result.exit_code == 0
        assert "Review app for PR #7: a1 (created)" in result.output
        heroku.list_review_apps.assert_called_once_with("pipe-1")
        heroku.delete_review_app.assert_not_called()
        heroku.create_build.assert_not_called()

    def test_reports_errored_app(self, mocker):
        _patch_config(mocker)
        self._patch_heroku(mocker, [ReviewApp(id="a1", pr_number=7, status="errored")])

        result = CliRunner().invoke(main, ["status", "--pr", "7"])

        assert "errored and cannot be built on" in result.output

    def test_reports_missing_app(self, mocker):
        _patch_config(mocker)
        self._patch_heroku(mocker, [ReviewApp(id="b2", pr_number=8, status="created")])

        result = CliRunner().invoke(main, ["status", "--pr", "7"])

        assert "No review app found for PR #7" in result.output

    def test_empty_pipeline(self, mocker):
        _patch_config(mocker)
        self._patch_heroku(mocker, [])

        result = CliRunner().invoke(main, ["status", "--pr", "7"])

        assert result.exit_code == 0
        assert "No review apps in this pipeline" in result.output

    def test_pipeline_option_overrides_config(self, mocker):
        _patch_config(mocker)
        heroku = self._patch_heroku(mocker, [])

        CliRunner().invoke(main, ["status", "--pr", "7", "--pipeline", "pipe-cli"])

        heroku.list_review_apps.assert_called_once_with("pipe-cli")

    def test_missing_pipeline_is_usage_error(self, mocker):
        _patch_config(mocker, _make_config(pipeline_id=None))

        result = CliRunner().invoke(main, ["status", "--pr", "7"])

        assert result.exit_code != 0
        assert "HEROKU_PIPELINE_ID" in result.output

    def test_missing_token_is_usage_error(self, mocker):
        _patch_config(mocker, _make_config(heroku_api_token=None))

        result = CliRunner().invoke(main, ["status", "--pr", "7"])

        assert result.exit_code != 0
        assert "HEROKU_API_TOKEN" in result.output

    def test_api_error_exits_nonzero(self, mocker):
        _patch_config(mocker)
        self._patch_heroku(mocker, error=HerokuError("Heroku API returned 401: Invalid credentials"))

        result = CliRunner().invoke(main, ["status", "--pr", "7"])

        assert result.exit_code == 1
        assert "Invalid credentials" in result.output
