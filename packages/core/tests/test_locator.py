"""Tests for review-app lookup and the errored-status policy."""

import io
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from reviewapps_core.heroku.client import HerokuClient, HerokuError
from reviewapps_core.locator import find_review_app, locate_review_app, match_review_app
from reviewapps_core.models import ReviewApp
from reviewapps_core.reporting import Reporter


def make_app(id="a1", pr_number=7, status="created"):
    return ReviewApp(id=id, pr_number=pr_number, status=status)


def make_heroku(apps):
    heroku = MagicMock(spec=HerokuClient)
    heroku.list_review_apps.return_value = apps
    return heroku


@pytest.fixture
def reporter():
    return Reporter(console=Console(file=io.StringIO()), workflow_commands=False)


class TestMatchReviewApp:
    def test_first_match_in_listing_order_wins(self):
        apps = [make_app("z9", 3), make_app("b2", 7), make_app("a1", 7)]
        assert match_review_app(apps, 7).id == "b2"

    def test_no_match(self):
        assert match_review_app([make_app("a1", 3)], 7) is None

    def test_empty_listing(self):
        assert match_review_app([], 7) is None

    def test_apps_without_pr_number_never_match(self):
        assert match_review_app([make_app("a1", None)], 7) is None


class TestFindReviewApp:
    def test_returns_errored_app(self, reporter):
        heroku = make_heroku([make_app(status="errored")])
        app = find_review_app(heroku, "pipe-1", 7, reporter)
        assert app.id == "a1"
        heroku.list_review_apps.assert_called_once_with("pipe-1")
        assert reporter.notices == []

    def test_heroku_error_propagates(self, reporter):
        heroku = MagicMock(spec=HerokuClient)
        heroku.list_review_apps.side_effect = HerokuError("down")
        with pytest.raises(HerokuError):
            find_review_app(heroku, "pipe-1", 7, reporter)


class TestLocateReviewApp:
    def test_returns_usable_app(self, reporter):
        heroku = make_heroku([make_app(status="created")])
        assert locate_review_app(heroku, "pipe-1", 7, reporter).id == "a1"
        assert reporter.notices == []

    def test_errored_app_is_unusable_and_noticed(self, reporter):
        heroku = make_heroku([make_app(status="errored")])

        assert locate_review_app(heroku, "pipe-1", 7, reporter) is None

        assert len(reporter.notices) == 1
        assert 'status is "errored"' in reporter.notices[0]

    def test_missing_app_returns_none_without_notice(self, reporter):
        heroku = make_heroku([make_app(pr_number=8)])
        assert locate_review_app(heroku, "pipe-1", 7, reporter) is None
        assert reporter.notices == []

    def test_idempotent_for_same_platform_state(self, reporter):
        heroku = make_heroku([make_app("a1", 7), make_app("b2", 8)])
        first = locate_review_app(heroku, "pipe-1", 7, reporter)
        second = locate_review_app(heroku, "pipe-1", 7, reporter)
        assert first == second
        assert heroku.list_review_apps.call_count == 2
