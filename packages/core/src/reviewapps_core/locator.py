"""Review-app lookup by PR number within a pipeline."""

from __future__ import annotations

import json

from reviewapps_core.heroku.client import HerokuClient
from reviewapps_core.models import ReviewApp
from reviewapps_core.reporting import Reporter


def match_review_app(review_apps: list[ReviewApp], pr_number: int) -> ReviewApp | None:
    """First app in listing order whose PR number matches."""
    return next((app for app in review_apps if app.pr_number == pr_number), None)


def find_review_app(heroku: HerokuClient, pipeline_id: str, pr_number: int, reporter: Reporter) -> ReviewApp | None:
    """Return the first review app for ``pr_number``, whatever its status.

    Listing order is whatever the platform returns. HerokuError propagates.
    """
    reporter.debug(f'Listing review apps: "/pipelines/{pipeline_id}/review-apps"')
    review_apps = heroku.list_review_apps(pipeline_id)
    reporter.info(f"Listed review apps OK: {len(review_apps)} apps found.")

    reporter.debug(f"Finding review app for PR #{pr_number}...")
    return match_review_app(review_apps, pr_number)


def locate_review_app(heroku: HerokuClient, pipeline_id: str, pr_number: int, reporter: Reporter) -> ReviewApp | None:
    """Return the usable review app for ``pr_number``, or None.

    An errored review app is reported with a notice and treated as absent.
    """
    app = find_review_app(heroku, pipeline_id, pr_number, reporter)
    if app is None:
        reporter.info(f"No review app found for PR #{pr_number}")
        return None
    if app.is_errored:
        reporter.notice(f'Found review app for PR #{pr_number} OK, but status is "{app.status}"')
        return None
    reporter.info(f"Found review app for PR #{pr_number} OK: {json.dumps(app.raw or {'id': app.id}, default=str)}")
    return app
