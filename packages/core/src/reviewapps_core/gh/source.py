from __future__ import annotations

import logging

from github import Github, GithubException

from reviewapps_core.models import SourceReference

logger = logging.getLogger(__name__)


class SourceControlError(RuntimeError):
    """Raised when the source tarball cannot be resolved."""

    def __init__(self, message: str, status: int | None = None, data=None):
        super().__init__(message)
        self.status = status
        self.data = data

    def to_dict(self) -> dict:
        return {"message": str(self), "status": self.status, "data": self.data}


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def resolve_tarball(repo, ref: str, version: str) -> SourceReference:
    """Return the tarball download location for ``ref`` without downloading it.

    GitHub answers the archive endpoint with a redirect; PyGithub hands back the
    ``Location`` header, which the platform fetches itself.
    """
    try:
        url = repo.get_archive_link("tarball", ref=ref)
    except GithubException as e:
        raise SourceControlError(
            f"Could not resolve tarball for {ref!r}: {e}",
            status=e.status,
            data=e.data,
        ) from e
    if not url:
        raise SourceControlError(f"GitHub returned no tarball location for {ref!r}")
    logger.debug("Resolved tarball for %s: %s", ref, url)
    return SourceReference(download_url=url, version=version)
