"""Data models shared by the extractor, locator and reconciler.

RequestContext is built once per run from the CI event. ReviewApp and
SourceReference mirror remote state and are re-fetched on every run.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

ACTION_CREATE = "create"
ACTION_UPDATE = "update"
ACTION_DESTROY = "destroy"
ACTION_UNKNOWN = "unknown"

KNOWN_ACTIONS = (ACTION_CREATE, ACTION_UPDATE, ACTION_DESTROY)

# Review app status reported by the platform when provisioning failed.
STATUS_ERRORED = "errored"


def parse_action(value: str | None) -> str:
    """Normalise the action input; anything unrecognised becomes "unknown"."""
    action = (value or "").strip().lower()
    return action if action in KNOWN_ACTIONS else ACTION_UNKNOWN


@dataclass(frozen=True)
class RequestContext:
    pr_number: int
    branch_ref: str
    commit_sha: str
    is_fork: bool
    repo_owner: str
    repo_name: str
    pipeline_id: str
    requested_action: str  # one of KNOWN_ACTIONS or ACTION_UNKNOWN

    @property
    def repo_full_name(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ReviewApp:
    """A review app as reported by the platform's review-apps listing."""

    id: str
    pr_number: int | None
    status: str
    branch: str = ""
    app_id: str | None = None  # id of the underlying app, once provisioned
    raw: dict = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_errored(self) -> bool:
        return self.status == STATUS_ERRORED

    @property
    def build_target(self) -> str:
        """App id that builds are posted to; falls back to the review app id."""
        return self.app_id or self.id

    @classmethod
    def from_api(cls, data: dict) -> ReviewApp:
        app = data.get("app") or {}
        pr_number = data.get("pr_number")
        return cls(
            id=str(data.get("id", "")),
            pr_number=int(pr_number) if pr_number is not None else None,
            status=data.get("status") or "",
            branch=data.get("branch") or "",
            app_id=app.get("id") if isinstance(app, dict) else None,
            raw=data,
        )


@dataclass(frozen=True)
class SourceReference:
    """Platform-resolvable tarball of the repository at one commit."""

    download_url: str
    version: str  # the commit SHA

    def to_source_blob(self) -> dict:
        return {"url": self.download_url, "version": self.version}


@dataclass
class Outcome:
    """Result of one reconciliation run, used for the exit-status decision."""

    action: str
    status: str  # "created" | "updated" | "destroyed" | "skipped" | "failed"
    app_id: str | None = None
    detail: str = ""

    @property
    def failed(self) -> bool:
        return self.status == "failed"
