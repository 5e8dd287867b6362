"""Pydantic models for GitHub REST/Search payloads.

Every payload the client returns is validated here so loosely-typed JSON
never reaches analysis or scoring code. Unknown fields are ignored.
"""

import base64
from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class GitHubModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Owner(GitHubModel):
    login: str = ""
    avatar_url: Optional[str] = None
    type: Optional[str] = None


class Label(GitHubModel):
    name: str
    color: str = ""
    description: Optional[str] = None


class Repository(GitHubModel):
    """Normalized repository record. Identity is ``id``."""

    id: int
    name: str
    full_name: str
    description: Optional[str] = None
    html_url: str = ""
    language: Optional[str] = None
    topics: list[str] = Field(default_factory=list)
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    size: int = 0
    updated_at: Optional[datetime] = None
    pushed_at: Optional[datetime] = None
    default_branch: Optional[str] = None
    archived: bool = False
    owner: Owner = Field(default_factory=Owner)

    @field_validator("topics", mode="before")
    @classmethod
    def _none_topics(cls, v):
        return v or []

    @property
    def owner_login(self) -> str:
        return self.owner.login or self.full_name.split("/", 1)[0]

    def split_full_name(self) -> tuple[str, str]:
        """Return (owner, repo); raises ValueError on malformed names."""
        owner, _, repo = self.full_name.partition("/")
        if not owner or not repo:
            raise ValueError(f"Invalid repository name format: {self.full_name}")
        return owner, repo


class PullRequestMarker(GitHubModel):
    url: Optional[str] = None
    merged_at: Optional[datetime] = None


class Issue(GitHubModel):
    """Issue or search-issues item (pull requests carry ``pull_request``)."""

    id: int
    number: int
    title: str
    body: Optional[str] = None
    html_url: str = ""
    state: str = "open"
    labels: list[Label] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    user: Optional[Owner] = None
    assignee: Optional[Owner] = None
    pull_request: Optional[PullRequestMarker] = None
    repository_url: Optional[str] = None
    repository: Optional[Repository] = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None

    @property
    def repository_full_name(self) -> Optional[str]:
        """``owner/repo`` from the embedded repository or ``repository_url``."""
        if self.repository is not None:
            return self.repository.full_name
        if self.repository_url and "/repos/" in self.repository_url:
            return self.repository_url.split("/repos/", 1)[1].strip("/") or None
        return None


class SearchPage(GitHubModel, Generic[T]):
    total_count: int = 0
    incomplete_results: bool = False
    items: list[T] = Field(default_factory=list)


class BaseRef(GitHubModel):
    repo: Optional[Repository] = None


class PullRequestDetail(GitHubModel):
    number: int
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0
    merged_at: Optional[datetime] = None
    base: Optional[BaseRef] = None


class CommitAuthor(GitHubModel):
    name: str = "Unknown"
    email: str = "unknown@example.com"
    date: Optional[datetime] = None


class CommitDetail(GitHubModel):
    message: str = "No message"
    author: Optional[CommitAuthor] = None


class CommitStatsModel(GitHubModel):
    additions: int = 0
    deletions: int = 0
    total: int = 0


class CommitItem(GitHubModel):
    sha: str
    html_url: str = ""
    commit: Optional[CommitDetail] = None
    stats: Optional[CommitStatsModel] = None


class EventRepo(GitHubModel):
    name: str


class Event(GitHubModel):
    type: str
    repo: Optional[EventRepo] = None
    created_at: Optional[datetime] = None


class GitHubUser(GitHubModel):
    id: int
    login: str
    name: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    blog: Optional[str] = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0


class FileContent(GitHubModel):
    """``/contents/{path}`` response; GitHub returns base64 with newlines."""

    content: str = ""
    encoding: str = "base64"

    def decoded(self) -> str:
        if not self.content:
            return ""
        if self.encoding != "base64":
            return self.content
        return base64.b64decode(self.content).decode("utf-8", errors="ignore")
