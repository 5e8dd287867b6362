"""Contribution history aggregation and derived statistics."""

import asyncio
import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterable, Optional

import structlog

from github_api import GitHubApiError, GitHubClient, Issue
from github_api.models import Repository
from shared_types import ActivityLabel

logger = structlog.get_logger()

PER_PAGE = 100
MAX_PR_PAGES = 5
MAX_ISSUE_PAGES = 3
COMMIT_REPO_LISTING = 50
MAX_COMMIT_REPOS = 20
COMMITS_PER_REPO = 20
MAX_COMMITS_IN_HISTORY = 100
TOP_N = 10
MONTHS = 12
RECENT_DAYS = 30


@dataclass
class RepositoryRef:
    name: str
    full_name: str
    language: Optional[str] = None
    stars: int = 0

    @classmethod
    def from_repository(cls, repo: Repository) -> "RepositoryRef":
        return cls(
            name=repo.name,
            full_name=repo.full_name,
            language=repo.language,
            stars=repo.stargazers_count,
        )

    @classmethod
    def from_full_name(cls, full_name: str) -> "RepositoryRef":
        return cls(name=full_name.rsplit("/", 1)[-1], full_name=full_name)


@dataclass
class LabelRef:
    name: str
    color: str = ""


@dataclass
class PullRequestRecord:
    id: int
    number: int
    title: str
    state: str
    html_url: str
    created_at: datetime
    repository: RepositoryRef
    body: Optional[str] = None
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0
    labels: list[LabelRef] = field(default_factory=list)


@dataclass
class IssueRecord:
    id: int
    number: int
    title: str
    state: str
    html_url: str
    created_at: datetime
    repository: RepositoryRef
    body: Optional[str] = None
    updated_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    labels: list[LabelRef] = field(default_factory=list)


@dataclass
class CommitStats:
    additions: int = 0
    deletions: int = 0
    total: int = 0


@dataclass
class CommitRecord:
    sha: str
    message: str
    html_url: str
    created_at: datetime
    repository: RepositoryRef
    author_name: str = "Unknown"
    author_email: str = "unknown@example.com"
    stats: CommitStats = field(default_factory=CommitStats)


@dataclass
class LanguageCount:
    language: str
    count: int


@dataclass
class RepositoryCount:
    repository: str
    count: int


@dataclass
class MonthlyActivity:
    month: str
    pull_requests: int = 0
    issues: int = 0
    commits: int = 0

    @property
    def total(self) -> int:
        return self.pull_requests + self.issues + self.commits

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "pull_requests": self.pull_requests,
            "issues": self.issues,
            "commits": self.commits,
            "total": self.total,
        }


@dataclass
class ContributionStats:
    top_languages: list[LanguageCount]
    top_repositories: list[RepositoryCount]
    monthly_activity: list[MonthlyActivity]
    total_additions: int
    total_deletions: int
    average_pr_size: float
    contribution_streak: int
    first_contribution: Optional[datetime]
    most_active_repository: Optional[str]


@dataclass
class ContributionSummary:
    total_contributions: int
    total_pull_requests: int
    total_issues: int
    total_commits: int
    merged_pull_requests: int
    closed_issues: int
    recent_activity: str


@dataclass
class ContributionHistory:
    username: str
    analyzed_at: datetime
    pull_requests: list[PullRequestRecord]
    issues: list[IssueRecord]
    commits: list[CommitRecord]
    stats: ContributionStats
    summary: ContributionSummary

    def to_dict(self) -> dict:
        data = asdict(self)
        data["stats"]["monthly_activity"] = [m.to_dict() for m in self.stats.monthly_activity]
        return data


# --- pure statistics ---


def _count_top(keys: Iterable[str], limit: int = TOP_N) -> list[tuple[str, int]]:
    """Count occurrences; sort by count desc, ties in first-seen order."""
    counts: dict[str, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_keys(now: datetime, months: int = MONTHS) -> list[str]:
    """``YYYY-MM`` keys for the trailing ``months`` months ending at ``now``."""
    keys = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(now.year, now.month, -offset)
        keys.append(f"{year:04d}-{month:02d}")
    return keys


def monthly_activity(
    pull_requests: list[PullRequestRecord],
    issues: list[IssueRecord],
    commits: list[CommitRecord],
    now: datetime,
) -> list[MonthlyActivity]:
    """Exactly twelve contiguous buckets; only the trailing 365 days count."""
    buckets = {key: MonthlyActivity(month=key) for key in month_keys(now)}
    cutoff = now - timedelta(days=365)

    def bucket_for(ts: datetime) -> Optional[MonthlyActivity]:
        if ts < cutoff:
            return None
        return buckets.get(ts.astimezone(timezone.utc).strftime("%Y-%m"))

    for pr in pull_requests:
        if bucket := bucket_for(pr.created_at):
            bucket.pull_requests += 1
    for issue in issues:
        if bucket := bucket_for(issue.created_at):
            bucket.issues += 1
    for commit in commits:
        if bucket := bucket_for(commit.created_at):
            bucket.commits += 1

    return list(buckets.values())


def _all_timestamps(pull_requests, issues, commits) -> list[datetime]:
    return (
        [pr.created_at for pr in pull_requests]
        + [issue.created_at for issue in issues]
        + [commit.created_at for commit in commits]
    )


def contribution_streak(timestamps: Iterable[datetime], now: datetime) -> int:
    """Current streak over distinct UTC calendar days, walking back from ``now``.

    A date extends the streak while its distance from the running cursor is
    at most ``streak + 1`` days, so the tolerance widens as the streak grows.
    """
    days: set[date] = {ts.astimezone(timezone.utc).date() for ts in timestamps}
    streak = 0
    cursor = now
    for day in sorted(days, reverse=True):
        day_start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        days_diff = math.floor((cursor - day_start).total_seconds() / 86400)
        if days_diff <= streak + 1:
            streak += 1
            cursor = day_start
        else:
            break
    return streak


def recent_activity_label(timestamps: Iterable[datetime], now: datetime) -> str:
    cutoff = now - timedelta(days=RECENT_DAYS)
    total = sum(1 for ts in timestamps if ts >= cutoff)
    if total == 0:
        return ActivityLabel.NONE
    if total <= 5:
        return ActivityLabel.LOW
    if total <= 15:
        return ActivityLabel.MODERATE
    return ActivityLabel.HIGH


def compute_stats(
    pull_requests: list[PullRequestRecord],
    issues: list[IssueRecord],
    commits: list[CommitRecord],
    now: datetime,
) -> ContributionStats:
    """Derive statistics; a pure function of the three sequences and ``now``."""
    records = [*pull_requests, *issues, *commits]
    top_languages = [
        LanguageCount(language, count)
        for language, count in _count_top(r.repository.language for r in records if r.repository.language)
    ]
    top_repositories = [
        RepositoryCount(repository, count)
        for repository, count in _count_top(r.repository.full_name for r in records)
    ]

    total_additions = sum(pr.additions for pr in pull_requests) + sum(c.stats.additions for c in commits)
    total_deletions = sum(pr.deletions for pr in pull_requests) + sum(c.stats.deletions for c in commits)
    average_pr_size = (
        sum(pr.additions + pr.deletions for pr in pull_requests) / len(pull_requests)
        if pull_requests
        else 0
    )

    timestamps = _all_timestamps(pull_requests, issues, commits)
    return ContributionStats(
        top_languages=top_languages,
        top_repositories=top_repositories,
        monthly_activity=monthly_activity(pull_requests, issues, commits, now),
        total_additions=total_additions,
        total_deletions=total_deletions,
        average_pr_size=average_pr_size,
        contribution_streak=contribution_streak(timestamps, now),
        first_contribution=min(timestamps) if timestamps else None,
        most_active_repository=top_repositories[0].repository if top_repositories else None,
    )


def summarize(history: ContributionHistory) -> dict:
    """Condensed view: top 5 languages/repositories and the last 6 months."""
    stats = history.stats
    return {
        "username": history.username,
        "analyzed_at": history.analyzed_at,
        "summary": history.summary,
        "stats": {
            "top_languages": stats.top_languages[:5],
            "top_repositories": stats.top_repositories[:5],
            "monthly_activity": [m.to_dict() for m in stats.monthly_activity[-6:]],
            "total_additions": stats.total_additions,
            "total_deletions": stats.total_deletions,
            "contribution_streak": stats.contribution_streak,
            "first_contribution": stats.first_contribution,
            "most_active_repository": stats.most_active_repository,
        },
    }


def _labels(issue: Issue) -> list[LabelRef]:
    return [LabelRef(name=label.name, color=label.color) for label in issue.labels]


# --- fetching ---


class ContributionAggregator:
    """Collect a user's PRs, issues and commits and derive statistics.

    Every page or per-repository failure is logged and the partial result
    accumulated so far is kept; only the final statistics are returned.
    """

    def __init__(self, client: GitHubClient, now: Optional[Callable[[], datetime]] = None):
        self.client = client
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def analyze(self, username: str) -> ContributionHistory:
        logger.info("contributions.analysis_started", username=username)
        pull_requests, issues, commits = await asyncio.gather(
            self.fetch_pull_requests(username),
            self.fetch_issues(username),
            self.fetch_commits(username),
        )
        now = self._now()
        stats = compute_stats(pull_requests, issues, commits, now)
        summary = ContributionSummary(
            total_contributions=len(pull_requests) + len(issues) + len(commits),
            total_pull_requests=len(pull_requests),
            total_issues=len(issues),
            total_commits=len(commits),
            merged_pull_requests=sum(1 for pr in pull_requests if pr.merged_at),
            closed_issues=sum(1 for issue in issues if issue.state == "closed"),
            recent_activity=recent_activity_label(
                _all_timestamps(pull_requests, issues, commits), now
            ),
        )
        logger.info(
            "contributions.analysis_complete",
            username=username,
            total=summary.total_contributions,
        )
        return ContributionHistory(
            username=username,
            analyzed_at=now,
            pull_requests=pull_requests,
            issues=issues,
            commits=commits[:MAX_COMMITS_IN_HISTORY],
            stats=stats,
            summary=summary,
        )

    async def _search_pages(self, query: str, max_pages: int) -> list[Issue]:
        items: list[Issue] = []
        for page in range(1, max_pages + 1):
            try:
                result = await self.client.search_issues(query, page=page, per_page=PER_PAGE)
            except GitHubApiError as e:
                logger.warning("contributions.search_page_failed", query=query, page=page, error=str(e))
                break
            items.extend(result.items)
            if len(result.items) < PER_PAGE:
                break
        return items

    async def fetch_pull_requests(self, username: str) -> list[PullRequestRecord]:
        """Authored PRs (≤500), each enriched with additions/deletions/changed files."""
        records = []
        for item in await self._search_pages(f"author:{username} type:pr", MAX_PR_PAGES):
            full_name = item.repository_full_name
            if not full_name:
                logger.warning("contributions.pr_without_repository", number=item.number)
                continue

            repository = RepositoryRef.from_full_name(full_name)
            additions = deletions = changed_files = 0
            merged_at = item.pull_request.merged_at if item.pull_request else None
            try:
                detail = await self.client.get_pull_request(full_name, item.number)
            except GitHubApiError as e:
                logger.warning("contributions.pr_detail_failed", repo=full_name, number=item.number, error=str(e))
            else:
                additions, deletions, changed_files = detail.additions, detail.deletions, detail.changed_files
                merged_at = detail.merged_at or merged_at
                if detail.base and detail.base.repo:
                    repository = RepositoryRef.from_repository(detail.base.repo)

            records.append(
                PullRequestRecord(
                    id=item.id,
                    number=item.number,
                    title=item.title,
                    body=item.body,
                    state=item.state,
                    html_url=item.html_url,
                    created_at=item.created_at,
                    updated_at=item.updated_at,
                    closed_at=item.closed_at,
                    merged_at=merged_at,
                    repository=repository,
                    additions=additions,
                    deletions=deletions,
                    changed_files=changed_files,
                    labels=_labels(item),
                )
            )
        logger.info("contributions.pull_requests_fetched", username=username, count=len(records))
        return records

    async def fetch_issues(self, username: str) -> list[IssueRecord]:
        """Authored issues (≤300)."""
        records = []
        for item in await self._search_pages(f"author:{username} type:issue", MAX_ISSUE_PAGES):
            full_name = item.repository_full_name
            if not full_name:
                logger.warning("contributions.issue_without_repository", number=item.number)
                continue
            if item.repository is not None:
                repository = RepositoryRef.from_repository(item.repository)
            else:
                repository = RepositoryRef.from_full_name(full_name)
            records.append(
                IssueRecord(
                    id=item.id,
                    number=item.number,
                    title=item.title,
                    body=item.body,
                    state=item.state,
                    html_url=item.html_url,
                    created_at=item.created_at,
                    updated_at=item.updated_at,
                    closed_at=item.closed_at,
                    repository=repository,
                    labels=_labels(item),
                )
            )
        logger.info("contributions.issues_fetched", username=username, count=len(records))
        return records

    async def fetch_commits(self, username: str) -> list[CommitRecord]:
        """Recent commits across the 20 most recently updated repositories, newest first."""
        try:
            repositories = await self.client.list_user_repos(
                username, per_page=COMMIT_REPO_LISTING, sort="updated", repo_type="all"
            )
        except GitHubApiError as e:
            logger.warning("contributions.repo_listing_failed", username=username, error=str(e))
            return []

        records: list[CommitRecord] = []
        for repo in repositories[:MAX_COMMIT_REPOS]:
            try:
                items = await self.client.list_repo_commits(
                    repo.full_name, author=username, per_page=COMMITS_PER_REPO
                )
            except GitHubApiError as e:
                logger.warning("contributions.commits_failed", repo=repo.full_name, error=str(e))
                continue

            for item in items:
                if item.commit is None or item.commit.author is None:
                    logger.debug("contributions.commit_without_author", sha=item.sha)
                    continue
                stats = item.stats
                records.append(
                    CommitRecord(
                        sha=item.sha,
                        message=item.commit.message,
                        html_url=item.html_url,
                        created_at=item.commit.author.date or self._now(),
                        repository=RepositoryRef.from_repository(repo),
                        author_name=item.commit.author.name,
                        author_email=item.commit.author.email,
                        stats=CommitStats(stats.additions, stats.deletions, stats.total)
                        if stats
                        else CommitStats(),
                    )
                )

        records.sort(key=lambda c: c.created_at, reverse=True)
        logger.info("contributions.commits_fetched", username=username, count=len(records))
        return records
