"""Skill analyzer: infer languages, frameworks, interests and experience from repositories."""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from analysis.frameworks import match_frameworks_in, parse_package_json, parse_requirements
from github_api import GitHubApiError, GitHubClient, Repository
from recommend.models import SkillProfile
from shared_types import ActivityLabel, ExperienceLevel

logger = structlog.get_logger()

MAX_REPOSITORIES = 100
TOP_LANGUAGES = 10
TOP_FRAMEWORKS = 15
TOP_INTERESTS = 10
KEYWORDS_PER_DESCRIPTION = 5
MIN_INTEREST_REPOS = 2
SIGNIFICANT_REPO_SIZE = 100

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "is", "are", "was", "were", "be", "been", "being", "have", "has", "had", "do", "does",
        "did", "this", "that", "these", "those", "my", "your", "his", "her", "its", "our",
        "their",
    }
)

_PUNCTUATION = re.compile(r"[^\w\s]")
_SECONDS_PER_MONTH = 60 * 60 * 24 * 30


@dataclass
class LanguageSkill:
    name: str
    level: ExperienceLevel
    confidence: float


@dataclass
class FrameworkSkill:
    name: str
    level: ExperienceLevel
    confidence: float


@dataclass
class AnalysisSummary:
    total_repositories: int = 0
    public_repositories: int = 0
    estimated_commits: int = 0
    recent_activity: str = "No activity"


@dataclass
class SkillAnalysisResult:
    confidence: float
    languages: list[LanguageSkill] = field(default_factory=list)
    frameworks: list[FrameworkSkill] = field(default_factory=list)
    interests: list[str] = field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)

    def to_skill_profile(self) -> SkillProfile:
        """Skill profile usable as recommendation input."""
        return SkillProfile(
            languages=[lang.name.lower() for lang in self.languages],
            frameworks=[fw.name for fw in self.frameworks],
            interests=list(self.interests),
            experience_level=self.experience_level,
        )


def empty_analysis() -> SkillAnalysisResult:
    """Result for a user without public repositories."""
    return SkillAnalysisResult(confidence=0)


def skill_level(index: int, total: int) -> ExperienceLevel:
    """Level from relative rank: top 30% advanced, next 30% intermediate."""
    position = index / total
    if position <= 0.3:
        return ExperienceLevel.ADVANCED
    if position <= 0.6:
        return ExperienceLevel.INTERMEDIATE
    return ExperienceLevel.BEGINNER


def rank_skills(
    scores: dict[str, float], limit: int, base: float, span: float
) -> list[tuple[str, ExperienceLevel, float]]:
    """Sort by score, keep ``limit``, attach level and confidence in [base, base+span]."""
    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)[:limit]
    if not ranked:
        return []
    top = ranked[0][1] or 1
    return [
        (name, skill_level(i, len(ranked)), round(min(base + span, base + score / top * span), 1))
        for i, (name, score) in enumerate(ranked)
    ]


def extract_keywords(text: str) -> list[str]:
    """Up to five non-stop-word keywords longer than two characters."""
    words = _PUNCTUATION.sub(" ", text.lower()).split()
    return [w for w in words if len(w) > 2 and w not in STOP_WORDS][:KEYWORDS_PER_DESCRIPTION]


def extract_interests(repositories: list[Repository]) -> list[str]:
    """Topics and description keywords that recur in at least two repositories."""
    counts: dict[str, int] = {}
    for repo in repositories:
        terms = {topic.replace("-", " ").lower() for topic in repo.topics}
        if repo.description:
            terms.update(extract_keywords(repo.description))
        for term in sorted(terms):
            counts[term] = counts.get(term, 0) + 1

    frequent = [(term, n) for term, n in counts.items() if n >= MIN_INTEREST_REPOS]
    frequent.sort(key=lambda item: item[1], reverse=True)
    return [term for term, _ in frequent[:TOP_INTERESTS]]


def experience_level(repositories: list[Repository], language_count: int) -> ExperienceLevel:
    """Additive score over repo count, language diversity, stars and average size."""
    repo_count = len(repositories)
    total_stars = sum(r.stargazers_count for r in repositories)
    avg_size = sum(r.size for r in repositories) / repo_count if repo_count else 0

    score = 0
    if repo_count >= 20:
        score += 3
    elif repo_count >= 10:
        score += 2
    elif repo_count >= 5:
        score += 1

    if language_count >= 5:
        score += 2
    elif language_count >= 3:
        score += 1

    if total_stars >= 50:
        score += 2
    elif total_stars >= 10:
        score += 1

    if avg_size >= 1000:
        score += 2
    elif avg_size >= 500:
        score += 1

    if score >= 7:
        return ExperienceLevel.ADVANCED
    if score >= 4:
        return ExperienceLevel.INTERMEDIATE
    return ExperienceLevel.BEGINNER


def confidence_score(repo_count: int, language_count: int) -> int:
    confidence = 30 + min(30, repo_count * 2) + min(25, language_count * 5)
    return min(95, confidence)


def _months_old(updated_at: Optional[datetime], now: datetime) -> float:
    if updated_at is None:
        return 0.0
    return (now - updated_at).total_seconds() / _SECONDS_PER_MONTH


def estimate_commits(repositories: list[Repository], now: datetime) -> int:
    """Rough commit estimate from repository age and size."""
    total = 0
    for repo in repositories:
        size_factor = max(1, repo.size / 100)
        total += math.floor(_months_old(repo.updated_at, now) * size_factor * 2)
    return total


def repository_activity(repositories: list[Repository], now: datetime) -> str:
    """Activity label from repositories updated in the last three months."""
    recent = sum(1 for r in repositories if _months_old(r.updated_at, now) <= 3)
    if recent == 0:
        return ActivityLabel.NONE
    if recent <= 2:
        return ActivityLabel.LOW
    if recent <= 5:
        return ActivityLabel.MODERATE
    return ActivityLabel.HIGH


class SkillAnalyzer:
    """Build a skill profile from a user's public GitHub repositories."""

    def __init__(self, client: GitHubClient, now: Optional[Callable[[], datetime]] = None):
        self.client = client
        self._now = now or (lambda: datetime.now(timezone.utc))

    async def analyze(self, username: str) -> SkillAnalysisResult:
        """Run the full analysis.

        Raises:
            GitHubApiError: the repository listing itself failed.
        """
        logger.info("skills.analysis_started", username=username)
        repositories = await self.client.list_user_repos(
            username, per_page=MAX_REPOSITORIES, sort="updated", repo_type="public"
        )
        if not repositories:
            logger.info("skills.no_repositories", username=username)
            return empty_analysis()

        languages = await self.analyze_languages(repositories)
        frameworks = await self.analyze_frameworks(repositories)
        interests = extract_interests(repositories)
        now = self._now()

        result = SkillAnalysisResult(
            confidence=confidence_score(len(repositories), len(languages)),
            languages=languages,
            frameworks=frameworks,
            interests=interests,
            experience_level=experience_level(repositories, len(languages)),
            summary=AnalysisSummary(
                total_repositories=len(repositories),
                public_repositories=len(repositories),
                estimated_commits=estimate_commits(repositories, now),
                recent_activity=repository_activity(repositories, now),
            ),
        )
        logger.info(
            "skills.analysis_complete",
            username=username,
            repositories=len(repositories),
            confidence=result.confidence,
        )
        return result

    async def analyze_languages(self, repositories: list[Repository]) -> list[LanguageSkill]:
        scores: dict[str, float] = {}
        for repo in repositories:
            if repo.language:
                scores[repo.language] = scores.get(repo.language, 0) + 1

            if repo.stargazers_count > 0 or repo.size > SIGNIFICANT_REPO_SIZE:
                try:
                    owner, name = repo.split_full_name()
                    breakdown = await self.client.get_languages(owner, name)
                except (GitHubApiError, ValueError) as e:
                    logger.warning("skills.language_fetch_failed", repo=repo.full_name, error=str(e))
                    continue
                for lang, size in breakdown.items():
                    scores[lang] = scores.get(lang, 0) + size / 1000

        return [
            LanguageSkill(name=name, level=level, confidence=confidence)
            for name, level, confidence in rank_skills(scores, TOP_LANGUAGES, 60, 30)
        ]

    async def analyze_frameworks(self, repositories: list[Repository]) -> list[FrameworkSkill]:
        counts: dict[str, int] = {}
        for repo in repositories:
            texts = [*repo.topics, repo.description or "", repo.name]
            texts.extend(await self._manifest_dependencies(repo))
            for framework in match_frameworks_in(texts):
                counts[framework] = counts.get(framework, 0) + 1

        return [
            FrameworkSkill(name=name, level=level, confidence=confidence)
            for name, level, confidence in rank_skills(counts, TOP_FRAMEWORKS, 50, 35)
        ]

    async def _manifest_dependencies(self, repo: Repository) -> list[str]:
        """Dependency names from package.json (JS/TS) or requirements.txt (Python)."""
        if repo.language in ("JavaScript", "TypeScript"):
            path, parser = "package.json", parse_package_json
        elif repo.language == "Python":
            path, parser = "requirements.txt", parse_requirements
        else:
            return []

        try:
            owner, name = repo.split_full_name()
            content = await self.client.get_file_content(owner, name, path)
            return parser(content.decoded())
        except (GitHubApiError, ValueError) as e:
            # json.JSONDecodeError and binascii.Error are ValueErrors
            logger.debug("skills.manifest_skipped", repo=repo.full_name, path=path, error=str(e))
            return []
