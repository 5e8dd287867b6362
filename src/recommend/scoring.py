"""Match scoring and reason text for a repository against a skill profile.

Both functions are pure: the same (repository, profile) pair always yields
the same score and the same reasons.
"""

from github_api.models import Repository
from recommend.models import SkillProfile

LANGUAGE_POINTS = 40
TOPIC_POINTS = 10
TOPIC_CAP = 30
FRAMEWORK_POINTS = 7
FRAMEWORK_CAP = 20
MAX_SCORE = 100
REASON_TOPICS = 3


def _language_matches(repo: Repository, skills: SkillProfile) -> bool:
    if not repo.language:
        return False
    return repo.language.lower() in {lang.lower() for lang in skills.languages}


def matching_topics(repo: Repository, skills: SkillProfile) -> list[str]:
    """Repository topics overlapping an interest (substring either way)."""
    interests = [i.lower() for i in skills.interests]
    matches = []
    for topic in repo.topics:
        t = topic.lower()
        if any(t in interest or interest in t for interest in interests):
            matches.append(topic)
    return matches


def matching_frameworks(repo: Repository, skills: SkillProfile) -> list[str]:
    text = f"{repo.name} {repo.description or ''} {' '.join(repo.topics)}".lower()
    return [fw for fw in skills.frameworks if fw.lower() in text]


def quality_bonus(repo: Repository) -> int:
    bonus = 0
    if repo.stargazers_count > 100:
        bonus += 2
    if repo.stargazers_count > 1000:
        bonus += 3
    if repo.open_issues_count > 0:
        bonus += 2
    if repo.description and len(repo.description) > 50:
        bonus += 1
    if len(repo.topics) > 3:
        bonus += 2
    return bonus


def calculate_match_score(repo: Repository, skills: SkillProfile) -> int:
    """Weighted 0-100 score: language, topics, frameworks, quality."""
    score = 0
    if _language_matches(repo, skills):
        score += LANGUAGE_POINTS
    score += min(TOPIC_CAP, len(matching_topics(repo, skills)) * TOPIC_POINTS)
    score += min(FRAMEWORK_CAP, len(matching_frameworks(repo, skills)) * FRAMEWORK_POINTS)
    score += quality_bonus(repo)
    return max(0, min(MAX_SCORE, score))


def generate_reasons(repo: Repository, skills: SkillProfile) -> list[str]:
    """At most one sentence each for language, interests, popularity, activity."""
    reasons = []
    if _language_matches(repo, skills):
        reasons.append(f"Matches your {repo.language} skills")

    topics = matching_topics(repo, skills)
    if topics:
        shown = ", ".join(t.replace("-", " ") for t in topics[:REASON_TOPICS])
        reasons.append(f"Aligns with your interests: {shown}")

    if repo.stargazers_count > 1000:
        reasons.append(f"Popular project ({repo.stargazers_count:,} stars)")

    if repo.open_issues_count > 0:
        reasons.append(f"Active development ({repo.open_issues_count} open issues)")

    return reasons
