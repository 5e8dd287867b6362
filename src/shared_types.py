"""Shared enums and types for contribuddy."""

from enum import StrEnum


class ExperienceLevel(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ActivityLabel(StrEnum):
    NONE = "No recent activity"
    LOW = "Low activity"
    MODERATE = "Moderate activity"
    HIGH = "High activity"


# Public event types that indicate the user touched a repository
CONTRIBUTION_EVENT_TYPES = frozenset(
    {
        "PushEvent",
        "PullRequestEvent",
        "IssuesEvent",
        "CreateEvent",
        "IssueCommentEvent",
    }
)
