from showcase_node.entities.events import BadgeAwarded, NotificationEvent, RankChanged
from showcase_node.entities.project import (
    ActivityEvent, Project, ProjectPublished, UpvoteEvent, ViewEvent,
)
from showcase_node.entities.score import LeaderboardEntry, ScoreRecord
from showcase_node.entities.user import User

__all__ = [
    "ActivityEvent",
    "BadgeAwarded",
    "LeaderboardEntry",
    "NotificationEvent",
    "Project",
    "ProjectPublished",
    "RankChanged",
    "ScoreRecord",
    "UpvoteEvent",
    "User",
    "ViewEvent",
]
