from playerstats.models.banned_users import BannedUser
from playerstats.models.comments import Comment, CommentApproval, UserEmail
from playerstats.models.notifications import Notification, NotificationStatus, NotificationType
from playerstats.models.players import Player, PluginSetting
from playerstats.models.statistics import STATISTIC_TYPES, Statistic, StatisticType
from playerstats.models.user_activity import ReactionType, UserActivity
from playerstats.models.users import Users

__all__ = [
    "BannedUser",
    "Comment",
    "CommentApproval",
    "Notification",
    "NotificationStatus",
    "NotificationType",
    "Player",
    "PluginSetting",
    "ReactionType",
    "STATISTIC_TYPES",
    "Statistic",
    "StatisticType",
    "UserActivity",
    "UserEmail",
    "Users",
]
