# Models Package
from .user import User
from .contest import Contest
from .entry import Entry
from .reaction import Reaction
from .comment import Comment, CommentLike
from .contest_winner import ContestWinner
from .follow import Follow
from .transaction import Transaction
from .xp_history import XpHistory
from .notification import Notification
from .audit_log import AuditLog

__all__ = [
    "User",
    "Contest",
    "Entry",
    "Reaction",
    "Comment",
    "CommentLike",
    "ContestWinner",
    "Follow",
    "Transaction",
    "XpHistory",
    "Notification",
    "AuditLog"
]
