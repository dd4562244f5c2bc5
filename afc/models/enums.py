"""
Database enums matching the DDL schema
"""

import enum


class UserRole(enum.Enum):
    """User role enum"""
    USER = "user"
    ADMIN = "admin"


class ContestCategory(enum.Enum):
    """Contest category enum - phase requirements differ per category"""
    ART = "art"
    COSPLAY = "cosplay"
    PHOTOGRAPHY = "photography"
    MUSIC = "music"
    VIDEO = "video"


class ContestStatus(enum.Enum):
    """Derived contest status - never stored, see services.status"""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"
    FINALIZED = "finalized"


class EntryStatus(enum.Enum):
    """Entry moderation status enum"""
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReactionType(enum.Enum):
    """Reaction type enum"""
    LIKE = "like"
    LOVE = "love"
    FIRE = "fire"
    CLAP = "clap"
    STAR = "star"


class TransactionType(enum.Enum):
    """Points transaction type enum"""
    PRIZE = "prize"
    PURCHASE = "purchase"
    REFUND = "refund"
    BONUS = "bonus"
    TRANSFER = "transfer"


class NotificationType(enum.Enum):
    """Notification type enum"""
    REACTION = "reaction"
    COMMENT = "comment"
    REPLY = "reply"
    FOLLOW = "follow"
    WINNER = "winner"
    CONTEST = "contest"
    SYSTEM = "system"
