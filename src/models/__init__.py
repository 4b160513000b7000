"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.user import User
from models.category import Category
from models.prompt import Prompt, PromptType
from models.cursor_rule import CursorRule, RuleType
from models.vote import CursorRuleUpvote, PromptDownvote, PromptUpvote
from models.comment import Comment

__all__ = [
    "Base",
    "Category",
    "Comment",
    "CursorRule",
    "CursorRuleUpvote",
    "Prompt",
    "PromptDownvote",
    "PromptType",
    "PromptUpvote",
    "RuleType",
    "TimestampMixin",
    "UUIDv7Mixin",
    "User",
]
