"""Service layer exports."""
from .base import CONFLICT_FAILURES, TransactionalService
from .post_interaction_service import PostInteractionService
from .profile_service import ProfileService
from .social_graph_service import SocialGraphService
from .stats_service import StatsService

__all__ = [
    "CONFLICT_FAILURES",
    "TransactionalService",
    "PostInteractionService",
    "ProfileService",
    "SocialGraphService",
    "StatsService",
]
