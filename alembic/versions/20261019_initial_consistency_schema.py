"""create profile, graph and post interaction tables

Revision ID: 20261019_initial_consistency_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_initial_consistency_schema"
down_revision = None
branch_labels = None
depends_on = None

PROFILE_COUNTERS = ("follower_count", "following_count", "friend_count", "post_count", "comment_count")


def _id(name: str, **kwargs) -> sa.Column:
    return sa.Column(name, sa.String(length=64), nullable=False, **kwargs)


def _profile_fk(name: str, **kwargs) -> sa.Column:
    return sa.Column(
        name, sa.String(length=64), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, **kwargs
    )


def _post_fk(name: str, **kwargs) -> sa.Column:
    return sa.Column(
        name, sa.String(length=64), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, **kwargs
    )


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _counter(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=False, server_default="0")


def upgrade() -> None:
    op.create_table(
        "profiles",
        _id("id", primary_key=True),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("is_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
    )
    op.create_index("ix_profiles_username", "profiles", ["username"], unique=True)

    op.create_table(
        "profile_stats",
        _profile_fk("profile_id", primary_key=True),
        *(_counter(name) for name in PROFILE_COUNTERS),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *(
            sa.CheckConstraint(f"{name} >= 0", name=f"ck_profile_stats_{name}_non_negative")
            for name in PROFILE_COUNTERS
        ),
    )

    op.create_table(
        "follows",
        _profile_fk("follower_id", primary_key=True),
        _profile_fk("followee_id", primary_key=True),
        _created_at(),
    )
    op.create_index("ix_follows_followee_id", "follows", ["followee_id"])

    op.create_table(
        "follow_requests",
        _profile_fk("sender_id", primary_key=True),
        _profile_fk("recipient_id", primary_key=True),
        _created_at(),
    )
    op.create_index("ix_follow_requests_recipient_id", "follow_requests", ["recipient_id"])

    op.create_table(
        "friendships",
        _id("id", primary_key=True),
        _profile_fk("user_a_id"),
        _profile_fk("user_b_id"),
        _created_at(),
        sa.UniqueConstraint("user_a_id", "user_b_id", name="uq_friendship_pair"),
    )
    op.create_index("ix_friendships_user_a_id", "friendships", ["user_a_id"])
    op.create_index("ix_friendships_user_b_id", "friendships", ["user_b_id"])

    op.create_table(
        "friend_requests",
        _profile_fk("sender_id", primary_key=True),
        _profile_fk("recipient_id", primary_key=True),
        _id("pair_low_id"),
        _id("pair_high_id"),
        _created_at(),
        sa.UniqueConstraint("pair_low_id", "pair_high_id", name="uq_friend_request_pair"),
    )
    op.create_index("ix_friend_requests_recipient_id", "friend_requests", ["recipient_id"])

    op.create_table(
        "blocks",
        _profile_fk("blocker_id", primary_key=True),
        _profile_fk("blocked_id", primary_key=True),
        _created_at(),
    )
    op.create_index("ix_blocks_blocked_id", "blocks", ["blocked_id"])

    op.create_table(
        "posts",
        _id("id", primary_key=True),
        _profile_fk("author_id"),
        _profile_fk("recipient_id"),
        sa.Column("caption", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_posts_author_id", "posts", ["author_id"])
    op.create_index("ix_posts_recipient_id", "posts", ["recipient_id"])

    op.create_table(
        "post_stats",
        _post_fk("post_id", primary_key=True),
        _counter("like_count"),
        _counter("comment_count"),
        sa.CheckConstraint("like_count >= 0", name="ck_post_stats_like_count_non_negative"),
        sa.CheckConstraint("comment_count >= 0", name="ck_post_stats_comment_count_non_negative"),
    )

    op.create_table(
        "post_likes",
        _id("id", primary_key=True),
        _post_fk("post_id"),
        _profile_fk("user_id"),
        _created_at(),
        sa.UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),
    )
    op.create_index("ix_post_likes_post_id", "post_likes", ["post_id"])
    op.create_index("ix_post_likes_user_id", "post_likes", ["user_id"])

    op.create_table(
        "post_comments",
        _id("id", primary_key=True),
        _post_fk("post_id"),
        _profile_fk("user_id"),
        sa.Column("body", sa.Text(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_post_comments_post_id", "post_comments", ["post_id"])
    op.create_index("ix_post_comments_user_id", "post_comments", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_post_comments_user_id", table_name="post_comments")
    op.drop_index("ix_post_comments_post_id", table_name="post_comments")
    op.drop_table("post_comments")

    op.drop_index("ix_post_likes_user_id", table_name="post_likes")
    op.drop_index("ix_post_likes_post_id", table_name="post_likes")
    op.drop_table("post_likes")

    op.drop_table("post_stats")

    op.drop_index("ix_posts_recipient_id", table_name="posts")
    op.drop_index("ix_posts_author_id", table_name="posts")
    op.drop_table("posts")

    op.drop_index("ix_blocks_blocked_id", table_name="blocks")
    op.drop_table("blocks")

    op.drop_index("ix_friend_requests_recipient_id", table_name="friend_requests")
    op.drop_table("friend_requests")

    op.drop_index("ix_friendships_user_b_id", table_name="friendships")
    op.drop_index("ix_friendships_user_a_id", table_name="friendships")
    op.drop_table("friendships")

    op.drop_index("ix_follow_requests_recipient_id", table_name="follow_requests")
    op.drop_table("follow_requests")

    op.drop_index("ix_follows_followee_id", table_name="follows")
    op.drop_table("follows")

    op.drop_table("profile_stats")

    op.drop_index("ix_profiles_username", table_name="profiles")
    op.drop_table("profiles")
