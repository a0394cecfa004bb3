"""create_marketplace_tables

Revision ID: 8f2c61d4a7b1
Revises:
Create Date: 2026-10-18 10:12:41.503217

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8f2c61d4a7b1"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """업그레이드 마이그레이션"""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("password_salt", sa.String(length=128), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column(
            "role", sa.String(length=20), nullable=False, server_default="user"
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "follows",
        sa.Column("follower_id", sa.Integer(), nullable=False),
        sa.Column("followee_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "follower_id <> followee_id", name="ck_follows_no_self_follow"
        ),
        sa.ForeignKeyConstraint(
            ["follower_id"],
            ["users.id"],
            name="fk_follows_follower_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["followee_id"],
            ["users.id"],
            name="fk_follows_followee_id_users",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "follower_id", "followee_id", name="pk_follows"
        ),
    )
    op.create_index("ix_follows_followee_id", "follows", ["followee_id"])

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column(
            "tag_list",
            sa.ARRAY(sa.String()),
            nullable=False,
            server_default=sa.text("'{}'"),
        ),
        sa.Column("seller_id", sa.Integer(), nullable=False),
        sa.Column(
            "favorites_count",
            sa.Integer(),
            nullable=False,
            server_default="0",
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "favorites_count >= 0",
            name="ck_items_favorites_count_non_negative",
        ),
        sa.ForeignKeyConstraint(
            ["seller_id"], ["users.id"], name="fk_items_seller_id_users"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_items"),
        sa.UniqueConstraint("slug", name="uq_items_slug"),
    )
    op.create_index("ix_items_seller_id", "items", ["seller_id"])
    op.create_index("ix_items_created_at", "items", ["created_at"])
    op.create_index(
        "ix_items_tag_list", "items", ["tag_list"], postgresql_using="gin"
    )

    op.create_table(
        "favorites",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_favorites_user_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["item_id"],
            ["items.id"],
            name="fk_favorites_item_id_items",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("user_id", "item_id", name="pk_favorites"),
    )
    op.create_index("ix_favorites_item_id", "favorites", ["item_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["author_id"],
            ["users.id"],
            name="fk_comments_author_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["item_id"],
            ["items.id"],
            name="fk_comments_item_id_items",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_comments"),
    )
    op.create_index(
        "ix_comments_item_id_created_at", "comments", ["item_id", "created_at"]
    )


def downgrade() -> None:
    """다운그레이드 마이그레이션"""
    op.drop_index("ix_comments_item_id_created_at", table_name="comments")
    op.drop_table("comments")
    op.drop_index("ix_favorites_item_id", table_name="favorites")
    op.drop_table("favorites")
    op.drop_index("ix_items_tag_list", table_name="items")
    op.drop_index("ix_items_created_at", table_name="items")
    op.drop_index("ix_items_seller_id", table_name="items")
    op.drop_table("items")
    op.drop_index("ix_follows_followee_id", table_name="follows")
    op.drop_table("follows")
    op.drop_table("users")
