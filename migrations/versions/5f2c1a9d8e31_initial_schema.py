"""initial schema

Revision ID: 5f2c1a9d8e31
Revises:
Create Date: 2026-10-19 09:12:44.318502

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5f2c1a9d8e31"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, lists, chats and messages."""
    op.create_table(
        "user_list",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("list_type", sa.String(length=7), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "usr",
        sa.Column("login", sa.String(length=50), nullable=False),
        sa.Column("phone_num", sa.String(length=16), nullable=True),
        sa.Column("credential", sa.String(length=64), nullable=False),
        sa.Column("status", sa.Text(), nullable=True),
        sa.Column("contact_list_id", sa.Integer(), nullable=False),
        sa.Column("block_list_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["contact_list_id"], ["user_list.id"]),
        sa.ForeignKeyConstraint(["block_list_id"], ["user_list.id"]),
        sa.PrimaryKeyConstraint("login"),
        sa.UniqueConstraint("phone_num"),
    )
    op.create_table(
        "user_list_contains",
        sa.Column("list_id", sa.Integer(), nullable=False),
        sa.Column("list_member", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(["list_id"], ["user_list.id"]),
        sa.ForeignKeyConstraint(["list_member"], ["usr.login"]),
        sa.PrimaryKeyConstraint("list_id", "list_member"),
    )
    op.create_table(
        "chat",
        sa.Column("chat_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chat_type", sa.String(length=7), nullable=False),
        sa.Column("init_sender", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(["init_sender"], ["usr.login"]),
        sa.PrimaryKeyConstraint("chat_id"),
    )
    op.create_index("ix_chat_init_sender", "chat", ["init_sender"])
    op.create_table(
        "chat_list",
        sa.Column("chat_id", sa.Integer(), nullable=False),
        sa.Column("member", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(["chat_id"], ["chat.chat_id"]),
        sa.ForeignKeyConstraint(["member"], ["usr.login"]),
        sa.PrimaryKeyConstraint("chat_id", "member"),
    )
    op.create_table(
        "message",
        sa.Column("msg_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chat_id", sa.Integer(), nullable=False),
        sa.Column("sender_login", sa.String(length=50), nullable=False),
        sa.Column("msg_text", sa.Text(), nullable=False),
        sa.Column("msg_timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["chat_id"], ["chat.chat_id"]),
        sa.ForeignKeyConstraint(["sender_login"], ["usr.login"]),
        sa.PrimaryKeyConstraint("msg_id"),
    )
    op.create_index("ix_message_chat_id", "message", ["chat_id"])
    op.create_index("ix_message_msg_timestamp", "message", ["msg_timestamp"])


def downgrade() -> None:
    """Drop every table, children first."""
    op.drop_index("ix_message_msg_timestamp", table_name="message")
    op.drop_index("ix_message_chat_id", table_name="message")
    op.drop_table("message")
    op.drop_table("chat_list")
    op.drop_index("ix_chat_init_sender", table_name="chat")
    op.drop_table("chat")
    op.drop_table("user_list_contains")
    op.drop_table("usr")
    op.drop_table("user_list")
