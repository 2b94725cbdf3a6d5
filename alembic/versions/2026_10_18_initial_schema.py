"""Create task, update, directory, favorite and installation tables.

Revision ID: taskbot_initial_20261018
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = "taskbot_initial_20261018"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Apply the initial schema."""
    bind = op.get_bind()
    inspector = inspect(bind)
    tables = inspector.get_table_names()

    if "tasks" not in tables:
        op.create_table(
            "tasks",
            sa.Column("id", sa.UUID(), nullable=False),
            sa.Column("user_id", sa.String(length=32), nullable=False),
            sa.Column("team_id", sa.String(length=32), nullable=False, server_default=""),
            sa.Column("title", sa.String(length=3000), nullable=False),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("now()"),
            ),
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
            sa.CheckConstraint(
                "(status = 'completed') = (completed_at IS NOT NULL)",
                name="ck_tasks_completed_at",
            ),
            sa.CheckConstraint(
                "(status = 'deleted') = (deleted_at IS NOT NULL)",
                name="ck_tasks_deleted_at",
            ),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_tasks_id"), "tasks", ["id"], unique=False)
        op.create_index(op.f("ix_tasks_status"), "tasks", ["status"], unique=False)
        op.create_index("ix_tasks_owner", "tasks", ["user_id", "team_id"], unique=False)

    if "updates" not in tables:
        op.create_table(
            "updates",
            sa.Column("id", sa.UUID(), nullable=False),
            sa.Column("task_id", sa.UUID(), nullable=False),
            sa.Column("user_id", sa.String(length=32), nullable=False),
            sa.Column("team_id", sa.String(length=32), nullable=False, server_default=""),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("now()"),
            ),
            sa.ForeignKeyConstraint(["task_id"], ["tasks.id"]),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_updates_id"), "updates", ["id"], unique=False)
        op.create_index(op.f("ix_updates_task_id"), "updates", ["task_id"], unique=False)
        op.create_index("ix_updates_owner", "updates", ["user_id", "team_id"], unique=False)

    if "users" not in tables:
        op.create_table(
            "users",
            sa.Column("id", sa.UUID(), nullable=False),
            sa.Column("slack_user_id", sa.String(length=32), nullable=False),
            sa.Column("team_id", sa.String(length=32), nullable=False, server_default=""),
            sa.Column("name", sa.String(length=255), nullable=True),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column(
                "synced_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("now()"),
            ),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint("slack_user_id", "team_id", name="uq_users_slack_user_team"),
        )
        op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
        op.create_index(op.f("ix_users_slack_user_id"), "users", ["slack_user_id"], unique=False)
        op.create_index(op.f("ix_users_name"), "users", ["name"], unique=False)

    if "favorites" not in tables:
        op.create_table(
            "favorites",
            sa.Column("id", sa.UUID(), nullable=False),
            sa.Column("manager_user_id", sa.String(length=32), nullable=False),
            sa.Column("favorite_user_id", sa.String(length=32), nullable=False),
            sa.Column("team_id", sa.String(length=32), nullable=False, server_default=""),
            sa.Column(
                "created_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("now()"),
            ),
            sa.PrimaryKeyConstraint("id"),
            sa.UniqueConstraint(
                "manager_user_id",
                "favorite_user_id",
                "team_id",
                name="uq_favorites_manager_favorite_team",
            ),
        )
        op.create_index(op.f("ix_favorites_id"), "favorites", ["id"], unique=False)
        op.create_index(
            op.f("ix_favorites_manager_user_id"), "favorites", ["manager_user_id"], unique=False
        )

    if "installations" not in tables:
        op.create_table(
            "installations",
            sa.Column("id", sa.UUID(), nullable=False),
            sa.Column("team_id", sa.String(length=32), nullable=False),
            sa.Column("team_name", sa.String(length=255), nullable=True),
            sa.Column("enterprise_id", sa.String(length=32), nullable=True),
            sa.Column("app_id", sa.String(length=32), nullable=True),
            sa.Column("bot_token", sa.String(length=512), nullable=False),
            sa.Column("bot_id", sa.String(length=32), nullable=True),
            sa.Column("bot_user_id", sa.String(length=32), nullable=True),
            sa.Column("bot_scopes", sa.String(length=1024), nullable=True),
            sa.Column("installer_user_id", sa.String(length=32), nullable=True),
            sa.Column(
                "installed_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.text("now()"),
            ),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index(op.f("ix_installations_id"), "installations", ["id"], unique=False)
        op.create_index(op.f("ix_installations_team_id"), "installations", ["team_id"], unique=True)


def downgrade() -> None:
    """Drop the initial schema."""
    op.drop_index(op.f("ix_installations_team_id"), table_name="installations")
    op.drop_index(op.f("ix_installations_id"), table_name="installations")
    op.drop_table("installations")

    op.drop_index(op.f("ix_favorites_manager_user_id"), table_name="favorites")
    op.drop_index(op.f("ix_favorites_id"), table_name="favorites")
    op.drop_table("favorites")

    op.drop_index(op.f("ix_users_name"), table_name="users")
    op.drop_index(op.f("ix_users_slack_user_id"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")

    op.drop_index("ix_updates_owner", table_name="updates")
    op.drop_index(op.f("ix_updates_task_id"), table_name="updates")
    op.drop_index(op.f("ix_updates_id"), table_name="updates")
    op.drop_table("updates")

    op.drop_index("ix_tasks_owner", table_name="tasks")
    op.drop_index(op.f("ix_tasks_status"), table_name="tasks")
    op.drop_index(op.f("ix_tasks_id"), table_name="tasks")
    op.drop_table("tasks")
