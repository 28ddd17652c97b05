"""initial schema: users, auth_keys, wechat_accounts, devices

Revision ID: 0001_initial
Revises:
Create Date: 2026-03-02 10:00:00

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'agent', 'user')", name=op.f("ck_users_role_valid")),
        sa.CheckConstraint(
            "length(hashed_password) > 0", name=op.f("ck_users_password_not_empty")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("email", name=op.f("uq_users_email")),
        sa.UniqueConstraint("username", name=op.f("uq_users_username")),
    )

    op.create_table(
        "auth_keys",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("key_value", sa.String(length=64), nullable=False),
        sa.Column("owner_user_id", sa.Integer(), nullable=False),
        sa.Column("days", sa.Integer(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("1"), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["owner_user_id"], ["users.id"], name=op.f("fk_auth_keys_owner_user_id_users")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_auth_keys")),
        sa.UniqueConstraint("key_value", name=op.f("uq_auth_keys_key_value")),
    )
    op.create_index(
        op.f("ix_auth_keys_owner_user_id"), "auth_keys", ["owner_user_id"], unique=False
    )

    op.create_table(
        "wechat_accounts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("auth_key", sa.String(length=64), nullable=False),
        sa.Column("device_auth_key", sa.String(length=128), nullable=True),
        sa.Column("nickname", sa.String(length=100), nullable=True),
        sa.Column("username", sa.String(length=100), nullable=True),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("qr_code_url", sa.Text(), nullable=True),
        sa.Column("owner_user_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "status IN ('waiting', 'scanning', 'scanned_confirming', "
            "'online', 'offline', 'failed')",
            name=op.f("ck_wechat_accounts_status_valid"),
        ),
        sa.ForeignKeyConstraint(
            ["auth_key"],
            ["auth_keys.key_value"],
            name=op.f("fk_wechat_accounts_auth_key_auth_keys"),
        ),
        sa.ForeignKeyConstraint(
            ["owner_user_id"],
            ["users.id"],
            name=op.f("fk_wechat_accounts_owner_user_id_users"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_wechat_accounts")),
        sa.UniqueConstraint("auth_key", name=op.f("uq_wechat_accounts_auth_key")),
    )
    op.create_index(
        op.f("ix_wechat_accounts_owner_user_id"),
        "wechat_accounts",
        ["owner_user_id"],
        unique=False,
    )

    op.create_table(
        "devices",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("device_name", sa.String(length=100), nullable=False),
        sa.Column("auth_key", sa.String(length=64), nullable=False),
        sa.Column("owner_user_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(
            ["auth_key"], ["auth_keys.key_value"], name=op.f("fk_devices_auth_key_auth_keys")
        ),
        sa.ForeignKeyConstraint(
            ["owner_user_id"], ["users.id"], name=op.f("fk_devices_owner_user_id_users")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_devices")),
    )
    op.create_index(
        op.f("ix_devices_owner_user_id"), "devices", ["owner_user_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_devices_owner_user_id"), table_name="devices")
    op.drop_table("devices")
    op.drop_index(op.f("ix_wechat_accounts_owner_user_id"), table_name="wechat_accounts")
    op.drop_table("wechat_accounts")
    op.drop_index(op.f("ix_auth_keys_owner_user_id"), table_name="auth_keys")
    op.drop_table("auth_keys")
    op.drop_table("users")
