"""create users, members, payment records and notification logs

Revision ID: 0001_create_dues_tables
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_create_dues_tables"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("admin", "member", name="user_role")
member_status = sa.Enum("active", "inactive", "suspended", name="member_status")
payment_status = sa.Enum("paid", "unpaid", "partial", name="payment_status")
notification_type = sa.Enum("payment_reminder", "balance_info", name="notification_type")
notification_status = sa.Enum("sent", "failed", name="notification_status")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("NOW()")),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("status", member_status, nullable=False, server_default="active"),
        sa.Column("cash_balance", sa.Numeric(precision=10, scale=2), nullable=False, server_default="0"),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("NOW()")),
    )
    op.create_index("ix_members_email", "members", ["email"], unique=True)

    op.create_table(
        "payment_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("month", sa.String(length=7), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month_number", sa.Integer(), nullable=False),
        sa.Column("amount_due", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("amount_paid", sa.Numeric(precision=10, scale=2), nullable=False, server_default="0"),
        sa.Column("status", payment_status, nullable=False, server_default="unpaid"),
        sa.Column("payment_date", sa.DateTime(), nullable=True),
        sa.Column("recorded_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("NOW()")),
    )
    op.create_index("ix_payment_records_member_id", "payment_records", ["member_id"])
    op.create_index("ix_payment_records_month", "payment_records", ["month"])

    op.create_table(
        "notification_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("sent_at", sa.DateTime(), nullable=False, server_default=sa.text("NOW()")),
        sa.Column("sent_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", notification_status, nullable=False, server_default="sent"),
    )
    op.create_index("ix_notification_logs_member_id", "notification_logs", ["member_id"])


def downgrade() -> None:
    op.drop_index("ix_notification_logs_member_id", table_name="notification_logs")
    op.drop_table("notification_logs")
    op.drop_index("ix_payment_records_month", table_name="payment_records")
    op.drop_index("ix_payment_records_member_id", table_name="payment_records")
    op.drop_table("payment_records")
    op.drop_index("ix_members_email", table_name="members")
    op.drop_table("members")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (notification_status, notification_type, payment_status, member_status, user_role):
        enum_type.drop(bind, checkfirst=True)
