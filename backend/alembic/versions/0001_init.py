from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

# 2**256 - 1 has 78 decimal digits
UINT = sa.String(length=78)

def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "rate_registry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("global_rate", UINT, nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    op.create_table(
        "accounts",
        sa.Column("address", sa.String(length=64), primary_key=True),
        sa.Column("principal", UINT, nullable=False, server_default="0"),
        sa.Column("rate", UINT, nullable=False, server_default="0"),
        sa.Column("last_settled_at", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    op.create_table(
        "allowances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("owner", sa.String(length=64), nullable=False),
        sa.Column("spender", sa.String(length=64), nullable=False),
        sa.Column("amount", UINT, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
        sa.UniqueConstraint("owner", "spender", name="uq_allowances_owner_spender"),
    )
    op.create_index("ix_allowances_owner", "allowances", ["owner"])
    op.create_index("ix_allowances_spender", "allowances", ["spender"])

    op.create_table(
        "ledger_roles",
        sa.Column("account", sa.String(length=64), primary_key=True),
        sa.Column("role", sa.String(length=32), primary_key=True),
        sa.Column("granted_by", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )

    op.create_table(
        "rate_changes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("old_rate", UINT, nullable=False),
        sa.Column("new_rate", UINT, nullable=False),
        sa.Column("changed_by", sa.String(length=64), nullable=False),
        sa.Column("changed_at", sa.BigInteger(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=True),
    )
    op.create_index("ix_rate_changes_changed_at", "rate_changes", ["changed_at"])

def downgrade():
    op.drop_index("ix_rate_changes_changed_at", table_name="rate_changes")
    op.drop_table("rate_changes")
    op.drop_table("ledger_roles")
    op.drop_index("ix_allowances_spender", table_name="allowances")
    op.drop_index("ix_allowances_owner", table_name="allowances")
    op.drop_table("allowances")
    op.drop_table("accounts")
    op.drop_table("rate_registry")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
