from alembic import op
import sqlalchemy as sa

revision = "0002_hotels"
down_revision = "0001_accounts_and_keys"
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "hotels",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("merchant_id", sa.Integer(), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("star_level", sa.SmallInteger(), nullable=True),
        sa.Column("tags", sa.String(length=500), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        # 0 pending | 1 published | 2 rejected | 3 offline
        sa.Column("status", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("cancellation", sa.Text(), nullable=True),
        sa.Column("create_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("update_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.CheckConstraint("status IN (0, 1, 2, 3)", name="ck_hotels_status"),
        sa.CheckConstraint(
            "(status IN (2, 3)) = (cancellation IS NOT NULL)",
            name="ck_hotels_cancellation_status",
        ),
    )
    op.create_index("ix_hotels_merchant_id", "hotels", ["merchant_id"])
    op.create_index("ix_hotels_status", "hotels", ["status"])
    op.create_index("ix_hotels_update_time", "hotels", ["update_time"])

    op.create_table(
        "room_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("hotel_id", sa.Integer(), sa.ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
    )
    op.create_index("ix_room_types_hotel_id", "room_types", ["hotel_id"])

def downgrade():
    op.drop_index("ix_room_types_hotel_id", table_name="room_types")
    op.drop_table("room_types")

    op.drop_index("ix_hotels_update_time", table_name="hotels")
    op.drop_index("ix_hotels_status", table_name="hotels")
    op.drop_index("ix_hotels_merchant_id", table_name="hotels")
    op.drop_table("hotels")
