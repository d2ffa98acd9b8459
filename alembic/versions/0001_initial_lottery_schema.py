"""initial lottery schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")
AMOUNT = sa.String(length=80)


def upgrade() -> None:
    op.create_table(
        "lottery_state",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("operator_address", sa.String(length=100), nullable=False),
        sa.Column("treasury_address", sa.String(length=100), nullable=False),
        sa.Column("randomness_adapter", sa.String(length=100), nullable=True),
        sa.Column("current_round_id", sa.BigInteger(), nullable=False),
        sa.Column("current_ticket_id", sa.BigInteger(), nullable=False),
        sa.Column("max_number_tickets_each_time", sa.Integer(), nullable=False),
        sa.Column("pending_injection_next_lottery", AMOUNT, nullable=False),
        sa.Column("all_pending_rewards", AMOUNT, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_lottery_state"),
    )
    op.create_table(
        "lottery_rounds",
        sa.Column("id", ID_TYPE, autoincrement=False, nullable=False),
        sa.Column("status", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.BigInteger(), nullable=False),
        sa.Column("end_time", sa.BigInteger(), nullable=False),
        sa.Column("ticket_price", AMOUNT, nullable=False),
        sa.Column("rewards_breakdown", sa.JSON(), nullable=False),
        sa.Column("treasury_fee", sa.Integer(), nullable=False),
        sa.Column("first_ticket_id", sa.BigInteger(), nullable=False),
        sa.Column("first_ticket_id_next_round", sa.BigInteger(), nullable=False),
        sa.Column("amount_collected", AMOUNT, nullable=False),
        sa.Column("final_number", sa.Integer(), nullable=True),
        sa.Column("randomness_request_id", sa.String(length=128), nullable=True),
        sa.Column("count_winners_per_bracket", sa.JSON(), nullable=False),
        sa.Column("reward_per_bracket", sa.Text(), nullable=False),
        sa.Column("reward_per_ticket_per_bracket", sa.Text(), nullable=False),
        sa.Column("treasury_amount", AMOUNT, nullable=False),
        sa.Column("rollover_amount", AMOUNT, nullable=False),
        sa.Column("pending_rewards", AMOUNT, nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_lottery_rounds"),
    )
    op.create_table(
        "lottery_bracket_counts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("round_id", ID_TYPE, nullable=False),
        sa.Column("bracket", sa.Integer(), nullable=False),
        sa.Column("key", sa.Integer(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["round_id"],
            ["lottery_rounds.id"],
            name="fk_lottery_bracket_counts_round_id_lottery_rounds",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_lottery_bracket_counts"),
        sa.UniqueConstraint(
            "round_id", "bracket", "key", name="uq_bracket_count_round_bracket_key"
        ),
    )
    op.create_index(
        "ix_bracket_counts_round", "lottery_bracket_counts", ["round_id"], unique=False
    )
    op.create_table(
        "lottery_tickets",
        sa.Column("id", ID_TYPE, autoincrement=False, nullable=False),
        sa.Column("round_id", ID_TYPE, nullable=False),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("owner", sa.String(length=100), nullable=False),
        sa.Column("claimed", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.ForeignKeyConstraint(
            ["round_id"],
            ["lottery_rounds.id"],
            name="fk_lottery_tickets_round_id_lottery_rounds",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_lottery_tickets"),
    )
    op.create_index(
        "ix_tickets_owner_round", "lottery_tickets", ["owner", "round_id"], unique=False
    )
    op.create_index("ix_tickets_round", "lottery_tickets", ["round_id"], unique=False)
    op.create_table(
        "lottery_events",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("event_type", sa.String(length=32), nullable=False),
        sa.Column("round_id", ID_TYPE, nullable=True),
        sa.Column("actor", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "event_type IN ('LotteryOpen', 'TicketsPurchased', 'LotteryInjection', "
            "'LotteryClose', 'LotteryNumberDrawn', 'TicketsClaim', "
            "'NewTreasuryAddress', 'NewRandomGenerator', 'NewMaxTicketsPerBatch')",
            name="ck_lottery_events_event_type_enum",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_lottery_events"),
    )
    op.create_index(
        "ix_lottery_events_round_type",
        "lottery_events",
        ["round_id", "event_type"],
        unique=False,
    )
    op.create_table(
        "ledger_accounts",
        sa.Column("address", sa.String(length=100), nullable=False),
        sa.Column("balance", AMOUNT, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("address", name="pk_ledger_accounts"),
    )
    op.create_table(
        "ledger_transfers",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("sender", sa.String(length=100), nullable=True),
        sa.Column("recipient", sa.String(length=100), nullable=False),
        sa.Column("amount", AMOUNT, nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "kind IN ('mint','in','out')", name="ck_ledger_transfers_kind_enum"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_ledger_transfers"),
    )
    op.create_index(
        "ix_ledger_transfers_recipient", "ledger_transfers", ["recipient"], unique=False
    )
    op.create_index(
        "ix_ledger_transfers_sender", "ledger_transfers", ["sender"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_ledger_transfers_sender", table_name="ledger_transfers")
    op.drop_index("ix_ledger_transfers_recipient", table_name="ledger_transfers")
    op.drop_table("ledger_transfers")
    op.drop_table("ledger_accounts")
    op.drop_index("ix_lottery_events_round_type", table_name="lottery_events")
    op.drop_table("lottery_events")
    op.drop_index("ix_tickets_round", table_name="lottery_tickets")
    op.drop_index("ix_tickets_owner_round", table_name="lottery_tickets")
    op.drop_table("lottery_tickets")
    op.drop_index("ix_bracket_counts_round", table_name="lottery_bracket_counts")
    op.drop_table("lottery_bracket_counts")
    op.drop_table("lottery_rounds")
    op.drop_table("lottery_state")
