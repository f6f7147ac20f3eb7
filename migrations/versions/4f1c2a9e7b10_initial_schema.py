"""initial schema

Revision ID: 4f1c2a9e7b10
Revises:
Create Date: 2026-10-19 10:12:44.512903

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1c2a9e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_type_enum = sa.Enum("customer", "cash_lending_customer", "admin", name="usertype")
user_status_enum = sa.Enum("pending_verification", "active", "suspended", name="userstatus")
loan_type_enum = sa.Enum("personal", "business", name="loantype")
loan_status_enum = sa.Enum(
    "draft", "submitted", "under_review", "requires_documents", "approved", "rejected", "disbursed", "closed",
    "cancelled", name="loanstatus"
)
loan_type_association_enum = sa.Enum("personal", "business", "any", name="loantypeassociation")
membership_status_enum = sa.Enum("active", "expired", "cancelled", name="membershipstatus")
subscription_status_enum = sa.Enum("active", "expired", "cancelled", "grace_period", name="subscriptionstatus")
enquiry_status_enum = sa.Enum("new", "in_progress", "resolved", name="enquirystatus")
order_type_enum = sa.Enum("membership_card", "cash_lending_subscription", name="ordertype")
payment_order_status_enum = sa.Enum("created", "paid", name="paymentorderstatus")


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("modified_at", sa.DateTime(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def _actor_columns() -> list[sa.Column]:
    return [
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("modified_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=True),
        sa.Column("phone_number", sa.String(length=15), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("user_type", user_type_enum, nullable=False),
        sa.Column("address_line1", sa.String(length=255), nullable=True),
        sa.Column("address_line2", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("pincode", sa.String(length=6), nullable=True),
        sa.Column("profile_image", sa.String(length=255), nullable=True),
        sa.Column("status", user_status_enum, nullable=False),
        sa.Column("is_phone_verified", sa.Boolean(), nullable=True),
        sa.Column("email_verified_at", sa.DateTime(), nullable=True),
        sa.Column("phone_verified_at", sa.DateTime(), nullable=True),
        sa.Column("phone_otp", sa.String(length=10), nullable=True),
        sa.Column("phone_otp_expires_at", sa.DateTime(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_full_name", "users", ["full_name"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_phone_number", "users", ["phone_number"], unique=True)
    op.create_index("ix_users_user_type", "users", ["user_type"])
    op.create_index("ix_users_status", "users", ["status"])

    op.create_table(
        "bank_partners",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("logo_url", sa.String(length=500), nullable=True),
        sa.Column("contact_person_name", sa.String(length=255), nullable=True),
        sa.Column("contact_person_email", sa.String(length=100), nullable=True),
        sa.Column("contact_person_phone", sa.String(length=15), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        *_audit_columns(),
        *_actor_columns(),
    )
    op.create_index("ix_bank_partners_id", "bank_partners", ["id"])
    op.create_index("ix_bank_partners_name", "bank_partners", ["name"], unique=True)
    op.create_index("ix_bank_partners_is_active", "bank_partners", ["is_active"])

    op.create_table(
        "loan_applications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("application_uid", sa.String(length=20), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("loan_type", loan_type_enum, nullable=False),
        sa.Column("amount_requested", sa.Float(), nullable=False),
        sa.Column("amount_approved", sa.Float(), nullable=True),
        sa.Column("interest_rate_proposed", sa.Float(), nullable=True),
        sa.Column("interest_rate_final", sa.Float(), nullable=True),
        sa.Column("tenure_months_requested", sa.Integer(), nullable=False),
        sa.Column("tenure_months_final", sa.Integer(), nullable=True),
        sa.Column("processing_fee", sa.Float(), nullable=True),
        sa.Column("purpose", sa.String(length=500), nullable=True),
        sa.Column("status", loan_status_enum, server_default="submitted", nullable=False),
        sa.Column(
            "bank_partner_id", sa.Integer(), sa.ForeignKey("bank_partners.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("application_date", sa.DateTime(), nullable=False),
        sa.Column("documents_submitted", sa.JSON(), nullable=False),
        sa.Column("admin_remarks", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("approved_date", sa.DateTime(), nullable=True),
        sa.Column("disbursed_date", sa.DateTime(), nullable=True),
        sa.Column("closed_date", sa.DateTime(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_loan_applications_id", "loan_applications", ["id"])
    op.create_index("ix_loan_applications_application_uid", "loan_applications", ["application_uid"], unique=True)
    op.create_index("ix_loan_applications_user_id", "loan_applications", ["user_id"])
    op.create_index("ix_loan_applications_loan_type", "loan_applications", ["loan_type"])
    op.create_index("ix_loan_applications_status", "loan_applications", ["status"])

    op.create_table(
        "membership_card_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("validity_months", sa.Integer(), nullable=False),
        sa.Column("benefits_description", sa.Text(), nullable=True),
        sa.Column("loan_type_association", loan_type_association_enum, nullable=False),
        sa.Column("max_loan_amount_benefit", sa.Float(), nullable=True),
        sa.Column("processing_time_benefit", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        *_audit_columns(),
        *_actor_columns(),
    )
    op.create_index("ix_membership_card_types_id", "membership_card_types", ["id"])
    op.create_index("ix_membership_card_types_is_active", "membership_card_types", ["is_active"])

    op.create_table(
        "membership_cards",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("card_type_id", sa.Integer(), sa.ForeignKey("membership_card_types.id"), nullable=False),
        sa.Column("purchase_date", sa.DateTime(), nullable=False),
        sa.Column("expiry_date", sa.DateTime(), nullable=False),
        sa.Column("payment_id", sa.String(length=100), nullable=True, unique=True),
        sa.Column("status", membership_status_enum, nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_membership_cards_id", "membership_cards", ["id"])
    op.create_index("ix_membership_cards_user_id", "membership_cards", ["user_id"])
    op.create_index("ix_membership_cards_card_type_id", "membership_cards", ["card_type_id"])
    op.create_index("ix_membership_cards_status", "membership_cards", ["status"])
    op.create_index(
        "uq_membership_cards_active_user", "membership_cards", ["user_id"], unique=True,
        sqlite_where=sa.text("status = 'active'"), postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "cash_lending_subscription_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("duration_days", sa.Integer(), nullable=False),
        sa.Column("features", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        *_audit_columns(),
        *_actor_columns(),
    )
    op.create_index("ix_cash_lending_subscription_plans_id", "cash_lending_subscription_plans", ["id"])
    op.create_index(
        "ix_cash_lending_subscription_plans_is_active", "cash_lending_subscription_plans", ["is_active"]
    )

    op.create_table(
        "cash_lending_subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("plan_id", sa.Integer(), sa.ForeignKey("cash_lending_subscription_plans.id"), nullable=False),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("payment_id", sa.String(length=100), nullable=True, unique=True),
        sa.Column("status", subscription_status_enum, nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_cash_lending_subscriptions_id", "cash_lending_subscriptions", ["id"])
    op.create_index("ix_cash_lending_subscriptions_user_id", "cash_lending_subscriptions", ["user_id"])
    op.create_index("ix_cash_lending_subscriptions_plan_id", "cash_lending_subscriptions", ["plan_id"])
    op.create_index("ix_cash_lending_subscriptions_status", "cash_lending_subscriptions", ["status"])

    op.create_table(
        "payment_orders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("razorpay_order_id", sa.String(length=100), nullable=False, unique=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("order_type", order_type_enum, nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=10), nullable=False),
        sa.Column("status", payment_order_status_enum, nullable=False),
        sa.Column("payment_id", sa.String(length=100), nullable=True, unique=True),
        *_audit_columns(),
    )
    op.create_index("ix_payment_orders_id", "payment_orders", ["id"])
    op.create_index("ix_payment_orders_user_id", "payment_orders", ["user_id"])
    op.create_index("ix_payment_orders_status", "payment_orders", ["status"])

    op.create_table(
        "static_contents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content_body", sa.Text(), nullable=False),
        sa.Column("meta_description", sa.String(length=500), nullable=True),
        sa.Column("last_updated_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("is_published", sa.Boolean(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_static_contents_id", "static_contents", ["id"])
    op.create_index("ix_static_contents_slug", "static_contents", ["slug"], unique=True)

    op.create_table(
        "enquiries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("phone_number", sa.String(length=15), nullable=True),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", enquiry_status_enum, nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_enquiries_id", "enquiries", ["id"])
    op.create_index("ix_enquiries_email", "enquiries", ["email"])
    op.create_index("ix_enquiries_status", "enquiries", ["status"])


def downgrade() -> None:
    """Downgrade schema."""
    for table_name in (
            "enquiries", "static_contents", "payment_orders", "cash_lending_subscriptions",
            "cash_lending_subscription_plans", "membership_cards", "membership_card_types", "loan_applications", "bank_partners", "users",
    ):
        op.drop_table(table_name)

    bind = op.get_bind()
    for enum_type in (
            enquiry_status_enum, payment_order_status_enum, order_type_enum, subscription_status_enum, membership_status_enum, loan_type_association_enum,
            loan_status_enum, loan_type_enum, user_status_enum, user_type_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
