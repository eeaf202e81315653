"""Startups, co-founder invitations, user profiles and onboarding"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_init_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    uuid = postgresql.UUID(as_uuid=True)

    user_type_enum = postgresql.ENUM("FOUNDER", "INVESTOR", name="user_type", create_type=False)
    startup_stage_enum = postgresql.ENUM(
        "IDEA",
        "MVP",
        "LAUNCHED",
        "GROWTH",
        "SCALING",
        name="startup_stage",
        create_type=False,
    )
    funding_stage_enum = postgresql.ENUM(
        "PRE_SEED",
        "SEED",
        "SERIES_A",
        "SERIES_B",
        "SERIES_C_PLUS",
        "BOOTSTRAPPED",
        name="funding_stage",
        create_type=False,
    )
    applied_before_enum = postgresql.ENUM(
        "first_time",
        "same_idea",
        "different_idea",
        name="applied_before",
        create_type=False,
    )
    invitation_status_enum = postgresql.ENUM(
        "PENDING",
        "ACCEPTED",
        "DECLINED",
        name="invitation_status",
        create_type=False,
    )
    onboarding_variant_enum = postgresql.ENUM(
        "application",
        "dashboard",
        name="onboarding_variant",
        create_type=False,
    )
    onboarding_submission_status_enum = postgresql.ENUM(
        "pending",
        "completed",
        "failed",
        name="onboarding_submission_status",
        create_type=False,
    )

    bind = op.get_bind()
    user_type_enum.create(bind, checkfirst=True)
    startup_stage_enum.create(bind, checkfirst=True)
    funding_stage_enum.create(bind, checkfirst=True)
    applied_before_enum.create(bind, checkfirst=True)
    invitation_status_enum.create(bind, checkfirst=True)
    onboarding_variant_enum.create(bind, checkfirst=True)
    onboarding_submission_status_enum.create(bind, checkfirst=True)

    op.create_table(
        "user_profiles",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("user_type", user_type_enum, nullable=False),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_user_profiles_user_id", "user_profiles", ["user_id"], unique=True)

    narrative_columns = [
        sa.Column(name, sa.Text(), nullable=True)
        for name in (
            "problem_solving",
            "why_this_idea",
            "target_market",
            "customer_need",
            "competitors",
            "monetization",
            "how_far_along",
            "working_time",
            "tech_stack",
            "version_timeline",
            "traction",
            "previous_application_notes",
            "incubator_info",
            "legal_entities",
            "equity_breakdown",
        )
    ]
    flag_columns = [
        sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false())
        for name in (
            "people_using",
            "has_revenue",
            "has_legal_entity",
            "investment_taken",
            "currently_fundraising",
        )
    ]
    op.create_table(
        "startups",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("organization_id", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("short_description", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("demo_video", sa.Text(), nullable=True),
        sa.Column("industry", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("stage", startup_stage_enum, nullable=False, server_default=sa.text("'IDEA'")),
        sa.Column("founded_date", sa.String(length=32), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("future_location", sa.Text(), nullable=True),
        sa.Column("location_explanation", sa.Text(), nullable=True),
        sa.Column("team_size", sa.Integer(), nullable=True),
        *narrative_columns,
        *flag_columns,
        sa.Column("funding_stage", funding_stage_enum, nullable=True),
        sa.Column("applied_before", applied_before_enum, nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_startups_organization_id", "startups", ["organization_id"], unique=True)
    op.create_index("ix_startups_slug", "startups", ["slug"], unique=True)

    op.create_table(
        "co_founder_invitations",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("startup_id", uuid, sa.ForeignKey("startups.id", ondelete="CASCADE"), nullable=False),
        sa.Column("organization_id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("equity_percentage", sa.Float(), nullable=False),
        sa.Column(
            "invitation_status",
            invitation_status_enum,
            nullable=False,
            server_default=sa.text("'PENDING'"),
        ),
        sa.Column("invited_by", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("invited_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_co_founder_invitations_startup_id", "co_founder_invitations", ["startup_id"])
    op.create_index("ix_co_founder_invitations_organization_id", "co_founder_invitations", ["organization_id"])

    op.create_table(
        "onboarding_drafts",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("variant", onboarding_variant_enum, nullable=False),
        sa.Column("current_step", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("values", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("errors", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
    )
    op.create_index("ix_onboarding_drafts_user_id", "onboarding_drafts", ["user_id"])

    op.create_table(
        "onboarding_submissions",
        sa.Column("id", uuid, primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("idempotency_key", sa.String(length=255), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "draft_id",
            uuid,
            sa.ForeignKey("onboarding_drafts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "status",
            onboarding_submission_status_enum,
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column("failed_step", sa.String(length=64), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("organization_id", sa.String(length=255), nullable=True),
        sa.Column("startup_id", uuid, nullable=True),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("NOW()"), nullable=False),
        sa.UniqueConstraint("idempotency_key", name="uq_onboarding_submissions_idempotency_key"),
    )
    op.create_index("ix_onboarding_submissions_user_id", "onboarding_submissions", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_onboarding_submissions_user_id", table_name="onboarding_submissions")
    op.drop_table("onboarding_submissions")

    op.drop_index("ix_onboarding_drafts_user_id", table_name="onboarding_drafts")
    op.drop_table("onboarding_drafts")

    op.drop_index("ix_co_founder_invitations_organization_id", table_name="co_founder_invitations")
    op.drop_index("ix_co_founder_invitations_startup_id", table_name="co_founder_invitations")
    op.drop_table("co_founder_invitations")

    op.drop_index("ix_startups_slug", table_name="startups")
    op.drop_index("ix_startups_organization_id", table_name="startups")
    op.drop_table("startups")

    op.drop_index("ix_user_profiles_user_id", table_name="user_profiles")
    op.drop_table("user_profiles")

    bind = op.get_bind()
    postgresql.ENUM(name="onboarding_submission_status").drop(bind, checkfirst=True)
    postgresql.ENUM(name="onboarding_variant").drop(bind, checkfirst=True)
    postgresql.ENUM(name="invitation_status").drop(bind, checkfirst=True)
    postgresql.ENUM(name="applied_before").drop(bind, checkfirst=True)
    postgresql.ENUM(name="funding_stage").drop(bind, checkfirst=True)
    postgresql.ENUM(name="startup_stage").drop(bind, checkfirst=True)
    postgresql.ENUM(name="user_type").drop(bind, checkfirst=True)
