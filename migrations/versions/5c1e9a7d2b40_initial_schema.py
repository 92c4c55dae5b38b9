"""initial schema

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-10-19 10:12:44.218391

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c1e9a7d2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
    sa.Column('id', sa.String(length=128), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=True),
    sa.Column('display_name', sa.String(length=255), nullable=True),
    sa.Column('role', sa.String(length=50), nullable=False),
    sa.Column('previous_role', sa.String(length=50), nullable=True),
    sa.Column('role_changed_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('profile', sa.JSON(), nullable=True),
    sa.Column('is_complete', sa.Boolean(), nullable=False),
    sa.Column('fcm_token', sa.String(length=512), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email')
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_role'), ['role'], unique=False)

    op.create_table('audit_events',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=128), nullable=False),
    sa.Column('action', sa.String(length=255), nullable=False),
    sa.Column('data', sa.JSON(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('audit_events', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_audit_events_user_id'), ['user_id'], unique=False)

    op.create_table('business_ideas',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=128), nullable=False),
    sa.Column('author_name', sa.String(length=255), nullable=True),
    sa.Column('author_email', sa.String(length=255), nullable=True),
    sa.Column('author_profile', sa.JSON(), nullable=True),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('category', sa.String(length=100), nullable=True),
    sa.Column('budget', sa.String(length=100), nullable=True),
    sa.Column('timeline', sa.String(length=100), nullable=True),
    sa.Column('target_market', sa.Text(), nullable=True),
    sa.Column('revenue_model', sa.Text(), nullable=True),
    sa.Column('team_info', sa.Text(), nullable=True),
    sa.Column('tags', sa.JSON(), nullable=True),
    sa.Column('status', sa.String(length=50), nullable=False),
    sa.Column('views', sa.Integer(), nullable=False),
    sa.Column('interested', sa.Integer(), nullable=False),
    sa.Column('featured', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('business_ideas', schema=None) as batch_op:
        batch_op.create_index('ix_business_ideas_status_created', ['status', 'created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_business_ideas_user_id'), ['user_id'], unique=False)

    op.create_table('investment_proposals',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('business_idea_id', sa.String(length=36), nullable=False),
    sa.Column('business_idea_title', sa.String(length=255), nullable=True),
    sa.Column('business_idea_category', sa.String(length=100), nullable=True),
    sa.Column('business_idea_user_id', sa.String(length=128), nullable=False),
    sa.Column('investor_id', sa.String(length=128), nullable=False),
    sa.Column('investor_name', sa.String(length=255), nullable=True),
    sa.Column('investor_email', sa.String(length=255), nullable=True),
    sa.Column('investor_profile', sa.JSON(), nullable=True),
    sa.Column('amount', sa.Float(), nullable=False),
    sa.Column('equity', sa.Float(), nullable=False),
    sa.Column('message', sa.Text(), nullable=True),
    sa.Column('status', sa.String(length=50), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
    sa.ForeignKeyConstraint(['business_idea_id'], ['business_ideas.id'], ),
    sa.ForeignKeyConstraint(['business_idea_user_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['investor_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('business_idea_id', 'investor_id', name='uq_proposal_idea_investor')
    )
    with op.batch_alter_table('investment_proposals', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_investment_proposals_business_idea_user_id'), ['business_idea_user_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_investment_proposals_investor_id'), ['investor_id'], unique=False)

    op.create_table('investments',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('proposal_id', sa.String(length=36), nullable=False),
    sa.Column('business_idea_id', sa.String(length=36), nullable=False),
    sa.Column('business_idea_title', sa.String(length=255), nullable=True),
    sa.Column('business_idea_category', sa.String(length=100), nullable=False),
    sa.Column('business_person_id', sa.String(length=128), nullable=False),
    sa.Column('investor_id', sa.String(length=128), nullable=False),
    sa.Column('investor_name', sa.String(length=255), nullable=True),
    sa.Column('amount', sa.Float(), nullable=False),
    sa.Column('equity', sa.Float(), nullable=False),
    sa.Column('current_value', sa.Float(), nullable=False),
    sa.Column('roi', sa.Float(), nullable=False),
    sa.Column('investment_date', sa.DateTime(timezone=True), nullable=False),
    sa.Column('status', sa.String(length=50), nullable=False),
    sa.Column('milestones', sa.JSON(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['business_idea_id'], ['business_ideas.id'], ),
    sa.ForeignKeyConstraint(['business_person_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['investor_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['proposal_id'], ['investment_proposals.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('proposal_id')
    )
    with op.batch_alter_table('investments', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_investments_investor_id'), ['investor_id'], unique=False)

    op.create_table('loan_proposals',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=128), nullable=False),
    sa.Column('loan_purpose', sa.Text(), nullable=False),
    sa.Column('loan_amount', sa.String(length=100), nullable=False),
    sa.Column('repayment_plan', sa.JSON(), nullable=True),
    sa.Column('collateral', sa.JSON(), nullable=True),
    sa.Column('business_overview', sa.JSON(), nullable=True),
    sa.Column('financial_information', sa.JSON(), nullable=True),
    sa.Column('market_analysis', sa.Text(), nullable=True),
    sa.Column('management_team', sa.Text(), nullable=True),
    sa.Column('supporting_documents', sa.JSON(), nullable=True),
    sa.Column('executive_summary', sa.Text(), nullable=False),
    sa.Column('status', sa.String(length=50), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('loan_proposals', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_loan_proposals_user_id'), ['user_id'], unique=False)

    op.create_table('notifications',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=128), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('body', sa.Text(), nullable=False),
    sa.Column('type', sa.String(length=100), nullable=True),
    sa.Column('data', sa.JSON(), nullable=True),
    sa.Column('read', sa.Boolean(), nullable=False),
    sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('notifications', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_notifications_created_at'), ['created_at'], unique=False)
        batch_op.create_index('ix_notifications_user_created', ['user_id', 'created_at'], unique=False)


def downgrade():
    with op.batch_alter_table('notifications', schema=None) as batch_op:
        batch_op.drop_index('ix_notifications_user_created')
        batch_op.drop_index(batch_op.f('ix_notifications_created_at'))

    op.drop_table('notifications')
    with op.batch_alter_table('loan_proposals', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_loan_proposals_user_id'))

    op.drop_table('loan_proposals')
    with op.batch_alter_table('investments', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_investments_investor_id'))

    op.drop_table('investments')
    with op.batch_alter_table('investment_proposals', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_investment_proposals_investor_id'))
        batch_op.drop_index(batch_op.f('ix_investment_proposals_business_idea_user_id'))

    op.drop_table('investment_proposals')
    with op.batch_alter_table('business_ideas', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_business_ideas_user_id'))
        batch_op.drop_index('ix_business_ideas_status_created')

    op.drop_table('business_ideas')
    with op.batch_alter_table('audit_events', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_audit_events_user_id'))

    op.drop_table('audit_events')
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_users_role'))

    op.drop_table('users')
