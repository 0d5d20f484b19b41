"""create audit_logs table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('advisor_identifier', sa.String(255), nullable=False),
        sa.Column('client_email', sa.String(255), nullable=False),
        sa.Column('broker_email', sa.String(255), nullable=False),
        sa.Column('gmail_message_id', sa.String(255), nullable=False),
        sa.Column('trade_details', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_advisor_identifier', 'audit_logs', ['advisor_identifier'])
    op.create_index('ix_audit_logs_client_email', 'audit_logs', ['client_email'])
    op.create_index('ix_audit_logs_gmail_message_id', 'audit_logs', ['gmail_message_id'])
    op.create_index('ix_audit_logs_advisor_created', 'audit_logs', ['advisor_identifier', 'created_at'])


def downgrade():
    op.drop_index('ix_audit_logs_advisor_created', table_name='audit_logs')
    op.drop_index('ix_audit_logs_gmail_message_id', table_name='audit_logs')
    op.drop_index('ix_audit_logs_client_email', table_name='audit_logs')
    op.drop_index('ix_audit_logs_advisor_identifier', table_name='audit_logs')
    op.drop_table('audit_logs')
