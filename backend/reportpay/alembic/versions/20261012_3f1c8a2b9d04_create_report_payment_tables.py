"""create_report_payment_tables

Revision ID: 3f1c8a2b9d04
Revises:
Create Date: 2026-10-12 09:14:02.518330

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c8a2b9d04'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('tenants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('legal_name', sa.String(length=255), nullable=True),
        sa.Column('tax_id', sa.String(length=32), nullable=True),
        sa.Column('default_currency', sa.String(length=3), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.execute(
        "INSERT INTO tenants (id, name, default_currency) "
        "VALUES ('00000000-0000-0000-0000-000000000001', 'Default', 'BRL')"
    )

    op.create_table('practitioners',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('license_number', sa.String(length=50), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_practitioners_tenant_id', 'practitioners', ['tenant_id'], unique=False)

    op.create_table('report_prices',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('practitioner_id', sa.String(length=36), nullable=False),
        sa.Column('exam_type', sa.String(length=100), nullable=False),
        sa.Column('value', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['practitioner_id'], ['practitioners.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'practitioner_id', 'exam_type', name='uq_report_price_scope')
    )
    op.create_index('ix_report_prices_tenant_id', 'report_prices', ['tenant_id'], unique=False)
    op.create_index('ix_report_prices_practitioner_id', 'report_prices', ['practitioner_id'], unique=False)

    op.create_table('report_payments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('practitioner_id', sa.String(length=36), nullable=False),
        sa.Column('gross_value', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount_percentage', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('net_value', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('method', sa.String(length=20), nullable=False),
        sa.Column('observations', sa.Text(), nullable=True),
        sa.Column('registered_by', sa.String(length=255), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['practitioner_id'], ['practitioners.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_report_payments_tenant_id', 'report_payments', ['tenant_id'], unique=False)
    op.create_index('ix_report_payments_practitioner_id', 'report_payments', ['practitioner_id'], unique=False)
    op.create_index('ix_report_payments_paid_at', 'report_payments', ['paid_at'], unique=False)

    op.create_table('reports',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=36), nullable=False),
        sa.Column('practitioner_id', sa.String(length=36), nullable=False),
        sa.Column('exam_type', sa.String(length=100), nullable=False),
        sa.Column('patient_name', sa.String(length=255), nullable=True),
        sa.Column('signed_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('paid_value', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('payment_id', sa.String(length=36), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['practitioner_id'], ['practitioners.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['payment_id'], ['report_payments.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reports_tenant_id', 'reports', ['tenant_id'], unique=False)
    op.create_index('ix_reports_practitioner_id', 'reports', ['practitioner_id'], unique=False)
    op.create_index('ix_reports_status', 'reports', ['status'], unique=False)
    op.create_index('ix_reports_payment_id', 'reports', ['payment_id'], unique=False)


def downgrade():
    op.drop_index('ix_reports_payment_id', table_name='reports')
    op.drop_index('ix_reports_status', table_name='reports')
    op.drop_index('ix_reports_practitioner_id', table_name='reports')
    op.drop_index('ix_reports_tenant_id', table_name='reports')
    op.drop_table('reports')
    op.drop_index('ix_report_payments_paid_at', table_name='report_payments')
    op.drop_index('ix_report_payments_practitioner_id', table_name='report_payments')
    op.drop_index('ix_report_payments_tenant_id', table_name='report_payments')
    op.drop_table('report_payments')
    op.drop_index('ix_report_prices_practitioner_id', table_name='report_prices')
    op.drop_index('ix_report_prices_tenant_id', table_name='report_prices')
    op.drop_table('report_prices')
    op.drop_index('ix_practitioners_tenant_id', table_name='practitioners')
    op.drop_table('practitioners')
    op.drop_table('tenants')
