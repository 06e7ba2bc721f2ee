"""initial schema: accounts, children, vaccine catalog, sessions, audit log

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-01 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('password_hash', sa.String(length=254), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('parent', 'admin')", name=op.f('ck_users_role_valid')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_users')),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=False)

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('address', sa.String(length=255), nullable=True),
        sa.Column('preferred_language', sa.String(length=8), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name=op.f('fk_profiles_user_id_users'), ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_profiles')),
        sa.UniqueConstraint('user_id', name=op.f('uq_profiles_user_id')),
    )

    op.create_table(
        'children',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('sex', sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "sex IN ('female', 'male', 'other', 'unspecified')", name=op.f('ck_children_sex_valid')
        ),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'], name=op.f('fk_children_user_id_users'), ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_children')),
    )
    op.create_index('ix_children_user_id', 'children', ['user_id'], unique=False)

    op.create_table(
        'vaccines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('recommended_age_months', sa.Integer(), nullable=False),
        sa.Column('dose_number', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('recommended_age_months >= 0', name=op.f('ck_vaccines_age_non_negative')),
        sa.CheckConstraint('dose_number >= 1', name=op.f('ck_vaccines_dose_positive')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vaccines')),
        sa.UniqueConstraint('code', name=op.f('uq_vaccines_code')),
    )

    op.create_table(
        'vaccine_drives',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('region', sa.String(length=120), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('starts_on', sa.Date(), nullable=False),
        sa.Column('ends_on', sa.Date(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('ends_on >= starts_on', name=op.f('ck_vaccine_drives_date_range')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vaccine_drives')),
    )

    op.create_table(
        'vaccine_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('child_id', sa.Integer(), nullable=False),
        sa.Column('vaccine_id', sa.Integer(), nullable=False),
        sa.Column('drive_id', sa.Integer(), nullable=True),
        sa.Column('administered_on', sa.Date(), nullable=False),
        sa.Column('provider', sa.String(length=120), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ['child_id'], ['children.id'],
            name=op.f('fk_vaccine_records_child_id_children'), ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['vaccine_id'], ['vaccines.id'],
            name=op.f('fk_vaccine_records_vaccine_id_vaccines'), ondelete='RESTRICT',
        ),
        sa.ForeignKeyConstraint(
            ['drive_id'], ['vaccine_drives.id'],
            name=op.f('fk_vaccine_records_drive_id_vaccine_drives'), ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_vaccine_records')),
    )
    op.create_index('ix_vaccine_records_child_id', 'vaccine_records', ['child_id'], unique=False)
    op.create_index('ix_vaccine_records_vaccine_id', 'vaccine_records', ['vaccine_id'], unique=False)

    op.create_table(
        'refresh_sessions',
        sa.Column('jti', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('family_id', sa.String(length=64), nullable=False),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('replaced_by', sa.String(length=64), nullable=True),
        sa.Column('revoked', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ['user_id'], ['users.id'],
            name=op.f('fk_refresh_sessions_user_id_users'), ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('jti', name=op.f('pk_refresh_sessions')),
    )
    op.create_index('ix_refresh_sessions_user_id', 'refresh_sessions', ['user_id'], unique=False)
    op.create_index('ix_refresh_sessions_family_id', 'refresh_sessions', ['family_id'], unique=False)

    # No foreign key on actor_id: entries outlive the accounts they mention.
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('outcome', sa.String(length=16), nullable=False),
        sa.Column('target', sa.String(length=128), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('request_id', sa.String(length=64), nullable=True),
        sa.Column('detail', sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_audit_log')),
    )
    op.create_index('ix_audit_log_occurred_at', 'audit_log', ['occurred_at'], unique=False)
    op.create_index('ix_audit_log_actor_id', 'audit_log', ['actor_id'], unique=False)
    op.create_index('ix_audit_log_action', 'audit_log', ['action'], unique=False)


def downgrade():
    op.drop_index('ix_audit_log_action', table_name='audit_log')
    op.drop_index('ix_audit_log_actor_id', table_name='audit_log')
    op.drop_index('ix_audit_log_occurred_at', table_name='audit_log')
    op.drop_table('audit_log')
    op.drop_index('ix_refresh_sessions_family_id', table_name='refresh_sessions')
    op.drop_index('ix_refresh_sessions_user_id', table_name='refresh_sessions')
    op.drop_table('refresh_sessions')
    op.drop_index('ix_vaccine_records_vaccine_id', table_name='vaccine_records')
    op.drop_index('ix_vaccine_records_child_id', table_name='vaccine_records')
    op.drop_table('vaccine_records')
    op.drop_table('vaccine_drives')
    op.drop_table('vaccines')
    op.drop_index('ix_children_user_id', table_name='children')
    op.drop_table('children')
    op.drop_table('profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
