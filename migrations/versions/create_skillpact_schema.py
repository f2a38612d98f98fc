"""Create skillpact schema: users, services, locations, exchanges, chat and notifications

Revision ID: create_skillpact_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_skillpact_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(191), nullable=True),
        sa.Column('email', sa.String(120), nullable=False),
        sa.Column('image', sa.String(500), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('average_rating', sa.Float(), nullable=True),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'service_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'skills',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'name', name='unique_user_skill')
    )
    op.create_index('ix_skills_user_id', 'skills', ['user_id'])

    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('hourly_rate', sa.Float(), nullable=False),
        sa.Column('location_type', sa.String(20), nullable=False),
        sa.Column('service_radius', sa.Float(), nullable=True),
        sa.Column('tags', sa.String(255), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['category_id'], ['service_categories.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_services_user_id', 'services', ['user_id'])
    op.create_index('ix_services_category_id', 'services', ['category_id'])
    op.create_index('ix_services_title', 'services', ['title'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])
    op.create_index('ix_services_created_at', 'services', ['created_at'])

    op.create_table(
        'locations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('service_id', sa.Integer(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('radius', sa.Float(), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('country', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('(user_id IS NULL) <> (service_id IS NULL)', name='location_single_owner'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.UniqueConstraint('service_id')
    )
    op.create_index('ix_locations_latitude', 'locations', ['latitude'])
    op.create_index('ix_locations_longitude', 'locations', ['longitude'])

    op.create_table(
        'exchanges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column('requester_id', sa.Integer(), nullable=False),
        sa.Column('provider_service_id', sa.Integer(), nullable=True),
        sa.Column('requester_service_id', sa.Integer(), nullable=True),
        sa.Column('requested_date', sa.DateTime(), nullable=True),
        sa.Column('scheduled_date', sa.DateTime(), nullable=True),
        sa.Column('completed_date', sa.DateTime(), nullable=True),
        sa.Column('hours', sa.Float(), nullable=True),
        sa.Column('provider_rating', sa.Integer(), nullable=True),
        sa.Column('requester_rating', sa.Integer(), nullable=True),
        sa.Column('provider_review', sa.Text(), nullable=True),
        sa.Column('requester_review', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('provider_id <> requester_id', name='exchange_distinct_parties'),
        sa.CheckConstraint('hours IS NULL OR hours >= 0.5', name='exchange_min_hours'),
        sa.CheckConstraint('provider_rating IS NULL OR provider_rating BETWEEN 1 AND 5',
                           name='exchange_provider_rating_range'),
        sa.CheckConstraint('requester_rating IS NULL OR requester_rating BETWEEN 1 AND 5',
                           name='exchange_requester_rating_range'),
        sa.ForeignKeyConstraint(['provider_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['requester_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['provider_service_id'], ['services.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['requester_service_id'], ['services.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_exchanges_status', 'exchanges', ['status'])
    op.create_index('ix_exchanges_provider_id', 'exchanges', ['provider_id'])
    op.create_index('ix_exchanges_requester_id', 'exchanges', ['requester_id'])
    op.create_index('ix_exchanges_provider_service_id', 'exchanges', ['provider_service_id'])
    op.create_index('ix_exchanges_scheduled_date', 'exchanges', ['scheduled_date'])
    op.create_index('ix_exchanges_updated_at', 'exchanges', ['updated_at'])

    op.create_table(
        'messages',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('exchange_id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['exchange_id'], ['exchanges.id'], ),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_messages_exchange_id', 'messages', ['exchange_id'])
    op.create_index('ix_messages_sender_id', 'messages', ['sender_id'])
    op.create_index('ix_messages_created_at', 'messages', ['created_at'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('sender_id', sa.Integer(), nullable=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('exchange_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['recipient_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['exchange_id'], ['exchanges.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])
    op.create_index('ix_notifications_exchange_id', 'notifications', ['exchange_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    # Unread badge count
    op.create_index('ix_notifications_recipient_unread', 'notifications', ['recipient_id', 'is_read'])


def downgrade():
    op.drop_table('notifications')
    op.drop_table('messages')
    op.drop_table('exchanges')
    op.drop_table('locations')
    op.drop_table('services')
    op.drop_table('skills')
    op.drop_table('service_categories')
    op.drop_table('users')
