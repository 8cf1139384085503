"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('first_name', sa.String(length=100)),
        sa.Column('last_name', sa.String(length=100)),
        sa.Column('phone', sa.String(length=50)),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        sa.Column('phone', sa.String(length=50)),
        sa.Column('cuisine_type', sa.String(length=100)),
        sa.Column('operating_hours', sa.Text()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_restaurants_id', 'restaurants', ['id'])

    op.create_table(
        'organizations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=100), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        sa.Column('phone', sa.String(length=50)),
        sa.Column('capacity', sa.Integer()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_organizations_id', 'organizations', ['id'])

    op.create_table(
        'volunteers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('address', sa.Text()),
        sa.Column('latitude', sa.Float()),
        sa.Column('longitude', sa.Float()),
        sa.Column('phone', sa.String(length=50)),
        sa.Column('availability', sa.Text()),
        sa.Column('transportation_type', sa.String(length=50)),
        sa.Column('max_distance', sa.Float()),
        sa.Column('skills', sa.Text()),
        sa.Column('emergency_contact_name', sa.String(length=255)),
        sa.Column('emergency_contact_phone', sa.String(length=50)),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_volunteers_id', 'volunteers', ['id'])

    op.create_table(
        'food_listings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('restaurant_id', sa.Integer(), sa.ForeignKey('restaurants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('food_type', sa.String(length=100)),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=False),
        sa.Column('expiry_date', sa.DateTime(), nullable=False),
        sa.Column('pickup_time_start', sa.DateTime(), nullable=False),
        sa.Column('pickup_time_end', sa.DateTime(), nullable=False),
        sa.Column('special_instructions', sa.Text()),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='available'),
        *_timestamps(),
    )
    op.create_index('ix_food_listings_id', 'food_listings', ['id'])
    op.create_index('ix_food_listings_restaurant_id', 'food_listings', ['restaurant_id'])
    op.create_index('ix_food_listings_status', 'food_listings', ['status'])

    op.create_table(
        'food_claims',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('food_listing_id', sa.Integer(), sa.ForeignKey('food_listings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('claimed_quantity', sa.Integer(), nullable=False),
        sa.Column('pickup_scheduled_time', sa.DateTime(), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('volunteer_id', sa.Integer(), sa.ForeignKey('volunteers.id', ondelete='SET NULL')),
        sa.Column('volunteer_notes', sa.Text()),
        sa.Column('volunteer_assigned_at', sa.DateTime()),
        sa.Column('volunteer_completed_at', sa.DateTime()),
        *_timestamps(),
        sa.UniqueConstraint('food_listing_id', 'organization_id', name='uq_food_claims_listing_organization'),
    )
    op.create_index('ix_food_claims_id', 'food_claims', ['id'])
    op.create_index('ix_food_claims_food_listing_id', 'food_claims', ['food_listing_id'])
    op.create_index('ix_food_claims_organization_id', 'food_claims', ['organization_id'])
    op.create_index('ix_food_claims_status', 'food_claims', ['status'])
    op.create_index('ix_food_claims_volunteer_id', 'food_claims', ['volunteer_id'])


def downgrade() -> None:
    op.drop_table('food_claims')
    op.drop_table('food_listings')
    op.drop_table('volunteers')
    op.drop_table('organizations')
    op.drop_table('restaurants')
    op.drop_table('users')
