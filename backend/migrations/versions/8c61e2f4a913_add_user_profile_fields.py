"""Add location and gender to users

Revision ID: 8c61e2f4a913
Revises: 3f2a9c1d7b40
Create Date: 2026-10-19 16:40:02.118356

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8c61e2f4a913'
down_revision = '3f2a9c1d7b40'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.add_column(sa.Column('location', sa.String(length=100), nullable=True))
        batch_op.add_column(sa.Column('gender', sa.SmallInteger(), nullable=False, server_default='0'))
        batch_op.create_check_constraint('ck_user_gender', 'gender IN (0, 1, 2)')


def downgrade():
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.drop_constraint('ck_user_gender', type_='check')
        batch_op.drop_column('gender')
        batch_op.drop_column('location')
