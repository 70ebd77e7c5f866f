"""Create users, files and file_tags

Revision ID: 0001_initial
Revises: None
Create Date: 2024-10-01 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('microsoft_id', sa.String(255)),
        sa.Column('name', sa.String(120), nullable=False),
        sa.Column('surname', sa.String(120), nullable=False),
        sa.Column('bio', sa.Text, nullable=False, server_default=''),
        sa.Column('profile_picture', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'files',
        sa.Column('file_id', sa.Integer, primary_key=True),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_path', sa.String(512), nullable=False),
        sa.Column('uploader_id', sa.Integer, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('description', sa.Text, nullable=False, server_default=''),
        sa.Column('upload_date', sa.DateTime, server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_files_uploader_id', 'files', ['uploader_id'])

    op.create_table(
        'file_tags',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('file_id', sa.Integer, sa.ForeignKey('files.file_id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer, nullable=False, server_default='0'),
        sa.Column('name', sa.String(255), nullable=False),
    )
    op.create_index('ix_file_tags_file_id', 'file_tags', ['file_id'])
    op.create_index('ix_file_tags_name', 'file_tags', ['name'])


def downgrade():
    op.drop_table('file_tags')
    op.drop_table('files')
    op.drop_table('users')
