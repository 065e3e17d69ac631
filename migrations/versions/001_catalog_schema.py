"""Catalog schema: books and bibliographic records

Creates the ``books`` and ``bibliographic_records`` tables with the soft
deletion flag, the one-to-one foreign key from records to books and the
partial unique indexes that keep ``book_id`` and ``isbn`` unique among live
records.

Revision ID: 001_catalog_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_catalog_schema'
down_revision = None
branch_labels = None
depends_on = None

SurrogateKey = sa.BigInteger().with_variant(sa.Integer(), 'sqlite')


def upgrade():
    op.create_table(
        'books',
        sa.Column('id', SurrogateKey, primary_key=True, autoincrement=True,
                  comment='Storage-assigned surrogate key'),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false(),
                  comment='Soft deletion flag; rows are never physically removed'),
        sa.Column('title', sa.String(length=150), nullable=False),
        sa.Column('author', sa.String(length=120), nullable=False),
        sa.Column('publisher', sa.String(length=100), nullable=True),
        sa.Column('publication_year', sa.Integer(), nullable=True),
    )
    op.create_index('ix_books_deleted', 'books', ['deleted'])

    op.create_table(
        'bibliographic_records',
        sa.Column('id', SurrogateKey, primary_key=True, autoincrement=True,
                  comment='Storage-assigned surrogate key'),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false(),
                  comment='Soft deletion flag; rows are never physically removed'),
        sa.Column('isbn', sa.String(length=17), nullable=True),
        sa.Column('dewey_class', sa.String(length=20), nullable=True),
        sa.Column('shelf_location', sa.String(length=50), nullable=True),
        sa.Column('language', sa.String(length=30), nullable=True),
        sa.Column('book_id', SurrogateKey, nullable=True,
                  comment='One-to-one reference to the owning book'),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], name='fk_record_book',
                                ondelete='CASCADE', onupdate='CASCADE'),
    )
    op.create_index('ix_bibliographic_records_deleted', 'bibliographic_records', ['deleted'])
    op.create_index(
        'uq_bibliographic_records_live_book', 'bibliographic_records', ['book_id'],
        unique=True,
        sqlite_where=sa.text('deleted = 0'),
        postgresql_where=sa.text('NOT deleted'),
    )
    op.create_index(
        'uq_bibliographic_records_live_isbn', 'bibliographic_records', ['isbn'],
        unique=True,
        sqlite_where=sa.text('deleted = 0'),
        postgresql_where=sa.text('NOT deleted'),
    )


def downgrade():
    op.drop_index('uq_bibliographic_records_live_isbn', table_name='bibliographic_records')
    op.drop_index('uq_bibliographic_records_live_book', table_name='bibliographic_records')
    op.drop_index('ix_bibliographic_records_deleted', table_name='bibliographic_records')
    op.drop_table('bibliographic_records')
    op.drop_index('ix_books_deleted', table_name='books')
    op.drop_table('books')
