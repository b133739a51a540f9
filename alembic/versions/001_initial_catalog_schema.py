"""Initial schema — authors, genres, works, work_genres, copies.

Revision ID: 001_initial_catalog
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial_catalog"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "authors",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("family_name", sa.String(100), nullable=False),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("date_of_death", sa.Date, nullable=True),
    )

    op.create_table(
        "genres",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
    )
    op.create_index("ix_genres_name", "genres", ["name"])

    op.create_table(
        "works",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("summary", sa.Text, nullable=False),
        sa.Column("isbn", sa.String(255), nullable=False),
        sa.Column("author_id", sa.Uuid(as_uuid=True), sa.ForeignKey("authors.id"), nullable=False),
    )
    op.create_index("ix_works_author_id", "works", ["author_id"])

    op.create_table(
        "work_genres",
        sa.Column("work_id", sa.Uuid(as_uuid=True), sa.ForeignKey("works.id"), primary_key=True),
        sa.Column("genre_id", sa.Uuid(as_uuid=True), sa.ForeignKey("genres.id"), primary_key=True),
    )

    op.create_table(
        "copies",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("book_id", sa.Uuid(as_uuid=True), sa.ForeignKey("works.id"), nullable=False),
        sa.Column("imprint", sa.Text, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Maintenance"),
        sa.Column("due_back", sa.Date, nullable=True),
    )
    op.create_index("ix_copies_book_id", "copies", ["book_id"])


def downgrade() -> None:
    op.drop_index("ix_copies_book_id", table_name="copies")
    op.drop_table("copies")
    op.drop_table("work_genres")
    op.drop_index("ix_works_author_id", table_name="works")
    op.drop_table("works")
    op.drop_index("ix_genres_name", table_name="genres")
    op.drop_table("genres")
    op.drop_table("authors")
