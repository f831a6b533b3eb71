"""SQLAlchemy model for the resource_context table."""

from typing import List

from sqlalchemy import Column, String, Text, Index, PrimaryKeyConstraint
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import CreateIndex, CreateTable, DropTable

# Create base class for models
Base = declarative_base()


class ResourceContext(Base):
    """Resource context table model.

    ``created_at`` is stored at whole-second precision, matching the precision
    carried by continuation tokens.
    """
    __tablename__ = 'resource_context'

    resource_id = Column(String(128), nullable=False)
    resource_type = Column(String(128), nullable=False)
    context = Column(Text, nullable=True)
    created_at = Column(postgresql.TIMESTAMP(timezone=True, precision=0), nullable=False)
    updated_at = Column(postgresql.TIMESTAMP(timezone=True, precision=0), nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint('resource_type', 'resource_id', name='resource_context_pkey'),
        Index(
            'resource_context_created_desc',
            'created_at', 'resource_type', 'resource_id',
            postgresql_ops={'created_at': 'DESC', 'resource_type': 'DESC', 'resource_id': 'DESC'}
        ),
    )


def _compile(element) -> str:
    return str(element.compile(dialect=postgresql.dialect())).strip()


def drop_table_statement() -> str:
    """Compile the DROP TABLE IF EXISTS statement for resource_context."""
    return _compile(DropTable(ResourceContext.__table__, if_exists=True))


def create_table_statements() -> List[str]:
    """Compile CREATE TABLE and CREATE INDEX statements for resource_context."""
    table = ResourceContext.__table__
    statements = [_compile(CreateTable(table))]
    statements.extend(_compile(CreateIndex(index)) for index in table.indexes)
    return statements
