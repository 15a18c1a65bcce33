from sqlalchemy import Column, String, ForeignKey, Uuid, DateTime, Table
from sqlalchemy.orm import relationship

from curated.db.base import Base, BaseModel

source_authors = Table(
    "source_authors",
    Base.metadata,
    Column("source_id", Uuid, ForeignKey("sources.uuid"), primary_key=True),
    Column("author_id", Uuid, ForeignKey("authors.uuid"), primary_key=True),
)


class Author(BaseModel):
    __tablename__ = "authors"

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    submitted_by = Column(Uuid, ForeignKey("users.uuid"), nullable=False)
    submitted_date = Column(DateTime, nullable=False)


class Source(BaseModel):
    __tablename__ = "sources"

    title = Column(String(512), nullable=True)
    submitted_by = Column(Uuid, ForeignKey("users.uuid"), nullable=False)
    submitted_date = Column(DateTime, nullable=False)

    # Relationships
    authors = relationship("Author", secondary=source_authors, lazy="selectin", order_by="Author.last_name")
