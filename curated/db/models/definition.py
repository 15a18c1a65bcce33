from sqlalchemy import (
    Column, String, Text, Boolean, Date, DateTime, ForeignKey, Uuid, Integer, CheckConstraint
)
from sqlalchemy.orm import relationship

from curated.db.base import Base, BaseModel


class Definition(BaseModel):
    __tablename__ = "definitions"
    __table_args__ = (
        # approved выставляется только вместе с approved_by и approved_date
        CheckConstraint(
            "(approved AND approved_by IS NOT NULL AND approved_date IS NOT NULL)"
            " OR (NOT approved AND approved_by IS NULL AND approved_date IS NULL)",
            name="ck_definitions_approval_consistent",
        ),
    )

    submitted_by = Column(Uuid, ForeignKey("users.uuid"), nullable=False, index=True)
    submitted_date = Column(DateTime, nullable=False, index=True)
    last_submit_change_date = Column(DateTime, nullable=False)
    approved = Column(Boolean, default=False, nullable=False, index=True)
    approved_by = Column(Uuid, ForeignKey("users.uuid"), nullable=True)
    approved_date = Column(DateTime, nullable=True)
    # дата последнего отклонения, по ней условная запись проверяет журнал
    last_rejected_date = Column(DateTime, nullable=True)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    source_id = Column(Uuid, ForeignKey("sources.uuid"), nullable=False, index=True)
    publishing_date = Column(Date, nullable=False)

    # Relationships
    source = relationship("Source", lazy="selectin")
    tags = relationship(
        "DefinitionTag", lazy="selectin", order_by="DefinitionTag.position", cascade="all, delete-orphan"
    )
    rejections = relationship(
        "Rejection", lazy="selectin", order_by="Rejection.rejected_date", back_populates="definition"
    )


class DefinitionTag(Base):
    __tablename__ = "definition_tags"

    definition_id = Column(Uuid, ForeignKey("definitions.uuid"), primary_key=True)
    tag = Column(String(100), primary_key=True, index=True)
    position = Column(Integer, nullable=False, default=0)


class Rejection(Base):
    __tablename__ = "rejections"

    uuid = Column(Uuid, primary_key=True)
    # без каскадного удаления: журнал отклонений только дополняется
    definition_id = Column(Uuid, ForeignKey("definitions.uuid"), nullable=False, index=True)
    rejected_by = Column(Uuid, ForeignKey("users.uuid"), nullable=False)
    rejected_date = Column(DateTime, nullable=False)
    content = Column(Text, nullable=False)

    # Relationships
    definition = relationship("Definition", back_populates="rejections")
