from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON, Text, UniqueConstraint
from sqlalchemy.sql import func
from seenlist.db import Base


class MediaList(Base):
    """A list stored as one document: items and collaborators are JSON arrays."""
    __tablename__ = "lists"

    id = Column(String(36), primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True, default="")
    is_public = Column(Boolean, default=False, nullable=False)
    owner_id = Column(String, index=True, nullable=False)
    items = Column(JSON, nullable=False, default=list)
    collaborators = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class ListMembership(Base):
    """Secondary index of collaborator email -> list, rewritten with every list write."""
    __tablename__ = "list_memberships"
    __table_args__ = (
        UniqueConstraint("list_id", "email", name="uq_list_membership_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    list_id = Column(String(36), ForeignKey("lists.id", ondelete="CASCADE"), index=True, nullable=False)
    email = Column(String, index=True, nullable=False)
    status = Column(String, nullable=False)
