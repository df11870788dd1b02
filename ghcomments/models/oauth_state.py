from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from ghcomments.database import Base


class OAuthStateEntry(Base):
    __tablename__ = "oauth_states"

    id = Column(Integer, primary_key=True)
    state = Column(String(128), nullable=False, unique=True)
    pending_action = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_oauth_states_expires_at", "expires_at"),)
