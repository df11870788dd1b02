from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String

from ghcomments.database import Base


class SessionEntry(Base):
    __tablename__ = "auth_sessions"

    id = Column(Integer, primary_key=True)
    token = Column(String(128), nullable=False, unique=True, index=True)
    github_user_id = Column(
        BigInteger, ForeignKey("users.github_user_id"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    revoked_at = Column(DateTime(timezone=True), nullable=True)
