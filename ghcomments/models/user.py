from sqlalchemy import BigInteger, Column, DateTime, String

from ghcomments.database import Base


class UserEntry(Base):
    __tablename__ = "users"

    github_user_id = Column(BigInteger, primary_key=True, autoincrement=False)
    username = Column(String(255), nullable=False)
    profile_url = Column(String(512), nullable=False)
    avatar_url = Column(String(512), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
