from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, String, Text

from ghcomments.database import Base


class CommentEntry(Base):
    __tablename__ = "comments"

    comment_id = Column(String(36), primary_key=True)
    blog_id = Column(String(255), nullable=False, index=True)
    author_id = Column(
        BigInteger, ForeignKey("users.github_user_id"), nullable=False, index=True
    )
    comment_text = Column(Text, nullable=False)
    create_date = Column(DateTime(timezone=True), nullable=False)
    edit_date = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_comments_blog_create", "blog_id", "create_date"),)
