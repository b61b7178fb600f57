# database/message.py
from sqlalchemy import Column, Integer, BigInteger, String, Text, Index

from database.database import Base


class MirroredMessage(Base):
    """Copy of a group message, so the bot can search and page through history."""

    __tablename__ = "messages"

    chat_id       = Column(BigInteger, primary_key=True)
    message_id    = Column(Integer, primary_key=True)      # = message_id Telegram
    author_id     = Column(BigInteger, nullable=True)
    date          = Column(Integer, nullable=False, default=0)   # epoch seconds
    text          = Column(Text, nullable=False, default="")
    grouped_id    = Column(String(64), nullable=True)     # media_group_id
    media_file_id = Column(String(256), nullable=True)

    __table_args__ = (Index("ix_messages_chat_date", "chat_id", "date"),)
