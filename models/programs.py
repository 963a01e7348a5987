from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.teachers import Teacher


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, index=True)               # program id (PK)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)                      # program title
    description = Column(Text)                                       # optional description
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    teacher = relationship(
        Teacher,
        backref=backref("programs", cascade="all, delete-orphan"),
    )
