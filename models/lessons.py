from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.programs import Program


class Lesson(Base):
    __tablename__ = "lessons"

    id = Column(Integer, primary_key=True, index=True)               # lesson id (PK)
    program_id = Column(Integer, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)                      # lesson title
    description = Column(Text)                                       # optional description
    order_index = Column(Integer, nullable=False, default=0)         # position inside the program
    test_data = Column(Text)                                         # free-form test notes
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # ✅ Program.lessons is always ordered by order_index
    program = relationship(
        Program,
        backref=backref(
            "lessons",
            cascade="all, delete-orphan",
            order_by="Lesson.order_index",
        ),
    )
