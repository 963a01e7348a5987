from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.lessons import Lesson

RELATION_TYPES = ("prerequisite", "related", "sequence")


class LessonLink(Base):
    __tablename__ = "lesson_links"
    __table_args__ = (UniqueConstraint("from_lesson_id", "to_lesson_id", name="uq_lesson_link"),)

    id = Column(Integer, primary_key=True, index=True)
    from_lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    to_lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    relation_type = Column(String(20), nullable=False, default="prerequisite")  # one of RELATION_TYPES
    created_at = Column(DateTime, default=func.now())

    # ✅ both ends point at lessons, so foreign_keys must be explicit
    from_lesson = relationship(
        Lesson,
        foreign_keys=[from_lesson_id],
        backref=backref("from_links", cascade="all, delete-orphan"),
    )
    to_lesson = relationship(
        Lesson,
        foreign_keys=[to_lesson_id],
        backref=backref("to_links", cascade="all, delete-orphan"),
    )
