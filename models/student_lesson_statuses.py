from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.students import Student
from models.lessons import Lesson

MASTERY_LEVELS = ("not_started", "in_progress", "completed", "mastered")


class StudentLessonStatus(Base):
    __tablename__ = "student_lesson_statuses"
    __table_args__ = (UniqueConstraint("student_id", "lesson_id", name="uq_student_lesson"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    mastery_level = Column(String(20), nullable=False, default="not_started")  # one of MASTERY_LEVELS
    notes = Column(Text)
    score = Column(Float)
    completed_at = Column(DateTime)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    student = relationship(
        Student,
        backref=backref("lesson_statuses", cascade="all, delete-orphan"),
    )
    lesson = relationship(
        Lesson,
        backref=backref("student_statuses", cascade="all, delete-orphan"),
    )
