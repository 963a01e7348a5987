from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.students import Student
from models.teachers import Teacher


class StudentComment(Base):
    __tablename__ = "student_comments"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    student = relationship(
        Student,
        backref=backref("comments", cascade="all, delete-orphan"),
    )
    teacher = relationship(
        Teacher,
        backref=backref("comments", cascade="all, delete-orphan"),
    )
