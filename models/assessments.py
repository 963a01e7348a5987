from sqlalchemy import Column, Integer, String, Text, Float, JSON, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.lessons import Lesson
from models.students import Student


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    lesson_id = Column(Integer, ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    source_image_url = Column(Text)          # comma separated page sources
    extracted_data = Column(JSON)            # raw/grade text, advice, questions
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    lesson = relationship(
        Lesson,
        backref=backref("assessments", cascade="all, delete-orphan"),
    )


class StudentAssessment(Base):
    __tablename__ = "student_assessments"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    detected_student_name = Column(String(255))
    overall_score = Column(Float)            # nullable, independent of max_score
    max_score = Column(Float)                # nullable
    graded_responses = Column(JSON)          # grade text, advice, per-question insights
    created_at = Column(DateTime, default=func.now(), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    assessment = relationship(
        Assessment,
        backref=backref("student_assessments", cascade="all, delete-orphan"),
    )
    student = relationship(
        Student,
        backref=backref(
            "student_assessments",
            cascade="all, delete-orphan",
            order_by=lambda: (StudentAssessment.created_at.desc(), StudentAssessment.id.desc()),
        ),
    )
