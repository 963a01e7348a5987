from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.students import Student

SUMMARY_SUBJECTS = ("strengths", "weaknesses", "recommendations")


class StudentSummary(Base):
    __tablename__ = "student_summaries"
    __table_args__ = (UniqueConstraint("student_id", "subject", name="uq_student_summary"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    subject = Column(String(50), nullable=False)            # one of SUMMARY_SUBJECTS
    bullet_points_json = Column(Text, nullable=False)       # JSON encoded list[str]
    generated_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    student = relationship(
        Student,
        backref=backref("summaries", cascade="all, delete-orphan"),
    )
