from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.classes import Class
from services.student_level import DEFAULT_PERFORMANCE_LEVEL


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)               # student id (PK)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)                       # full name
    age = Column(Integer)                                            # optional age
    avatar_url = Column(String(500))                                 # optional picture
    performance_level = Column(                                      # 1..5, see services/student_level.py
        Integer, nullable=False, default=DEFAULT_PERFORMANCE_LEVEL
    )
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # ✅ class (N:1), Class.students on the other side
    class_ = relationship(
        Class,
        backref=backref("students", cascade="all, delete-orphan"),
    )
