from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship, backref
from database.db import Base
from models.teachers import Teacher   # ✅ import the parent model directly


class Class(Base):
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, index=True)                  # class id (PK)
    teacher_id = Column(Integer, ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)                          # e.g. "CM2 B"
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # ==========================================================
    # [Relationships]
    # ==========================================================

    # ✅ owning teacher (N:1), Teacher.classes on the other side (1:N)
    teacher = relationship(
        Teacher,
        backref=backref("classes", cascade="all, delete-orphan"),
    )
