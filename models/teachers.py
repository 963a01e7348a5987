from sqlalchemy import Column, Integer, String, DateTime, func
from database.db import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)          # teacher id (PK)
    email = Column(String(255), unique=True, nullable=False)    # login email
    password_hash = Column(String(255), nullable=False)         # bcrypt hash
    name = Column(String(100), nullable=False)                  # display name
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
