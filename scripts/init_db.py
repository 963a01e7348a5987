from database.db import Base, engine

# every model module, so create_all sees every table
from models import (  # noqa: F401
    teachers, classes, students, programs, lessons, lesson_links,
    student_lesson_statuses, student_summaries, student_comments, assessments,
)


def create_tables():
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    create_tables()
    print("✅ tables created:", ", ".join(sorted(Base.metadata.tables)))
