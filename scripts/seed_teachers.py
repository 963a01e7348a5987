from sqlalchemy.orm import Session

from database.db import SessionLocal
from models.teachers import Teacher as TeacherModel
from scripts.init_db import create_tables
from utils.security import hash_password

DEFAULT_PASSWORD = "password123"

FAKE_TEACHERS = [
    ("Sarah Johnson", "sarah.johnson@naboo.edu"),
    ("Michael Chen", "michael.chen@naboo.edu"),
    ("Emily Rodriguez", "emily.rodriguez@naboo.edu"),
    ("David Kim", "david.kim@naboo.edu"),
    ("Jessica Williams", "jessica.williams@naboo.edu"),
    ("Ahmed Hassan", "ahmed.hassan@naboo.edu"),
    ("Maria Garcia", "maria.garcia@naboo.edu"),
    ("James Thompson", "james.thompson@naboo.edu"),
    ("Priya Patel", "priya.patel@naboo.edu"),
    ("Robert Anderson", "robert.anderson@naboo.edu"),
    ("Lisa Zhang", "lisa.zhang@naboo.edu"),
    ("Carlos Mendoza", "carlos.mendoza@naboo.edu"),
    ("Aisha Okafor", "aisha.okafor@naboo.edu"),
    ("Daniel O'Connor", "daniel.oconnor@naboo.edu"),
    ("Fatima Al-Rashid", "fatima.alrashid@naboo.edu"),
]


def seed_teachers(db: Session) -> int:
    """Demo accounts, all with DEFAULT_PASSWORD. Skipped (returns 0) when any teacher exists."""
    existing = db.query(TeacherModel).count()
    if existing:
        print(f"⚠️ {existing} teachers already exist, seeding skipped")
        return 0

    password_hash = hash_password(DEFAULT_PASSWORD)
    db.add_all(TeacherModel(name=name, email=email, password_hash=password_hash) for name, email in FAKE_TEACHERS)
    db.commit()
    return len(FAKE_TEACHERS)


if __name__ == "__main__":
    create_tables()
    db = SessionLocal()
    try:
        created = seed_teachers(db)
    finally:
        db.close()
    print(f"✅ {created} teachers created (password: {DEFAULT_PASSWORD})")
