"""
Startup seeding of the hospital directory and the bootstrap state admin
Both operations are idempotent
"""

import logging

from sqlalchemy.orm import Session

from app.config import ADMIN_NAME, ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_HOSPITAL
from app.auth.auth_handler import AuthHandler
from app.models.hospital import Hospital
from app.models.user import User, STATE_ADMIN

logger = logging.getLogger(__name__)

# (name, location, type)
OGUN_STATE_HOSPITALS = [
    ("State Hospital, Ijaiye", "Ijaiye", "State"),
    ("Oba Ademola Mart. Hospital", "Abeokuta", "Specialist"),
    ("General Hospital, Isaga Orile", "Isaga Orile", "General"),
    ("Nafdac", "Ogun State", "General"),
    ("General Hospital, Odeda", "Odeda", "General"),
    ("General Hospital, Owode Egba", "Owode Egba", "General"),
    ("General Hospital, Iberekodo", "Iberekodo", "General"),
    ("Olikoye Ransome Kuti Mem. Hospital", "Abeokuta", "Specialist"),
    ("Comm. Psy. Oke Ilewo", "Abeokuta", "Specialist"),
    ("Dental Centre, Abeokuta", "Abeokuta", "Specialist"),
    ("Governor's Office Clinic", "Abeokuta", "Specialist"),
    ("State Hospital, Ijebu Ode", "Ijebu Ode", "State"),
    ("General Hospital, Ijebu Igbo", "Ijebu Igbo", "General"),
    ("General Hospital, Ijebu Ife", "Ijebu Ife", "General"),
    ("General Hospital, Ibiade", "Ibiade", "General"),
    ("General Hospital, Ogbere", "Ogbere", "General"),
    ("General Hospital, Ala Idowa", "Ala Idowa", "General"),
    ("General Hospital, Odogbolu", "Odogbolu", "General"),
    ("General Hospital, Omu Ijebu", "Omu Ijebu", "General"),
    ("General Hospital, Atan Ijebu", "Atan Ijebu", "General"),
    ("Dental Centre, Ijebu Ode", "Ijebu Ode", "Specialist"),
    ("Comm. Psy. Ijebu Ode", "Ijebu Ode", "Specialist"),
    ("General Hospital, Iperu", "Iperu", "General"),
    ("State Hospital, Isara", "Isara", "State"),
    ("General Hospital, Ode Lemo", "Ode Lemo", "General"),
    ("General Hospital, Ikenne", "Ikenne", "General"),
    ("General Hospital, Ilisan", "Ilisan", "General"),
    ("Dental Centre, Sagamu", "Sagamu", "Specialist"),
    ("State Hospital, Ota", "Ota", "State"),
    ("General Hospital, Ifo", "Ifo", "General"),
    ("Comm. Psy. Ota", "Ota", "Specialist"),
    ("State Hospital, Ilaro", "Ilaro", "State"),
    ("General Hospital, Ayetoro", "Ayetoro", "General"),
    ("General Hospital, Imeko", "Imeko", "General"),
    ("General Hospital, Idiroko", "Idiroko", "General"),
    ("General Hospital, Ipokia", "Ipokia", "General"),
    ("Comm. Psy. Ilaro", "Ilaro", "Specialist"),
]

def seed_hospitals(db: Session, hospitals=None) -> int:
    """Insert the directory when the table is empty; returns rows inserted"""
    if db.query(Hospital).count() > 0:
        logger.info("Hospitals already initialized")
        return 0

    entries = hospitals if hospitals is not None else OGUN_STATE_HOSPITALS
    db.add_all(Hospital(name=name, location=location, type=type_) for name, location, type_ in entries)
    db.commit()

    logger.info(f"Hospitals initialized ({len(entries)} entries)")
    return len(entries)

def seed_admin(db: Session) -> bool:
    """Create an approved state admin unless one already exists"""
    existing = db.query(User).filter(User.role == STATE_ADMIN).first()
    if existing:
        logger.info("Admin already exists")
        return False

    admin = User(
        name=ADMIN_NAME,
        email=ADMIN_EMAIL.lower(),
        hashed_password=AuthHandler().get_password_hash(ADMIN_PASSWORD),
        hospital=ADMIN_HOSPITAL,
        role=STATE_ADMIN,
        approved=True
    )
    db.add(admin)
    db.commit()

    logger.info(f"State admin {admin.email} seeded")
    return True
