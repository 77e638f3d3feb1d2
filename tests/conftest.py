"""
Shared test setup: in-memory database, fake image host and user factories
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.auth.auth_handler import AuthHandler
from app.models.user import User, PHARMACIST
from app.services.image_storage import get_image_storage, ImageUploadFailed
from app.services.seed import seed_hospitals
from main import app

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

HOSPITAL_A = "State Hospital, Ijaiye"
HOSPITAL_B = "General Hospital, Odeda"
PASSWORD = "secret123"

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

class FakeImageStorage:
    """Records uploads and deletes; filenames in ``fail_uploads`` raise"""

    def __init__(self):
        self.reset()

    def reset(self):
        self.uploaded = []
        self.deleted = []
        self.fail_uploads = set()
        self.fail_deletes = False

    async def upload(self, content, filename, folder="/reports"):
        if filename in self.fail_uploads:
            raise ImageUploadFailed("Image upload failed")
        file_id = f"file_{len(self.uploaded) + 1}"
        self.uploaded.append(file_id)
        return {
            "url": f"https://ik.imagekit.io/demo{folder}/{filename}",
            "thumbnailUrl": f"https://ik.imagekit.io/demo/tr:n-ik_ml_thumbnail{folder}/{filename}",
            "fileId": file_id,
        }

    async def delete(self, file_id):
        if self.fail_deletes:
            raise RuntimeError(f"could not delete {file_id}")
        self.deleted.append(file_id)
        return True

fake_storage = FakeImageStorage()

app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_image_storage] = lambda: fake_storage

@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        seed_hospitals(db)
    finally:
        db.close()
    fake_storage.reset()
    yield

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def storage():
    return fake_storage

@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def make_user():
    """Insert a user directly, approved unless told otherwise; returns its id"""
    def _make_user(
        email,
        role=PHARMACIST,
        hospital=HOSPITAL_A,
        approved=True,
        password=PASSWORD,
        name="Test User",
        phone="08012345678"
    ):
        db = TestingSessionLocal()
        try:
            user = User(
                name=name,
                email=email.lower(),
                hashed_password=AuthHandler().get_password_hash(password),
                hospital=hospital,
                phone=phone,
                registration_number="PCN-0001",
                role=role,
                approved=approved
            )
            db.add(user)
            db.commit()
            db.refresh(user)
            return user.id
        finally:
            db.close()
    return _make_user

@pytest.fixture
def auth_headers(client):
    """Log in through the API and return bearer headers"""
    def _auth_headers(email, password=PASSWORD):
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _auth_headers

@pytest.fixture
def submit_report(client):
    """Submit a report through the API as the given caller"""
    def _submit_report(headers, photos=None, **overrides):
        data = {
            "hospitalName": HOSPITAL_A,
            "ward": "Ward 3",
            "prescriptionDetails": "Warfarin 5mg daily with aspirin 75mg",
            "dtpCategory": "Drug interaction",
            "severity": "moderate",
            "prescribingDoctor": "Dr. Adeyemi",
            "comments": "Flagged at dispensing",
        }
        data.update(overrides)
        return client.post("/api/reports", data=data, files=photos or None, headers=headers)
    return _submit_report

def image(name="photo.jpg", content=b"\xff\xd8\xff\xe0fakejpeg", mime="image/jpeg"):
    return ("photos", (name, content, mime))
