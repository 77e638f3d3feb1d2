"""
Unit tests for the hospital directory, startup seeding and health check
"""

from app.models.hospital import Hospital
from app.models.user import User
from app.services.seed import seed_hospitals, seed_admin, OGUN_STATE_HOSPITALS
from app.auth.auth_handler import AuthHandler
from app import config

class TestHospitalDirectory:
    """Test cases for the public hospital list"""

    def test_list_hospitals(self, client):
        response = client.get("/api/hospitals")
        assert response.status_code == 200

        hospitals = response.json()["hospitals"]
        assert len(hospitals) == len(OGUN_STATE_HOSPITALS)
        names = [h["name"] for h in hospitals]
        assert names == sorted(names)
        assert {"id", "name", "location", "type"} <= set(hospitals[0])

    def test_inactive_hospitals_hidden(self, client, db_session):
        hospital = db_session.query(Hospital).filter(Hospital.name == "Nafdac").one()
        hospital.active = False
        db_session.commit()

        names = [h["name"] for h in client.get("/api/hospitals").json()["hospitals"]]
        assert "Nafdac" not in names
        assert len(names) == len(OGUN_STATE_HOSPITALS) - 1

    def test_repeated_reads_identical(self, client):
        assert client.get("/api/hospitals").json() == client.get("/api/hospitals").json()

class TestSeeding:
    """Test cases for idempotent startup seeding"""

    def test_seed_hospitals_is_idempotent(self, db_session):
        assert seed_hospitals(db_session) == 0
        assert db_session.query(Hospital).count() == len(OGUN_STATE_HOSPITALS)

    def test_seed_custom_hospitals_into_empty_table(self, db_session):
        db_session.query(Hospital).delete()
        db_session.commit()

        inserted = seed_hospitals(db_session, [("Test Clinic", "Abeokuta", "General")])
        assert inserted == 1
        assert db_session.query(Hospital).one().name == "Test Clinic"

    def test_seed_admin_once(self, db_session):
        assert seed_admin(db_session) is True
        assert seed_admin(db_session) is False

        admins = db_session.query(User).filter(User.role == "state_admin").all()
        assert len(admins) == 1
        assert admins[0].approved is True
        assert admins[0].email == config.ADMIN_EMAIL.lower()
        assert AuthHandler().verify_password(config.ADMIN_PASSWORD, admins[0].hashed_password)

    def test_seeded_admin_can_log_in(self, client, db_session):
        seed_admin(db_session)

        response = client.post("/api/auth/login", json={"email": config.ADMIN_EMAIL, "password": config.ADMIN_PASSWORD})
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "state_admin"

class TestHealthAndHeaders:
    """Test cases for the health probe and security headers"""

    def test_health_check(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "OK"
        assert "timestamp" in data

    def test_security_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_unknown_route_has_message(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert "message" in response.json()
