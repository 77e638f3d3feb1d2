"""
Unit tests for user administration endpoints
"""

from app.models.user import User
from app.models.activity_log import ActivityLog
from app.services.activity_logger import ActivityLogger
from conftest import HOSPITAL_A, HOSPITAL_B

class TestPendingUsers:
    """Test cases for the approval queue"""

    def test_hospital_admin_sees_own_hospital_only(self, client, make_user, auth_headers):
        make_user("admin@example.com", role="hospital_admin", hospital=HOSPITAL_A)
        make_user("local@example.com", approved=False, hospital=HOSPITAL_A)
        make_user("remote@example.com", approved=False, hospital=HOSPITAL_B)
        make_user("active@example.com", hospital=HOSPITAL_A)

        response = client.get("/api/users/pending", headers=auth_headers("admin@example.com"))
        assert response.status_code == 200
        assert [u["email"] for u in response.json()["users"]] == ["local@example.com"]

    def test_state_admin_sees_all_pending(self, client, make_user, auth_headers):
        make_user("state@example.com", role="state_admin", hospital="HQ")
        make_user("local@example.com", approved=False, hospital=HOSPITAL_A)
        make_user("remote@example.com", approved=False, hospital=HOSPITAL_B)

        response = client.get("/api/users/pending", headers=auth_headers("state@example.com"))
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["users"]}
        assert emails == {"local@example.com", "remote@example.com"}

    def test_pharmacist_forbidden(self, client, make_user, auth_headers):
        make_user("pharm@example.com")

        response = client.get("/api/users/pending", headers=auth_headers("pharm@example.com"))
        assert response.status_code == 403
        assert response.json()["message"] == "Access denied. Insufficient permissions."

    def test_nafdac_admin_forbidden(self, client, make_user, auth_headers):
        make_user("nafdac@example.com", role="nafdac_admin")

        response = client.get("/api/users/pending", headers=auth_headers("nafdac@example.com"))
        assert response.status_code == 403

class TestUserListings:
    """Test cases for user and hospital admin listings"""

    def test_list_users_scoped_for_hospital_admin(self, client, make_user, auth_headers):
        make_user("admin@example.com", role="hospital_admin", hospital=HOSPITAL_A)
        make_user("local@example.com", hospital=HOSPITAL_A)
        make_user("remote@example.com", hospital=HOSPITAL_B)

        response = client.get("/api/users", headers=auth_headers("admin@example.com"))
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["users"]}
        assert emails == {"admin@example.com", "local@example.com"}

    def test_hospital_admins_listing(self, client, make_user, auth_headers):
        make_user("state@example.com", role="state_admin", hospital="HQ")
        make_user("admin_a@example.com", role="hospital_admin", hospital=HOSPITAL_A)
        make_user("admin_b@example.com", role="hospital_admin", hospital=HOSPITAL_B)
        make_user("pharm@example.com")

        response = client.get("/api/users/hospital-admins", headers=auth_headers("state@example.com"))
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["users"]}
        assert emails == {"admin_a@example.com", "admin_b@example.com"}

    def test_hospital_admins_listing_requires_state_admin(self, client, make_user, auth_headers):
        make_user("admin@example.com", role="hospital_admin")

        response = client.get("/api/users/hospital-admins", headers=auth_headers("admin@example.com"))
        assert response.status_code == 403

class TestApproveUser:
    """Test cases for approving accounts"""

    def test_approve_same_hospital(self, client, make_user, auth_headers, db_session):
        make_user("admin@example.com", role="hospital_admin", hospital=HOSPITAL_A)
        pending_id = make_user("pending@example.com", approved=False, hospital=HOSPITAL_A)

        response = client.patch(f"/api/users/{pending_id}/approve", headers=auth_headers("admin@example.com"))
        assert response.status_code == 200
        assert response.json()["user"]["approved"] is True

        assert db_session.get(User, pending_id).approved is True
        assert db_session.query(ActivityLog).filter(ActivityLog.action == "user_approved").count() == 1

    def test_approve_other_hospital_forbidden(self, client, make_user, auth_headers, db_session):
        make_user("admin@example.com", role="hospital_admin", hospital=HOSPITAL_A)
        pending_id = make_user("pending@example.com", approved=False, hospital=HOSPITAL_B)

        response = client.patch(f"/api/users/{pending_id}/approve", headers=auth_headers("admin@example.com"))
        assert response.status_code == 403
        assert db_session.get(User, pending_id).approved is False

    def test_state_admin_approves_any_hospital(self, client, make_user, auth_headers):
        make_user("state@example.com", role="state_admin", hospital="HQ")
        pending_id = make_user("pending@example.com", approved=False, hospital=HOSPITAL_B)

        response = client.patch(f"/api/users/{pending_id}/approve", headers=auth_headers("state@example.com"))
        assert response.status_code == 200

    def test_approve_unknown_user(self, client, make_user, auth_headers):
        make_user("state@example.com", role="state_admin", hospital="HQ")

        response = client.patch("/api/users/9999/approve", headers=auth_headers("state@example.com"))
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

class TestDeleteUser:
    """Test cases for deleting accounts"""

    def test_delete_same_hospital(self, client, make_user, auth_headers, db_session):
        make_user("admin@example.com", role="hospital_admin", hospital=HOSPITAL_A)
        target_id = make_user("pharm@example.com", hospital=HOSPITAL_A)

        response = client.delete(f"/api/users/{target_id}", headers=auth_headers("admin@example.com"))
        assert response.status_code == 200
        assert response.json()["message"] == "User deleted successfully"
        assert db_session.get(User, target_id) is None

        deletions = ActivityLogger(db_session).get_recent_activities(action="user_deleted")
        assert len(deletions) == 1
        assert str(target_id) in deletions[0].details

    def test_delete_other_hospital_forbidden(self, client, make_user, auth_headers, db_session):
        make_user("admin@example.com", role="hospital_admin", hospital=HOSPITAL_A)
        target_id = make_user("pharm@example.com", hospital=HOSPITAL_B)

        response = client.delete(f"/api/users/{target_id}", headers=auth_headers("admin@example.com"))
        assert response.status_code == 403
        assert db_session.get(User, target_id) is not None

    def test_cannot_delete_self(self, client, make_user, auth_headers, db_session):
        admin_id = make_user("state@example.com", role="state_admin", hospital="HQ")

        response = client.delete(f"/api/users/{admin_id}", headers=auth_headers("state@example.com"))
        assert response.status_code == 400
        assert db_session.get(User, admin_id) is not None

    def test_deleted_user_reports_survive(self, client, make_user, auth_headers, submit_report):
        make_user("state@example.com", role="state_admin", hospital="HQ")
        pharm_id = make_user("pharm@example.com")
        report_id = submit_report(auth_headers("pharm@example.com")).json()["report"]["id"]
        state = auth_headers("state@example.com")

        assert client.delete(f"/api/users/{pharm_id}", headers=state).status_code == 200

        response = client.get(f"/api/reports/{report_id}", headers=state)
        assert response.status_code == 200
        report = response.json()["report"]
        assert report["pharmacistId"] is None
        assert report["pharmacistName"] == "Test User"
