"""Tests for the HTTP API: status codes, bodies and error translation."""
from club_review.models.enums import ApplicationStatus
from club_review.services.engine import ClubApplicationEngine

from conftest import ADMIN_ID, MEMBER_ID, OTHER_ADMIN_ID, make_report


class TestHealth:

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestClubApplicationsApi:

    def test_submit_application(self, client):
        response = client.post("/api/club-applications", json={
            "name": "York Climbing",
            "contact_email": "climb@example.com",
            "location": "York",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["version"] == 1

    def test_submit_requires_valid_email(self, client):
        response = client.post("/api/club-applications", json={
            "name": "York Climbing",
            "contact_email": "not-an-email",
        })

        assert response.status_code == 422

    def test_list_defaults_to_pending(self, client, db_session, admins, sample_clubs):
        ClubApplicationEngine(db_session).approve(sample_clubs[0].id, ADMIN_ID)

        response = client.get("/api/club-applications", params={"limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert body["total_pages"] == 1
        assert {item["status"] for item in body["items"]} == {"pending"}

    def test_list_all_statuses(self, client, db_session, admins, sample_clubs):
        ClubApplicationEngine(db_session).approve(sample_clubs[0].id, ADMIN_ID)

        response = client.get("/api/club-applications", params={"status": "all"})

        assert response.json()["count"] == 3

    def test_invalid_page_is_unprocessable(self, client):
        response = client.get("/api/club-applications", params={"page": 0})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "ValidationError"

    def test_approve(self, client, admins, sample_club):
        response = client.post(
            f"/api/club-applications/{sample_club.id}/approve",
            json={"actor_id": ADMIN_ID, "notes": "Welcome aboard"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "approved"
        assert body["reviewed_by"] == ADMIN_ID

    def test_reject_requires_reason(self, client, admins, sample_club):
        response = client.post(
            f"/api/club-applications/{sample_club.id}/reject",
            json={"actor_id": ADMIN_ID},
        )

        assert response.status_code == 422

    def test_non_admin_is_forbidden(self, client, admins, sample_club):
        response = client.post(
            f"/api/club-applications/{sample_club.id}/approve",
            json={"actor_id": MEMBER_ID},
        )

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "Unauthorized"

    def test_missing_application_is_not_found(self, client, admins):
        response = client.get("/api/club-applications/404")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "NotFound"

    def test_stale_decision_is_conflict(self, client, db_session, admins, sample_club):
        ClubApplicationEngine(db_session).reject(sample_club.id, OTHER_ADMIN_ID, "Duplicate")

        response = client.post(
            f"/api/club-applications/{sample_club.id}/transition",
            json={"status": "approved", "actor_id": ADMIN_ID, "expected_status": "pending"},
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["error"] == "Conflict"
        assert detail["current_status"] == "rejected"

    def test_bulk_approve_reports_conflicts_per_item(self, client, db_session, admins, sample_clubs):
        a, b, c = [club.id for club in sample_clubs]
        ClubApplicationEngine(db_session).reject(b, OTHER_ADMIN_ID, "Duplicate")

        response = client.post(
            "/api/club-applications/bulk-approve",
            json={"ids": [a, b, c], "actor_id": ADMIN_ID},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["successful"] == [a, c]
        assert body["failed"][0]["id"] == b
        assert body["failed"][0]["error"] == "Conflict"
        assert body["successful_count"] == 2
        assert body["failed_count"] == 1

    def test_bulk_reject_by_non_admin_is_forbidden(self, client, admins, sample_clubs):
        response = client.post(
            "/api/club-applications/bulk-reject",
            json={"ids": [c.id for c in sample_clubs], "actor_id": MEMBER_ID, "reason": "No"},
        )

        assert response.status_code == 403

    def test_bulk_requires_ids(self, client, admins):
        response = client.post(
            "/api/club-applications/bulk-approve",
            json={"ids": [], "actor_id": ADMIN_ID},
        )

        assert response.status_code == 422

    def test_stats_with_scope(self, client, admins, sample_clubs):
        response = client.get("/api/club-applications/stats", params={"location": "Leeds"})

        assert response.status_code == 200
        assert response.json() == {"pending": 3, "approved": 0, "rejected": 0, "total": 3}

    def test_page_far_past_the_end(self, client, sample_clubs):
        response = client.get("/api/club-applications", params={"page": 10 ** 20})

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["count"] == 3

    def test_invalid_sort_order_is_unprocessable(self, client):
        response = client.get("/api/club-applications", params={"sort_order": "up"})

        assert response.status_code == 422

    def test_report_stats_with_unknown_content_type(self, client):
        response = client.get("/api/content-reports/stats", params={"content_type": "bogus"})

        assert response.status_code == 422
        assert response.json()["detail"]["error"] == "ValidationError"

    def test_stats_with_unknown_scope(self, client):
        response = client.get("/api/club-applications/stats", params={"colour": "red"})

        assert response.status_code == 422

    def test_review_and_history(self, client, db_session, admins, sample_club):
        engine = ClubApplicationEngine(db_session)
        engine.reject(sample_club.id, ADMIN_ID, "Missing details")
        engine.reopen(sample_club.id, ADMIN_ID)

        history = client.get(f"/api/club-applications/{sample_club.id}/history").json()
        review = client.get(f"/api/club-applications/{sample_club.id}/review").json()

        assert [e["to_status"] for e in history] == ["rejected", "pending"]
        assert review["club"]["status"] == ApplicationStatus.PENDING.value
        assert len(review["history"]) == 2


class TestModerationApi:

    def test_submit_and_moderate_report(self, client, admins):
        created = client.post("/api/content-reports", json={
            "reporter_id": "user_3",
            "content_type": "message",
            "content_id": "msg_12",
            "reason": "Harassment",
        })
        assert created.status_code == 201
        report_id = created.json()["id"]

        response = client.post(
            f"/api/content-reports/{report_id}/moderate",
            json={"action_type": "warning", "actor_id": ADMIN_ID, "reason": "First offence"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "resolved"

    def test_content_moderation_resolves_related_reports(self, client, db_session, admins):
        reports = [make_report(db_session, content_id="opp_9", reporter_id=f"user_{i}") for i in range(2)]

        response = client.post("/api/content-reports/content-moderation", json={
            "content_type": "opportunity",
            "content_id": "opp_9",
            "action_type": "dismissal",
            "actor_id": ADMIN_ID,
            "reason": "Legitimate listing",
        })

        assert response.status_code == 200
        assert response.json()["successful"] == [r.id for r in reports]

    def test_illegal_report_transition(self, client, db_session, admins, sample_report):
        client.post(
            f"/api/content-reports/{sample_report.id}/moderate",
            json={"action_type": "dismissal", "actor_id": ADMIN_ID, "reason": "Fine"},
        )

        response = client.post(
            f"/api/content-reports/{sample_report.id}/transition",
            json={"status": "reviewed", "actor_id": ADMIN_ID, "notes": "Again"},
        )

        assert response.status_code == 422

    def test_suspend_and_reinstate_member(self, client, admins, sample_member):
        suspended = client.post(
            f"/api/members/{sample_member.id}/suspend",
            json={"actor_id": ADMIN_ID, "reason": "Spam"},
        )
        reinstated = client.post(
            f"/api/members/{sample_member.id}/reinstate",
            json={"actor_id": ADMIN_ID},
        )

        assert suspended.json()["status"] == "suspended"
        assert reinstated.json()["status"] == "active"


class TestAuditApi:

    def test_audit_entries_and_bulk_operations(self, client, db_session, admins, sample_clubs):
        ClubApplicationEngine(db_session).bulk_approve([c.id for c in sample_clubs], ADMIN_ID)

        entries = client.get("/api/audit-entries", params={"entity_kind": "club_application"}).json()
        operations = client.get("/api/bulk-operations").json()

        assert entries["count"] == 3
        assert {e["action"] for e in entries["items"]} == {"approved"}
        assert len(operations) == 1
        assert operations[0]["requested_count"] == 3
