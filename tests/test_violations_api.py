"""
Tests for violation reporting and the admin violation log
"""
from datetime import timedelta

from app.models import QuizSession, QuizViolation
from app.utils import clock
from tests.conftest import auth_headers


class TestReportViolation:
    def setup_method(self):
        self.topic = "topic1"

    def _start(self, client, subject_id="s1"):
        response = client.post("/api/quiz/start", json={"topicId": self.topic}, headers=auth_headers(subject_id))
        return response.json()["sessionToken"]

    def _report(self, client, token, violation_type, count=1, subject_id="s1", **extra):
        payload = {"sessionToken": token, "violationType": violation_type, "count": count, **extra}
        return client.post("/api/quiz/violations", json=payload, headers=auth_headers(subject_id))

    def test_tab_switch_severities(self, client):
        token = self._start(client)

        assert self._report(client, token, "tab_switch", 6).json()["severity"] == "high"
        assert self._report(client, token, "tab_switch", 3).json()["severity"] == "medium"
        assert self._report(client, token, "tab_switch", 1).json()["severity"] == "low"

    def test_devtools_always_high(self, client):
        token = self._start(client)
        response = self._report(client, token, "devtools", 1)

        assert response.status_code == 201
        assert response.json()["severity"] == "high"

    def test_record_written_with_details(self, client, db):
        token = self._start(client)
        self._report(client, token, "copy_paste", 2, timeIntoQuizSeconds=125)

        violation = db.query(QuizViolation).one()
        assert violation.subject_id == "s1"
        assert violation.topic_id == self.topic
        assert violation.severity == "high"
        assert violation.count == 2
        assert violation.details["timeIntoQuizSeconds"] == 125

    def test_client_cannot_choose_severity(self, client, db):
        token = self._start(client)
        response = self._report(client, token, "tab_switch", 1, severity="high")

        assert response.json()["severity"] == "low"
        assert db.query(QuizViolation).one().severity == "low"

    def test_tab_switch_rollup(self, client, db):
        token = self._start(client)
        self._report(client, token, "tab_switch", 2)
        self._report(client, token, "tab_switch", 3)
        self._report(client, token, "page_focus_loss", 4)

        session = db.query(QuizSession).one()
        assert session.tab_switch_count == 5

    def test_violations_are_append_only(self, client, db):
        token = self._start(client)
        self._report(client, token, "tab_switch", 1)
        self._report(client, token, "tab_switch", 1)

        assert db.query(QuizViolation).count() == 2

    def test_token_is_not_transferable(self, client, db):
        token = self._start(client, "s1")
        response = self._report(client, token, "tab_switch", 1, subject_id="s2")

        assert response.status_code == 404
        assert response.json()["error"] == "session_not_found"
        assert db.query(QuizViolation).count() == 0

    def test_unknown_token(self, client):
        response = self._report(client, "not-a-token", "tab_switch", 1)
        assert response.status_code == 404

    def test_expired_session_drops_report(self, client, db):
        token = self._start(client)
        session = db.query(QuizSession).one()
        session.expires_at = clock.utcnow() - timedelta(seconds=1)
        db.commit()

        response = self._report(client, token, "devtools", 1)

        assert response.status_code == 410
        assert response.json()["error"] == "session_expired"
        assert db.query(QuizViolation).count() == 0
        db.expire_all()
        assert db.query(QuizSession).one().tab_switch_count == 0

    def test_unknown_violation_type_rejected(self, client):
        token = self._start(client)
        response = self._report(client, token, "screen_share", 1)
        assert response.status_code == 422


class TestAdminViolationLog:
    def test_filters_and_requires_admin(self, client):
        for subject_id in ("s1", "s2"):
            token = client.post(
                "/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers(subject_id)
            ).json()["sessionToken"]
            client.post(
                "/api/quiz/violations",
                json={"sessionToken": token, "violationType": "devtools"},
                headers=auth_headers(subject_id),
            )
            client.post(
                "/api/quiz/violations",
                json={"sessionToken": token, "violationType": "tab_switch", "count": 1},
                headers=auth_headers(subject_id),
            )

        forbidden = client.get("/api/admin/violations", headers=auth_headers("s1"))
        assert forbidden.status_code == 403

        everything = client.get("/api/admin/violations", headers=auth_headers("admin1", "admin"))
        assert len(everything.json()["violations"]) == 4

        high_s1 = client.get(
            "/api/admin/violations",
            params={"subjectId": "s1", "severity": "high"},
            headers=auth_headers("admin1", "admin"),
        ).json()["violations"]
        assert len(high_s1) == 1
        assert high_s1[0]["violationType"] == "devtools"
        assert high_s1[0]["subjectId"] == "s1"
