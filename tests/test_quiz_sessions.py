"""
Tests for quiz session start, restore and expiry
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.config import settings
from app.database import SessionLocal
from app.models import QuizSession, SessionStatus, Submission
from app.services.session_service import session_service
from app.utils import clock
from tests.conftest import auth_headers


class TestStartSession:
    def test_new_session_issued(self, client):
        response = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))

        assert response.status_code == 201
        data = response.json()
        assert data["restored"] is False
        assert len(data["sessionToken"]) >= 32
        assert data["expiresAt"]

    def test_session_lasts_configured_duration(self, client, db):
        client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))

        session = db.query(QuizSession).one()
        assert session.expires_at - session.started_at == timedelta(minutes=60)
        assert session.status == SessionStatus.ACTIVE.value
        assert session.tab_switch_count == 0

    def test_restore_returns_same_token(self, client, db):
        first = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))
        second = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))

        assert second.status_code == 200
        assert second.json()["restored"] is True
        assert second.json()["sessionToken"] == first.json()["sessionToken"]
        assert second.json()["expiresAt"] == first.json()["expiresAt"]
        assert db.query(QuizSession).count() == 1

    def test_sessions_are_per_topic_and_subject(self, client):
        a = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))
        b = client.post("/api/quiz/start", json={"topicId": "topic2"}, headers=auth_headers("s1"))
        c = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s2"))

        tokens = {r.json()["sessionToken"] for r in (a, b, c)}
        assert len(tokens) == 3

    def test_expired_session_is_not_resurrected(self, client, db):
        first = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))

        old = db.query(QuizSession).one()
        old.expires_at = clock.utcnow() - timedelta(seconds=1)
        db.commit()

        second = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))

        assert second.status_code == 201
        assert second.json()["sessionToken"] != first.json()["sessionToken"]

        db.expire_all()
        statuses = sorted(s.status for s in db.query(QuizSession).all())
        assert statuses == [SessionStatus.ACTIVE.value, SessionStatus.EXPIRED.value]

    def test_completed_quiz_refuses_new_session(self, client, db):
        db.add(Submission(
            subject_id="s1", topic_id="topic1", answers={}, correct_count=0, score=0,
            total_questions=10, percentage=0, time_spent_seconds=10,
        ))
        db.commit()

        response = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))

        assert response.status_code == 409
        assert response.json()["error"] == "already_completed"
        assert db.query(QuizSession).count() == 0

    def test_completed_quiz_refuses_even_after_expiry(self, client, db, seed_questions):
        seed_questions("topic1", count=2)
        start = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))
        client.post("/api/quiz/submit", json={
            "topicId": "topic1",
            "answers": {},
            "timeSpentSeconds": 30,
            "sessionToken": start.json()["sessionToken"],
        }, headers=auth_headers("s1"))

        session = db.query(QuizSession).one()
        session.expires_at = clock.utcnow() - timedelta(minutes=5)
        db.commit()

        response = client.post("/api/quiz/start", json={"topicId": "topic1"}, headers=auth_headers("s1"))
        assert response.status_code == 409
        assert response.json()["error"] == "already_completed"

    def test_concurrent_starts_share_one_active_session(self, db, monkeypatch):
        real_get_active_session = session_service.get_active_session
        competing = {}

        def racing_get_active_session(session, subject_id, topic_id):
            # A competing start runs to completion between the lookup and the insert
            if not competing:
                competing["started"] = True
                other = SessionLocal()
                try:
                    winner, _ = session_service.start_session(other, subject_id, topic_id)
                    competing["token"] = winner.session_token
                finally:
                    other.close()
                return None
            return real_get_active_session(session, subject_id, topic_id)

        monkeypatch.setattr(session_service, "get_active_session", racing_get_active_session)

        session, restored = session_service.start_session(db, "s1", "topic1")

        assert restored is True
        assert session.session_token == competing["token"]
        active = db.query(QuizSession).filter(QuizSession.status == SessionStatus.ACTIVE.value).count()
        assert active == 1

    def test_storage_rejects_second_active_session(self, db):
        now = clock.utcnow()
        for token in ("first", "second"):
            db.add(QuizSession(
                subject_id="s1", topic_id="topic1", session_token=token, started_at=now,
                expires_at=now + timedelta(minutes=60), status=SessionStatus.ACTIVE.value,
            ))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_unknown_topic(self, client):
        response = client.post("/api/quiz/start", json={"topicId": "nope"}, headers=auth_headers("s1"))
        assert response.status_code == 404
        assert response.json()["error"] == "unknown_topic"

    def test_requires_authentication(self, client):
        response = client.post("/api/quiz/start", json={"topicId": "topic1"})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    def test_bearer_header_accepted(self, client):
        token = auth_headers("s1")["X-Auth-Token"]
        response = client.post(
            "/api/quiz/start",
            json={"topicId": "topic1"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 201

    def test_records_origin_from_trusted_proxy(self, client, db, monkeypatch):
        monkeypatch.setattr(settings, "TRUSTED_PROXIES", ["testclient"])
        client.post(
            "/api/quiz/start",
            json={"topicId": "topic1"},
            headers={**auth_headers("s1"), "X-Forwarded-For": "10.0.0.7, 10.0.0.1", "User-Agent": "pytest-agent"},
        )
        session = db.query(QuizSession).one()
        assert session.origin_ip == "10.0.0.7"
        assert session.user_agent == "pytest-agent"

    def test_forwarded_header_ignored_without_trusted_proxy(self, client, db):
        client.post(
            "/api/quiz/start",
            json={"topicId": "topic1"},
            headers={**auth_headers("s1"), "X-Forwarded-For": "10.0.0.7"},
        )
        assert db.query(QuizSession).one().origin_ip == "testclient"
