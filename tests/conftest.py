"""
Pytest configuration and fixtures for the quiz integrity service
"""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="quiz-integrity-tests-")

# Settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "1000000"
os.environ["BLOB_STORAGE_DIR"] = f"{_TMP_DIR}/blobs"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: E402,F401
from app.api.deps import get_blob_store  # noqa: E402
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Question  # noqa: E402
from app.services.blob_store import BlobStore  # noqa: E402
from app.services.identity_service import identity_provider  # noqa: E402


PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


class InMemoryBlobStore(BlobStore):
    """Blob store double that keeps uploads in a dict"""

    def __init__(self):
        self.blobs = {}
        self.fail_uploads = False

    async def upload(self, key, data, content_type):
        if self.fail_uploads:
            raise IOError("storage unavailable")
        self.blobs[key] = data
        return f"memory://blobs/{key}"

    async def delete(self, url):
        self.blobs.pop(url.rsplit("/", 1)[-1], None)


def auth_headers(subject_id, role="student"):
    return {"X-Auth-Token": identity_provider.issue_token(subject_id, role)}


@pytest.fixture(autouse=True)
def fresh_tables():
    """Recreate the schema for every test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store():
    store = InMemoryBlobStore()
    app.dependency_overrides[get_blob_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_blob_store, None)


@pytest.fixture
def client(blob_store):
    return TestClient(app)


@pytest.fixture
def seed_questions(db):
    """
    Create ``count`` four-option questions for a topic

    Returns the question ids in order; every question's correct answer is
    ``correct_answer``.
    """
    def _seed(topic_id="topic1", count=10, correct_answer=2):
        ids = []
        for position in range(count):
            question_id = f"{topic_id}-q{position + 1}"
            db.add(Question(
                id=question_id,
                topic_id=topic_id,
                position=position,
                prompt=f"Question {position + 1}?",
                options=["A", "B", "C", "D"],
                correct_answer=correct_answer,
            ))
            ids.append(question_id)
        db.commit()
        return ids

    return _seed
