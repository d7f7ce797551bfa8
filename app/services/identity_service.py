"""
Identity provider boundary

Verifies signed bearer tokens and yields the caller's subject id and role.
Format: {subject_id}:{role}:{issued_at}:{signature}
"""
import enum
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Optional

from app.config import settings

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    STUDENT = "student"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    subject_id: str
    role: Role


class IdentityProvider:
    def __init__(self, secret_key: str, ttl_seconds: int):
        self.secret = secret_key.encode()
        self.ttl_seconds = ttl_seconds

    def _sign(self, data: str) -> str:
        return hmac.new(self.secret, data.encode(), hashlib.sha256).hexdigest()

    def issue_token(self, subject_id: str, role, issued_at: int = None) -> str:
        """Tooling/test helper; login and credential checks live elsewhere"""
        if not subject_id or ":" in subject_id:
            raise ValueError("subject_id must be non-empty and must not contain ':'")
        role = Role(role)
        issued_at = int(time.time()) if issued_at is None else issued_at
        data = f"{subject_id}:{role.value}:{issued_at}"
        return f"{data}:{self._sign(data)}"

    def authenticate(self, token: Optional[str]) -> Optional[Principal]:
        if not token:
            return None

        parts = token.split(":")
        if len(parts) != 4:
            return None

        subject_id, role_str, issued_at_str, signature = parts
        data = f"{subject_id}:{role_str}:{issued_at_str}"
        if not hmac.compare_digest(self._sign(data), signature):
            logger.warning(f"Token signature mismatch - subject: {subject_id}")
            return None

        try:
            issued_at = int(issued_at_str)
            role = Role(role_str)
        except ValueError:
            return None

        if int(time.time()) - issued_at > self.ttl_seconds:
            logger.info(f"Token expired - subject: {subject_id}")
            return None

        return Principal(subject_id=subject_id, role=role)


# Global instance
identity_provider = IdentityProvider(settings.SECRET_KEY, settings.AUTH_TOKEN_TTL_SECONDS)
