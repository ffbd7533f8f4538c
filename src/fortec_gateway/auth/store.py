# Identity store interface plus the demo in-memory implementation.
# DemoIdentityStore keeps nothing across restarts and is not a security boundary.

from __future__ import annotations

import hashlib
import hmac
import secrets
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

PBKDF2_ROUNDS = 100_000


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ROUNDS)
    return f"{salt.hex()}${digest.hex()}"


def check_password(password: str, stored: str) -> bool:
    salt_hex, _, digest_hex = stored.partition("$")
    expected = hash_password(password, bytes.fromhex(salt_hex))
    return hmac.compare_digest(expected.partition("$")[2], digest_hex)


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    password_hash: str
    created_at: str = field(default_factory=_now)

    def public(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "email": self.email, "created_at": self.created_at}


@dataclass(frozen=True)
class ApiKeyRecord:
    key: str
    user_id: str
    created_at: str = field(default_factory=_now)


class IdentityStore(Protocol):
    def create_user(self, name: str, email: str, password: str) -> UserRecord: ...
    def find_user_by_email(self, email: str) -> Optional[UserRecord]: ...
    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]: ...
    def create_key(self, user_id: str) -> ApiKeyRecord: ...
    def find_key(self, key: str) -> Optional[ApiKeyRecord]: ...
    def find_key_for_user(self, user_id: str) -> Optional[ApiKeyRecord]: ...


class DemoIdentityStore:
    """In-memory users and API keys for demos; lost on restart."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, UserRecord] = {}
        self._emails: Dict[str, str] = {}
        self._keys: Dict[str, ApiKeyRecord] = {}
        self._keys_by_user: Dict[str, List[str]] = {}

    def create_user(self, name: str, email: str, password: str) -> UserRecord:
        user = UserRecord(id=str(uuid.uuid4()), name=name, email=email, password_hash=hash_password(password))
        with self._lock:
            if email in self._emails:
                raise KeyError(email)
            self._users[user.id] = user
            self._emails[email] = user.id
        return user

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            user_id = self._emails.get(email)
            return self._users.get(user_id) if user_id else None

    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    def create_key(self, user_id: str) -> ApiKeyRecord:
        record = ApiKeyRecord(key=str(uuid.uuid4()), user_id=user_id)
        with self._lock:
            self._keys[record.key] = record
            self._keys_by_user.setdefault(user_id, []).append(record.key)
        return record

    def find_key(self, key: str) -> Optional[ApiKeyRecord]:
        with self._lock:
            return self._keys.get(key)

    def find_key_for_user(self, user_id: str) -> Optional[ApiKeyRecord]:
        """First key issued to the user (the one handed out at registration)."""
        with self._lock:
            keys = self._keys_by_user.get(user_id)
            return self._keys[keys[0]] if keys else None
