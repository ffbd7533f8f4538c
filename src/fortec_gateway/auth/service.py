# Register / login / key issue / key verify on top of an IdentityStore.

from __future__ import annotations

from typing import Any, Dict, Optional

from fortec_gateway.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from fortec_gateway.logger import get_logger
from .store import IdentityStore, check_password

logger = get_logger("auth")


class AuthService:
    def __init__(self, store: IdentityStore):
        self.store = store

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not name or not email or not password:
            raise ValidationError("Please provide name, email, and password")
        if self.store.find_user_by_email(email):
            raise ConflictError("User with this email already exists")
        try:
            user = self.store.create_user(name, email, password)
        except KeyError:
            # lost a race with a concurrent registration
            raise ConflictError("User with this email already exists") from None
        key = self.store.create_key(user.id)
        logger.info("Registered user %s", user.id)
        return {"user": user.public(), "api_key": key.key}

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        if not email or not password:
            raise ValidationError("Please provide email and password")
        user = self.store.find_user_by_email(email)
        if not user or not check_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        key = self.store.find_key_for_user(user.id)
        return {"user": user.public(), "api_key": key.key if key else None}

    def issue_key(self, user_id: Optional[str]) -> Dict[str, Any]:
        if not user_id:
            raise ValidationError("User ID is required")
        if not self.store.find_user_by_id(user_id):
            raise NotFoundError("User not found")
        key = self.store.create_key(user_id)
        return {"api_key": key.key}

    def verify_key(self, api_key: Optional[str]) -> Dict[str, Any]:
        if not api_key:
            raise ValidationError("API key is required")
        record = self.store.find_key(api_key)
        if not record:
            raise AuthenticationError("Invalid API key")
        user = self.store.find_user_by_id(record.user_id)
        if not user:
            raise AuthenticationError("Invalid API key")
        return {"valid": True, "user": {"id": user.id, "name": user.name, "email": user.email}}
