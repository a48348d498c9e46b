from datetime import datetime
from typing import Callable, Tuple
import logging

from ..core.config import settings
from ..core.exceptions import DuplicateRecord, InvalidLogin, PrincipalNotFound
from ..core.security import (
    Principal, Token, UserRole, create_token, get_password_hash, utcnow, verify_password
)
from ..core.store import DocumentStore, ResourceType
from ..models.user import User
from ..schemas.auth import UserLogin, UserRegister

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, store: DocumentStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    def resolve_principal(self, subject_id: str) -> Principal:
        """Load the account behind a verified credential."""
        try:
            user_id = int(subject_id)
        except (TypeError, ValueError):
            raise PrincipalNotFound(subject_id=subject_id)

        user = self.store.find_one(ResourceType.USER, {"id": user_id})
        if user is None:
            # Account deleted after the token was issued
            raise PrincipalNotFound(subject_id=subject_id)

        return Principal(id=user.id, name=user.name, role=UserRole(user.role))

    def create_user(self, name: str, email: str, password: str, role: UserRole) -> User:
        """Create an account after checking the email is free."""
        email = email.strip().lower()
        if self.store.find_one(ResourceType.USER, {"email": email}):
            raise DuplicateRecord("Email already registered")

        return self.store.insert(ResourceType.USER, {
            "name": name.strip(),
            "email": email,
            "password_hash": get_password_hash(password),
            "role": UserRole(role),
        })

    def register_user(self, user_data: UserRegister) -> Tuple[User, Token]:
        """Register a patient or doctor account and issue its first token."""
        user = self.create_user(
            user_data.name, user_data.email, user_data.password, user_data.role
        )
        logger.info(f"Registered {user.role.value} account {user.id}")
        return user, create_token(user.id)

    def authenticate_user(self, login_data: UserLogin) -> Tuple[User, Token]:
        """Authenticate user and return a token."""
        user = self.store.find_one(
            ResourceType.USER, {"email": login_data.email.strip().lower()}
        )

        if not user or not verify_password(login_data.password, user.password_hash):
            raise InvalidLogin()

        # Naive UTC, matching the server-side timestamp columns
        user = self.store.update_by_id(
            ResourceType.USER, user.id, {"last_login": self.clock().replace(tzinfo=None)}
        )
        return user, create_token(user.id)

    def ensure_admin(self) -> User:
        """Create the configured administrator account if it is missing."""
        email = settings.ADMIN_EMAIL.strip().lower()
        existing = self.store.find_one(ResourceType.USER, {"email": email})
        if existing:
            logger.info("Admin user already exists")
            return existing

        admin = self.create_user(
            settings.ADMIN_NAME, email, settings.ADMIN_PASSWORD, UserRole.ADMIN
        )
        logger.info("Admin user created successfully")
        return admin
