"""Authentication service: registration, login and token issuing."""

import logging
import uuid

from sqlalchemy import select, func, or_

from api.services.base import BaseService
from core.exceptions import ValidationError, AuthenticationError, ConflictError
from core.security import hash_password, verify_password, create_access_token
from core.utils.formatting import split_full_name, mask_email
from core.utils.validators import validate_username, validate_password_strength
from database.models import User, UserRole

logger = logging.getLogger(__name__)


class AuthService(BaseService):

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        username: str,
        role: UserRole = UserRole.FREELANCER,
    ) -> dict:
        """
        Create an account and sign it in.

        Args:
            email: Login email, unique
            password: Plain password, at least 8 characters
            name: Full name; split into first and last name on the first space
            username: Public handle, unique
            role: Account kind

        Returns:
            Dict with user and token
        """
        email = email.strip().lower()

        ok, error = validate_username(username)
        if not ok:
            raise ValidationError(error)
        ok, errors = validate_password_strength(password)
        if not ok:
            raise ValidationError(errors[0])

        existing = (await self.db.execute(
            select(User.email).where(or_(func.lower(User.email) == email, User.username == username))
        )).scalars().all()
        if any(e.lower() == email for e in existing):
            raise ConflictError("User already exists with this email")
        if existing:
            raise ConflictError("Username already taken")

        first_name, last_name = split_full_name(name)
        user = User(
            email=email,
            username=username,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        self.db.add(user)
        await self.db.commit()

        logger.info(f"User registered: {mask_email(email)}")
        return {"user": user, "token": create_access_token(user.id)}

    async def login(self, email: str, password: str) -> dict:
        """Check credentials and issue a token. Every failure reads the same."""
        user = (await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )).scalar_one_or_none()

        if user is None or not user.password_hash or not user.is_active:
            raise AuthenticationError("Invalid credentials")
        if not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {mask_email(user.email)}")
            raise AuthenticationError("Invalid credentials")

        logger.info(f"User logged in: {mask_email(user.email)}")
        return {"user": user, "token": create_access_token(user.id)}

    async def get_user(self, user_id: uuid.UUID) -> User:
        return await self._get_or_404(User, user_id, "User not found")
