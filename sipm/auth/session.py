"""
Session Handling

DESIGN DECISION: Login is a labelled placeholder, not a security boundary.
The mock provider accepts any password and fabricates a User.

It sits behind SessionProvider so a real credential check can be
dropped in without touching the registry or the reports.
"""

from abc import ABC, abstractmethod
from uuid import uuid4

from sipm.logger import get_logger
from sipm.models.session import User, UserRole


logger = get_logger(__name__)

ROLE_FULL_NAMES = {
    UserRole.ADMIN: "Chief Administrator",
    UserRole.STAFF: "District Officer",
}


class LoginError(Exception):
    """Login was refused."""
    pass


class SessionProvider(ABC):
    """Starts and ends operator sessions."""

    @abstractmethod
    def login(self, username: str, password: str, role: UserRole) -> User:
        """
        Start a session.

        Raises:
            LoginError: If the login is refused
        """
        pass

    @abstractmethod
    def logout(self, user: User) -> None:
        """End a session."""
        pass


class MockSessionProvider(SessionProvider):
    """Accepts any credentials. The role is taken from the login form."""

    def login(self, username: str, password: str, role: UserRole) -> User:
        username = (username or "").strip()
        if not username:
            raise LoginError("Username wajib diisi.")

        user = User(
            id=uuid4().hex,
            username=username,
            role=role,
            full_name=ROLE_FULL_NAMES[role],
        )
        logger.info("session_started", username=username, role=role.value)
        return user

    def logout(self, user: User) -> None:
        logger.info("session_ended", username=user.username)
