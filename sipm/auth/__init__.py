"""Session package."""

from sipm.auth.session import (
    ROLE_FULL_NAMES,
    LoginError,
    MockSessionProvider,
    SessionProvider,
)

__all__ = ["ROLE_FULL_NAMES", "LoginError", "MockSessionProvider", "SessionProvider"]
