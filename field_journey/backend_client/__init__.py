"""Admin backend client components (session, response handling, API)."""

from .api import BackendClient  # noqa: F401
from .session import create_session, get_default_session  # noqa: F401
