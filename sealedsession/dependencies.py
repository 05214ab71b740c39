"""FastAPI dependencies for routes that require a session."""
import logging
from typing import Any, Callable, Coroutine

from fastapi import HTTPException, Request, status

from .config import SessionConfig, get_session_config
from .cookies import get_bearer_session, get_session
from .errors import NotFoundError, SessionError

logger = logging.getLogger(__name__)


def session_dependency(
    config: SessionConfig | None = None,
    model: Any = None,
    *,
    bearer: bool = False,
) -> Callable[[Request], Coroutine[Any, Any, Any]]:
    """Build a dependency that returns the current session.

    Args:
        config: Session configuration; built from environment settings
            on first use when omitted
        model: Optional type to validate the session value into
        bearer: Read the token from the Authorization header instead of
            the session cookie

    Returns:
        An async dependency raising HTTPException 401 when no valid
        session is present
    """
    read = get_bearer_session if bearer else get_session

    async def current_session(request: Request) -> Any:
        try:
            return read(request, config or get_session_config(), model)
        except NotFoundError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )
        except SessionError as exc:
            # Which check failed is only useful for debugging
            logger.debug("Rejected session: %s", type(exc).__name__)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired session",
            )

    return current_session
