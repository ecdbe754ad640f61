import hmac
import logging

from pokedex_api.services.errors import AuthorizationError

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized. Missing or invalid admin credentials."


def require_admin_key(provided: str | None, configured: str | None, *, route: str = "") -> None:
    configured_key = (configured or "").strip()
    provided_key = (provided or "").strip()
    if configured_key and provided_key and hmac.compare_digest(provided_key, configured_key):
        return
    logger.warning(
        "Admin key denied for %s (configured=%s, provided=%s)",
        route or "-",
        bool(configured_key),
        bool(provided_key),
    )
    raise AuthorizationError(UNAUTHORIZED_MESSAGE)
