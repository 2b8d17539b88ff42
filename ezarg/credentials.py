"""Per-provider credential resolution."""

from typing import Mapping, Optional

from .config import credentials_from_env
from .errors import MissingCredential
from .models import ProviderId


def resolve(
    provider: ProviderId,
    supplied: Optional[str] = None,
    defaults: Optional[Mapping[ProviderId, Optional[str]]] = None
) -> str:
    """
    Pick the credential to use for one request to a provider.

    Args:
        provider: Provider being called
        supplied: Key supplied by the caller, e.g. entered by the user
        defaults: Process-wide default keys; read from the environment if omitted

    Returns:
        The supplied key when non-empty, otherwise the default

    Raises:
        MissingCredential: If neither source has a key
    """
    if supplied and supplied.strip():
        return supplied

    if defaults is None:
        defaults = credentials_from_env()
    default = defaults.get(provider)
    if default and default.strip():
        return default

    raise MissingCredential(provider)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def supplied_credential(
    authorization: Optional[str] = None,
    api_key: Optional[str] = None
) -> Optional[str]:
    """
    Pick the caller-supplied key from whichever transport carried it.

    The Authorization header takes priority over a key embedded in the
    request body.
    """
    return bearer_token(authorization) or (api_key or None)
