"""Loading of engine connection settings.

Settings come from the `deploy.yml` file of the site (one mapping per
environment) or, when the site has no entry for the environment, from
environment variables loaded with python-dotenv.
"""

import os
from typing import Any, Dict, NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

ENV_URI = 'MOUNTER_URI'
ENV_EMAIL = 'MOUNTER_EMAIL'
ENV_PASSWORD = 'MOUNTER_PASSWORD'
ENV_API_KEY = 'MOUNTER_API_KEY'


class Credentials(NamedTuple):
    """Engine API connection settings.

    Either `password` or `api_key` is set. `uri` always carries a scheme.
    """
    uri: str
    email: str
    password: Optional[str] = None
    api_key: Optional[str] = None

    @property
    def base_uri(self) -> str:
        """API root, e.g. https://example.com/locomotive/api."""
        uri = self.uri.rstrip('/')
        if not uri.endswith('/api'):
            uri = f"{uri}/locomotive/api"
        return uri


def with_scheme(uri: str) -> str:
    return uri if uri.startswith(('http://', 'https://')) else f"http://{uri}"


class Authenticator:
    """Builds and validates engine credentials.

    Credentials are never cached or logged.

    Args:
        settings: Optional mapping read from deploy.yml (`host`, `email`,
            `password`, `api_key`). Missing keys fall back to the
            MOUNTER_* environment variables.

    Example:
        >>> auth = Authenticator({'host': 'example.com', 'email': 'me@example.com', 'api_key': 'k'})
        >>> auth.get_credentials().uri
        'http://example.com'
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        load_dotenv()
        self._settings = dict(settings or {})

    def get_credentials(self) -> Credentials:
        """Return validated credentials.

        Raises:
            InvalidCredentialsError: If the URI, the email or both secrets are missing
        """
        uri = self._settings.get('host') or self._settings.get('uri') or os.getenv(ENV_URI)
        email = self._settings.get('email') or os.getenv(ENV_EMAIL)
        password = self._settings.get('password') or os.getenv(ENV_PASSWORD)
        api_key = self._settings.get('api_key') or os.getenv(ENV_API_KEY)

        if not uri or not email or not (password or api_key):
            raise InvalidCredentialsError(
                user=email if email else "unknown",
                endpoint=str(uri) if uri else "unknown"
            )

        return Credentials(
            uri=with_scheme(str(uri)),
            email=str(email),
            password=str(password) if password else None,
            api_key=str(api_key) if api_key else None,
        )
