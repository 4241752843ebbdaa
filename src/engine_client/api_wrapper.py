"""HTTP client for the engine REST API.

This module wraps a requests Session and provides error translation from
HTTP failures to our typed exception hierarchy. It integrates with the
retry logic for handling rate limits.

Every request targets `<base_uri>/<resource>.json` and carries the
`auth_token` obtained from `POST tokens.json` plus, for localized
resources, a `locale` query parameter. POST and PUT payloads are wrapped
under the singular name of the resource (`{"page": {...}}`).
"""

import logging
import re
from typing import Any, BinaryIO, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, Timeout

from .auth import Authenticator, Credentials
from .errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    ResourceNotFoundError,
    ValidationFailedError,
)
from .retry_logic import retry_on_rate_limit

logger = logging.getLogger(__name__)

# Engine identifiers are BSON ObjectIds
REMOTE_ID_PATTERN = re.compile(r'^[0-9a-fA-F]{24}$')


class APIWrapper:
    """Thin client over the engine API with error translation.

    This class:
    1. Obtains an API token from the credentials given by the Authenticator
    2. Translates HTTP errors to typed exceptions
    3. Retries 429 rate limits with backoff
    4. Exposes one method per resource operation the sync engines need

    Example:
        >>> api = APIWrapper(Authenticator({'host': 'example.com', 'email': 'me@example.com', 'api_key': 'k'}))
        >>> pages = api.list_pages(locale='en')
    """

    def __init__(
        self,
        authenticator: Authenticator,
        timeout: int = 30,
        session: Optional[requests.Session] = None
    ):
        """Initialize the API wrapper.

        Args:
            authenticator: Authenticator providing the connection settings
            timeout: Timeout in seconds applied to every request
            session: Optional pre-built session (tests)
        """
        self._authenticator = authenticator
        self._timeout = timeout
        self._session = session
        self._credentials: Optional[Credentials] = None
        self._token: Optional[str] = None

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    @property
    def credentials(self) -> Credentials:
        if self._credentials is None:
            self._credentials = self._authenticator.get_credentials()
        return self._credentials

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({'Accept': 'application/json'})
        return self._session

    def _get_token(self) -> str:
        """Get or request the API token.

        Raises:
            InvalidCredentialsError: If the engine refuses the credentials
            APIUnreachableError: If the engine cannot be reached
        """
        if self._token is None:
            creds = self.credentials
            data = {'email': creds.email}
            if creds.api_key:
                data['api_key'] = creds.api_key
            else:
                data['password'] = creds.password or ''

            try:
                response = self._get_session().post(
                    f"{creds.base_uri}/tokens.json",
                    data=data,
                    timeout=self._timeout,
                )
            except (Timeout, ConnectionError):
                raise APIUnreachableError(endpoint=creds.uri)

            if response.status_code != 201 and response.status_code != 200:
                logger.error(
                    f"Unable to get an API token: HTTP {response.status_code} "
                    f"{self._sanitize_credentials(response.text)}"
                )
                raise InvalidCredentialsError(user=creds.email, endpoint=creds.uri)

            token = (response.json() or {}).get('token')
            if not token:
                raise InvalidCredentialsError(user=creds.email, endpoint=creds.uri)

            logger.debug(f"API token obtained from {creds.uri}")
            self._token = str(token)
        return self._token

    @staticmethod
    def _params_name(resource: str) -> str:
        """Singular name wrapping POST/PUT payloads (pages -> page, entries -> entry)."""
        name = resource.strip('/').split('/')[-1]
        if name.endswith('ies'):
            return name[:-3] + 'y'
        if name.endswith('s'):
            return name[:-1]
        return name

    def _validate_remote_id(self, remote_id: str) -> None:
        """Reject ids that could alter the request path.

        Raises:
            ValueError: If remote_id is empty or not an engine identifier
        """
        if not remote_id or not str(remote_id).strip():
            raise ValueError("remote_id cannot be empty")
        if not REMOTE_ID_PATTERN.match(str(remote_id).strip()):
            raise ValueError(
                f"Invalid remote_id format: '{remote_id}'. "
                f"Engine ids are 24 hexadecimal characters."
            )

    def _request(
        self,
        method: str,
        resource: str,
        locale: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            EngineError subclasses (see _translate_error)
        """
        url = f"{self.credentials.base_uri}/{resource}.json"
        params: Dict[str, str] = {'auth_token': self._get_token()}
        if locale:
            params['locale'] = str(locale)

        kwargs: Dict[str, Any] = {'params': params, 'timeout': self._timeout}
        if files is not None:
            name = self._params_name(resource)
            kwargs['data'] = {f"{name}[{key}]": value for key, value in (payload or {}).items()}
            kwargs['files'] = files
        elif payload is not None:
            kwargs['json'] = {self._params_name(resource): payload}

        operation = f"{method} {resource}"
        logger.debug(f"{operation} (locale: {locale})")

        try:
            response = retry_on_rate_limit(self._send, method, url, **kwargs)
        except APIAccessError:
            raise
        except Exception as e:
            raise self._translate_error(e, operation, resource)

        if not response.content:
            return None
        return response.json()

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        response = self._get_session().request(method, url, **kwargs)
        response.raise_for_status()
        return response

    def _sanitize_credentials(self, text: str) -> str:
        """Sanitize error messages to prevent credential leakage.

        Masks tokens, passwords and API keys, and shows only the domain of
        email addresses.

        Example:
            >>> api._sanitize_credentials("GET pages.json?auth_token=abc123 failed")
            'GET pages.json?auth_token=***REDACTED*** failed'
        """
        if not text:
            return text

        sanitized = text

        # user:pass@host in URLs
        sanitized = re.sub(
            r'://([\w.-]+):([\w.-]+)@',
            r'://***:***@',
            sanitized
        )

        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )

        sanitized = re.sub(
            r'password["\']?\s*[:=]\s*["\']?([^"\'\s&]+)',
            r'password=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )

        sanitized = re.sub(
            r'(auth_token|api_key|token)["\']?\s*[:=]\s*["\']?([^"\'\s&]+)',
            r'\1=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )

        sanitized = re.sub(
            r'\b[\w.-]+@([\w.-]+\.[a-z]{2,})\b',
            r'***@\1',
            sanitized,
            flags=re.IGNORECASE
        )

        return sanitized

    def _translate_error(self, exception: Exception, operation: str, resource: str) -> Exception:
        """Translate HTTP exceptions to typed engine exceptions.

        Args:
            exception: The original exception raised by requests
            operation: Description of the request (for logging)
            resource: Resource path of the request

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        if isinstance(exception, (Timeout, ConnectionError)):
            return APIUnreachableError(endpoint=self.credentials.uri)

        response = getattr(exception, 'response', None)
        status_code = getattr(response, 'status_code', None)

        if status_code == 401:
            return InvalidCredentialsError(
                user=self.credentials.email,
                endpoint=self.credentials.uri
            )

        if status_code == 404:
            return ResourceNotFoundError(resource=resource)

        if status_code == 422:
            try:
                errors = response.json()
            except ValueError:
                errors = {}
            if not isinstance(errors, dict):
                errors = {'base': errors}
            elif isinstance(errors.get('errors'), dict):
                errors = errors['errors']
            return ValidationFailedError(resource=resource, errors=errors)

        safe_error_msg = self._sanitize_credentials(str(exception))
        logger.error(f"API operation failed: {operation} - {safe_error_msg}")
        return APIAccessError(f"Engine API failure during {operation}")

    # ------------------------------------------------------------------
    # generic verbs
    # ------------------------------------------------------------------

    def get(self, resource: str, locale: Optional[str] = None) -> Any:
        return self._request('GET', resource, locale)

    def post(self, resource: str, params: Dict[str, Any], locale: Optional[str] = None) -> Dict[str, Any]:
        return self._request('POST', resource, locale, payload=params) or {}

    def put(
        self,
        resource: str,
        remote_id: str,
        params: Dict[str, Any],
        locale: Optional[str] = None
    ) -> Dict[str, Any]:
        self._validate_remote_id(remote_id)
        return self._request('PUT', f"{resource}/{remote_id}", locale, payload=params) or {}

    # ------------------------------------------------------------------
    # site
    # ------------------------------------------------------------------

    def get_current_site(self, locale: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Fetch the site the token belongs to, None if there is none yet."""
        try:
            return self.get('current_site', locale)
        except ResourceNotFoundError:
            return None

    def create_site(self, params: Dict[str, Any], locale: str) -> Dict[str, Any]:
        return self.post('sites', params, locale)

    def update_site(self, remote_id: str, params: Dict[str, Any], locale: str) -> Dict[str, Any]:
        return self.put('sites', remote_id, params, locale)

    # ------------------------------------------------------------------
    # pages
    # ------------------------------------------------------------------

    def list_pages(self, locale: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.get('pages', locale) or []

    def get_page(self, remote_id: str, locale: str) -> Dict[str, Any]:
        self._validate_remote_id(remote_id)
        return self.get(f"pages/{remote_id}", locale) or {}

    def create_page(self, params: Dict[str, Any], locale: str) -> Dict[str, Any]:
        return self.post('pages', params, locale)

    def update_page(self, remote_id: str, params: Dict[str, Any], locale: str) -> Dict[str, Any]:
        return self.put('pages', remote_id, params, locale)

    # ------------------------------------------------------------------
    # snippets
    # ------------------------------------------------------------------

    def list_snippets(self, locale: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.get('snippets', locale) or []

    def get_snippet(self, remote_id: str, locale: str) -> Dict[str, Any]:
        self._validate_remote_id(remote_id)
        return self.get(f"snippets/{remote_id}", locale) or {}

    def create_snippet(self, params: Dict[str, Any], locale: str) -> Dict[str, Any]:
        return self.post('snippets', params, locale)

    def update_snippet(self, remote_id: str, params: Dict[str, Any], locale: str) -> Dict[str, Any]:
        return self.put('snippets', remote_id, params, locale)

    # ------------------------------------------------------------------
    # translations
    # ------------------------------------------------------------------

    def list_translations(self) -> List[Dict[str, Any]]:
        return self.get('translations') or []

    def create_translation(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.post('translations', params)

    def update_translation(self, remote_id: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.put('translations', remote_id, params)

    # ------------------------------------------------------------------
    # content types and entries
    # ------------------------------------------------------------------

    def list_content_types(self) -> List[Dict[str, Any]]:
        return self.get('content_types') or []

    def create_content_type(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.post('content_types', params)

    def update_content_type(self, remote_id: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return self.put('content_types', remote_id, params)

    def list_entries(self, content_type: str, locale: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.get(f"content_types/{content_type}/entries", locale) or []

    def get_entry(self, content_type: str, remote_id: str, locale: str) -> Dict[str, Any]:
        self._validate_remote_id(remote_id)
        return self.get(f"content_types/{content_type}/entries/{remote_id}", locale) or {}

    def create_entry(self, content_type: str, params: Dict[str, Any], locale: str) -> Dict[str, Any]:
        return self.post(f"content_types/{content_type}/entries", params, locale)

    def update_entry(
        self,
        content_type: str,
        remote_id: str,
        params: Dict[str, Any],
        locale: str
    ) -> Dict[str, Any]:
        return self.put(f"content_types/{content_type}/entries", remote_id, params, locale)

    # ------------------------------------------------------------------
    # content assets
    # ------------------------------------------------------------------

    def list_content_assets(self) -> List[Dict[str, Any]]:
        return self.get('content_assets') or []

    def upload_content_asset(
        self,
        filename: str,
        source: BinaryIO,
        remote_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create (or replace when `remote_id` is given) a content asset."""
        files = {'content_asset[source]': (filename, source)}
        if remote_id:
            self._validate_remote_id(remote_id)
            return self._request('PUT', f"content_assets/{remote_id}", files=files) or {}
        return self._request('POST', 'content_assets', files=files) or {}

    def download(self, url: str) -> bytes:
        """Download a file served by the engine (content asset source).

        Raises:
            APIUnreachableError: If the host cannot be reached
            ResourceNotFoundError: If the file does not exist
        """
        if not url.startswith(('http://', 'https://')):
            host = re.match(r'^https?://[^/]+', self.credentials.uri)
            url = f"{host.group(0) if host else self.credentials.uri}{url}"

        try:
            response = retry_on_rate_limit(self._send, 'GET', url, timeout=self._timeout)
        except APIAccessError:
            raise
        except Exception as e:
            raise self._translate_error(e, f"GET {url}", url)
        return response.content
