"""
HTTP execution of tool calls against the target API.
"""

from typing import Any, Dict, Optional

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import ExecutionError

BODY_METHODS = ("POST", "PUT", "PATCH")
RETRY_STATUSES = (429, 502, 503, 504)


class HTTPExecutor:
    """Performs the HTTP call behind a tool handler.

    Instances are callable as ``executor(method, url, arguments)``, which is
    the signature tool handlers expect. One session is shared by every tool
    of a generation run.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retries: int = 3,
        backoff_factor: float = 1.0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        logger=None,
    ):
        """Initialize the executor.

        Args:
            base_url: Base URL prepended to every tool path
            timeout: Per-request timeout in seconds
            retries: Retry count for connection errors and retryable statuses
            backoff_factor: Backoff factor between retries
            headers: Extra headers sent with every request
            session: Session to use instead of creating one
            logger: structlog logger to report to
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logger or structlog.get_logger(__name__)

        if session is None:
            session = requests.Session()
            retry = Retry(
                total=retries,
                backoff_factor=backoff_factor,
                status_forcelist=RETRY_STATUSES,
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )
        if headers:
            session.headers.update(headers)
        self.session = session

    def full_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        if not url.startswith("/"):
            url = "/" + url
        return f"{self.base_url}{url}"

    def __call__(self, method: str, url: str, arguments: Dict[str, Any]) -> Any:
        return self.execute(method, url, arguments)

    def execute(self, method: str, url: str, arguments: Dict[str, Any]) -> Any:
        """Perform an HTTP request for a tool call.

        Methods without a body send every argument as a query parameter.
        POST, PUT and PATCH send ``arguments["body"]`` as the JSON body and
        the rest as query parameters.

        Args:
            method: HTTP method
            url: Path (already substituted) or absolute URL
            arguments: Remaining tool call arguments

        Returns:
            Any: Decoded JSON, or the response text if it is not JSON

        Raises:
            ExecutionError: On transport failures and error statuses
        """
        method = method.upper()
        params = dict(arguments or {})
        body = None

        if method in BODY_METHODS:
            body = params.pop("body", None)

        target = self.full_url(url)
        self.logger.debug("Making HTTP request", method=method, url=target, params=params)

        try:
            response = self.session.request(
                method, target, params=params or None, json=body, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ExecutionError(f"{method} request failed: {e}") from e

        self.logger.debug(
            "Received HTTP response",
            status_code=response.status_code,
            size=len(response.content),
        )

        if response.status_code >= 400:
            raise ExecutionError(
                f"HTTP error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            return response.text
