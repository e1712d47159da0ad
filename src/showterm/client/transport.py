"""
HTTP client for the showterm server.

Uploads recorded sessions and deletes them again using the shared secret.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
import urllib3

from showterm.config import Config
from showterm.errors import RemoteError, TransportError
from showterm.session.base import TermSession

logger = logging.getLogger(__name__)


class ShowtermClient:
    """
    Client for the showterm upload/delete API.

    Upload retries on any failure up to http.upload_attempts times (two by
    default); delete makes http.delete_attempts attempts (one by default).
    The last failure is raised.
    """

    def __init__(
        self,
        config: Config,
        secret: str,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Showterm configuration (server URL and HTTP settings)
            secret: Shared secret proving ownership of uploads
            session: requests session to send with (a new one by default)
        """
        self.base_url = config.server_url
        self.http = config.http
        self.secret = secret
        self._session = session or requests.Session()

        if config.use_ssl and not self.http.verify_ssl:
            logger.warning(
                "TLS certificate verification is disabled for %s", self.base_url
            )
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def upload(self, term_session: TermSession) -> str:
        """
        Upload a session.

        Args:
            term_session: Recorded session with geometry set

        Returns:
            URL of the uploaded session

        Raises:
            TransportError: If every attempt failed (RemoteError for a
                non-2xx answer, carrying the server's message)
        """
        data = {
            "scriptfile": term_session.script_text,
            "timingfile": term_session.timing_text,
            "cols": term_session.columns,
            "lines": term_session.rows,
            "secret": self.secret,
        }
        return self._request_with_retry(
            "POST", self.http.upload_path, data, self.http.upload_attempts
        )

    def delete(self, url: str) -> str:
        """
        Delete a previously uploaded session.

        Only the path of url is used; the request goes to the configured server.

        Returns:
            The server's confirmation message

        Raises:
            TransportError: If the request failed
        """
        path = urlparse(url).path or "/"
        return self._request_with_retry(
            "DELETE", path, {"secret": self.secret}, self.http.delete_attempts
        )

    def close(self) -> None:
        self._session.close()

    def _request_with_retry(
        self, method: str, path: str, data: Dict[str, Any], attempts: int
    ) -> str:
        last_error: Optional[TransportError] = None
        for attempt in range(1, attempts + 1):
            try:
                return self._request(method, path, data)
            except TransportError as e:
                last_error = e
                if attempt < attempts:
                    logger.warning(
                        "%s %s failed (attempt %d/%d), retrying: %s",
                        method, path, attempt, attempts, e,
                    )
        raise last_error

    def _request(self, method: str, path: str, data: Dict[str, Any]) -> str:
        url = self.base_url + path
        logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                data=data,
                timeout=(self.http.connect_timeout, self.http.read_timeout),
                verify=self.http.verify_ssl,
            )
        except requests.Timeout as e:
            raise TransportError(f"Could not connect to {self.base_url}") from e
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        if not 200 <= response.status_code < 300:
            logger.debug("%s %s returned %d", method, url, response.status_code)
            raise RemoteError(response.text, status_code=response.status_code)

        return response.text.strip()
