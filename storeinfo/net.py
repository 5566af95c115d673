import logging
import time
from typing import Optional

import urllib3
from urllib3.util.retry import Retry
from urllib3 import exceptions as urllib3_exc

from .metrics import Metrics
from .types import FetchResult


logger = logging.getLogger(__name__)


class AssumeConnected:
    """Connectivity collaborator for hosts with no reachability check of their own."""

    def is_connected(self) -> bool:
        return True


class HttpClient:
    def __init__(
        self,
        user_agent: str,
        request_timeout: float,
        max_connections: int = 4,
        metrics: Optional[Metrics] = None,
    ):
        self.user_agent = user_agent
        self.timeout = urllib3.Timeout(connect=request_timeout, read=request_timeout)
        self.metrics = metrics or Metrics()
        self.http = urllib3.PoolManager(
            maxsize=max_connections,
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,*/*;q=0.8",
                "Accept-Encoding": "gzip, deflate",
            },
            # single attempt per call; redirects are still followed
            retries=Retry(
                total=None,
                connect=0,
                read=0,
                status=0,
                other=0,
                redirect=5,
                raise_on_status=False,
            ),
        )

    def _request(self, url: str, referrer: Optional[str], preload: bool) -> urllib3.BaseHTTPResponse:
        headers = {"User-Agent": self.user_agent}
        if referrer:
            headers["Referer"] = referrer
        logger.debug("GET %s", url)
        t0 = time.perf_counter()
        try:
            response = self.http.request(
                "GET",
                url,
                timeout=self.timeout,
                preload_content=preload,
                headers=headers,
            )
        except urllib3_exc.HTTPError:
            self.metrics.record_request(False, 0, (time.perf_counter() - t0) * 1000.0)
            raise
        body_size = len(response.data or b"") if preload else 0
        self.metrics.record_request(True, body_size, (time.perf_counter() - t0) * 1000.0)
        return response

    def open(self, url: str) -> urllib3.BaseHTTPResponse:
        """Issue the request without reading the body; the caller must close() it."""
        return self._request(url, None, preload=False)

    def fetch(self, url: str, referrer: Optional[str] = None) -> FetchResult:
        response = self._request(url, referrer, preload=True)
        body = response.data or b""
        content_type = response.headers.get("Content-Type", "")
        text = body.decode("utf-8", errors="ignore")
        return FetchResult(status=response.status, content_type=content_type or "", text=text, size_bytes=len(body))
