"""JSON transport for metric batches"""

import json
import ssl
from typing import Any, Dict, List, Optional
from urllib.request import Request, urlopen


class NfsMonHttpClient:
    """Posts nfsmon batches to <server_base>/api/metrics"""

    def __init__(self, server_base: str, timeout: int = 10):
        self.server_base = server_base.rstrip("/")
        self.timeout = timeout
        self._ssl_context = self._create_ssl_context()

    def _create_ssl_context(self) -> ssl.SSLContext:
        # Collection servers commonly run with self-signed certificates
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        return ssl_context

    def post_json(self, endpoint: str, data: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        POST data to endpoint and decode the reply; an empty reply is {}.

        HTTPError and URLError propagate to the caller.
        """
        url = f"{self.server_base}{endpoint}"
        body = json.dumps(data).encode("utf-8")
        request_headers = {"Content-Type": "application/json"}
        request_headers.update(headers or {})
        req = Request(url, data=body, headers=request_headers, method="POST")

        context = self._ssl_context if url.startswith("https://") else None

        with urlopen(req, timeout=self.timeout, context=context) as resp:
            raw = resp.read().decode("utf-8")
            return json.loads(raw) if raw else {}

    def send_metrics(self, metrics: List[Dict[str, Any]], token: Optional[str] = None) -> Dict[str, Any]:
        """Ship one batch of wire dicts. An empty batch is not sent."""
        if not metrics:
            return {"received": 0, "inserted": 0}

        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return self.post_json("/api/metrics", {"metrics": metrics}, headers)
