# Client for the Pollinations text/image HTTP endpoints.
# fetch(attempt) returns a decoded UpstreamResponse or raises UpstreamTransportError.

from __future__ import annotations

from typing import Optional

import requests

from fortec_gateway.errors import UpstreamTransportError
from fortec_gateway.logger import get_logger
from ..interpret import decode_response
from ..types import UpstreamAttempt, UpstreamResponse

logger = get_logger("upstream")


class PollinationsClient:
    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def fetch(self, attempt: UpstreamAttempt) -> UpstreamResponse:
        try:
            resp = self.session.get(
                attempt.url,
                headers={"Accept": attempt.accept},
                timeout=attempt.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Upstream %s call for %s failed: %s", attempt.endpoint_shape.value, attempt.target_model, e)
            raise UpstreamTransportError(f"upstream call failed for {attempt.target_model}", model=attempt.target_model) from e
        return decode_response(attempt.endpoint_shape, resp.content, resp.text)

    def probe(self, url: str, timeout: float) -> bool:
        """Best-effort existence check; failures are logged and reported as False."""
        try:
            resp = self.session.get(url, timeout=timeout)
            resp.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.info("Image preview check failed, continuing: %s", e)
            return False

    def close(self):
        self.session.close()
