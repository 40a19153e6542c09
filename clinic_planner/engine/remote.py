"""HTTP client for the remote planning optimizer."""

from __future__ import annotations

import json
import logging
import os
import socket
import urllib.error
import urllib.request
from typing import Any, Callable, Dict

from clinic_planner.config import OptimizerConfig
from clinic_planner.errors import UpstreamFailure

from .base import Optimizer, OptimizerRequest, OptimizerResponse

logger = logging.getLogger(__name__)

Opener = Callable[..., Any]


class HttpOptimizer(Optimizer):
    """POST the request as JSON and parse the JSON response. No retries."""

    name = "remote optimizer"

    def __init__(self, cfg: OptimizerConfig, opener: Opener | None = None):
        self.cfg = cfg
        self._open = opener or urllib.request.urlopen

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        api_key = os.environ.get(self.cfg.api_key_env)
        if api_key:
            headers["X-API-Key"] = api_key
        return headers

    def optimize(self, request: OptimizerRequest) -> OptimizerResponse:
        payload = request.to_payload()
        logger.info(
            "Calling optimizer for %d date(s), %d flexible override(s)",
            len(payload["dates"]),
            len(payload["flexible_overrides"]),
        )
        http_request = urllib.request.Request(
            self.cfg.url,
            data=json.dumps(payload).encode("utf-8"),
            headers=self._headers(),
            method="POST",
        )
        try:
            with self._open(http_request, timeout=self.cfg.timeout_sec) as resp:
                body = resp.read().decode("utf-8")
        except urllib.error.HTTPError as e:
            logger.error("Optimizer returned HTTP %s", e.code)
            raise UpstreamFailure(self.name, f"HTTP {e.code}: {e.reason}") from e
        except (urllib.error.URLError, socket.timeout, TimeoutError) as e:
            logger.error("Optimizer unreachable: %s", e)
            raise UpstreamFailure(self.name, f"unreachable: {e}") from e

        try:
            response = OptimizerResponse.from_payload(json.loads(body))
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamFailure(self.name, f"invalid response: {e}") from e
        logger.info("Optimizer returned %d assignment(s)", len(response.assignments))
        return response
