"""Model fallback/retry dispatcher for the generateContent endpoint.

Attempts run over an ordered model queue. Transient statuses (404, 429, 500)
fail over to the next model without delay; once the queue is exhausted the
whole cycle restarts from the first model after ``cycle_delay_ms``, spending
one retry. Transport failures retry the same model after
``network_delay_ms``, also spending one retry. Any other non-2xx status is
terminal.
"""
from __future__ import annotations
import logging
from typing import Callable, Iterable

import httpx

from gemini_gateway.common.config import GatewayConfig
from gemini_gateway.common.schema import ConversationTurn, GenerationResult
from gemini_gateway.common.timing import wait
from gemini_gateway.upstream.contents import build_contents
from gemini_gateway.upstream.envelope import error_message
from gemini_gateway.upstream.errors import (
    UpstreamAPIError,
    UpstreamConnectionError,
    UpstreamFormatError,
)

LOGGER = logging.getLogger("gemini_gateway.dispatcher")

TRANSIENT_STATUSES = frozenset({404, 429, 500})


class ModelDispatcher:
    """Owns every upstream attempt for one logical generation request."""

    def __init__(
        self,
        config: GatewayConfig,
        client: httpx.Client,
        logger: logging.Logger | None = None,
        sleep: Callable[[int], None] = wait,
    ) -> None:
        self.config = config
        self.client = client
        self.logger = logger or LOGGER
        self.sleep = sleep
        self.timeout = httpx.Timeout(config.timeout_s, connect=config.connect_timeout_s)

    @property
    def model_queue(self) -> tuple[str, ...]:
        return self.config.model_queue

    def max_attempts(self, retries: int | None = None) -> int:
        """Upper bound on attempts for one ``generate`` call."""
        if retries is None:
            retries = self.config.max_retries
        return len(self.model_queue) * (retries + 1)

    def generate(
        self,
        prompt: str,
        history: Iterable[ConversationTurn] | None = None,
        model_index: int = 0,
        retries: int | None = None,
    ) -> GenerationResult:
        """
        Obtain a successful generateContent response.

        Args:
            prompt: Non-empty user prompt.
            history: Earlier conversation turns.
            model_index: Queue position to start from; clamped to 0 if out of range.
            retries: Full-cycle / network retries allowed (config default if None).

        Raises:
            UpstreamAPIError: non-transient status, or transient statuses after
                all models and retries are spent.
            UpstreamConnectionError: transport failure after all retries.
            UpstreamFormatError: 2xx response whose body is not JSON.
        """
        queue = self.model_queue
        if not 0 <= model_index < len(queue):
            model_index = 0
        retries_left = self.config.max_retries if retries is None else retries
        body = {"contents": build_contents(prompt, history)}

        attempt = 0
        while True:
            attempt += 1
            model = queue[model_index]
            fields = {"attempt": attempt, "model": model}

            try:
                r = self.client.post(
                    self.config.endpoint_for(model),
                    params={"key": self.config.api_key},
                    json=body,
                    timeout=self.timeout,
                )
            except httpx.TransportError as e:
                if retries_left > 0:
                    self.logger.warning(
                        "Network error calling %s (%s); retrying in %sms",
                        model, e, self.config.network_delay_ms,
                        extra={**fields, "outcome": "network_retry"},
                    )
                    self.sleep(self.config.network_delay_ms)
                    retries_left -= 1
                    continue
                self.logger.error(
                    "Network error calling %s: %s", model, e,
                    extra={**fields, "outcome": "failed"},
                )
                raise UpstreamConnectionError(str(e) or type(e).__name__) from e

            if r.is_success:
                try:
                    data = r.json()
                except ValueError as e:
                    self.logger.error(
                        "Upstream %s returned a non-JSON body", model,
                        extra={**fields, "outcome": "failed", "status": r.status_code},
                    )
                    raise UpstreamFormatError(f"Upstream {model} returned a non-JSON body") from e
                self.logger.info(
                    "Generated with %s", model,
                    extra={**fields, "outcome": "success", "status": r.status_code},
                )
                return GenerationResult(payload=data, model=model, attempts=attempt)

            try:
                data = r.json()
            except ValueError:
                data = None
            message = error_message(data, r.status_code)
            status_fields = {**fields, "status": r.status_code}

            if r.status_code in TRANSIENT_STATUSES:
                if model_index + 1 < len(queue):
                    self.logger.warning(
                        "%s issue (%s). Trying %s...", model, r.status_code, queue[model_index + 1],
                        extra={**status_fields, "outcome": "switch_model"},
                    )
                    model_index += 1
                    continue
                if retries_left > 0:
                    self.logger.warning(
                        "All models busy. Waiting %sms before restarting the queue",
                        self.config.cycle_delay_ms,
                        extra={**status_fields, "outcome": "cycle_wait"},
                    )
                    self.sleep(self.config.cycle_delay_ms)
                    model_index = 0
                    retries_left -= 1
                    continue

            self.logger.error(
                "Upstream error from %s: %s", model, message,
                extra={**status_fields, "outcome": "failed"},
            )
            raise UpstreamAPIError(message, r.status_code)
