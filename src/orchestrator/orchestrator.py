# src/orchestrator/orchestrator.py — v2
"""Insight request orchestrator — cache, budget, pacing and fallback per request.

For every request that would otherwise hit the metered AI provider:

  1. Fingerprint the descriptor
  2. Serve a cached answer if one is fresh (no quota, no waiting)
  3. Degrade to fallback content at once if the daily budget is spent
  4. Wait for a rate-limiter slot, then re-check the budget
  5. Invoke the provider under a timeout
     - success: cache the text (unless the plan is not cacheable),
       count the call against the budget, return it as live
     - any failure: return fallback content; nothing is cached and the
       budget is not charged

Provider failures never escape ``run``; only a fingerprinting error on
malformed params propagates.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING

from agrosight.cache.fingerprint import FingerprintError, compute_fingerprint
from agrosight.cache.memory_store import MemoryCacheStore
from agrosight.config.settings import Settings
from agrosight.core.models import InsightResult, RequestDescriptor
from agrosight.fallback.provider import FallbackProvider
from agrosight.limits.dispatch_gate import DispatchGate
from agrosight.limits.quota_tracker import QuotaTracker
from agrosight.limits.rate_limiter import RateLimiter
from agrosight.llm.errors import EmptyResponseError, ProviderTimeout, classify_error
from agrosight.logging.context import set_request_context
from agrosight.prompts.builder import PromptBuilder, ProviderCall
from agrosight.tracking.call_logger import CallLogger
from agrosight.tracking.models import UsageStats
from agrosight.tracking.usage import build_usage_stats

if TYPE_CHECKING:
    from agrosight.cache.base_cache_store import BaseCacheStore
    from agrosight.llm.base_client import BaseLLMClient
    from agrosight.llm.models import LLMResponse

logger = logging.getLogger(__name__)


class InsightOrchestrator:
    """Serves insight requests from cache, the live provider, or fallback.

    One instance owns the process-wide cache, quota tracker and rate
    limiter; share it between every caller that should draw on the same
    budget.

    Args:
        client: Provider client invoked for live answers.
        settings: Tuning values. Loaded from .env if None.
        cache: Cache store. Defaults to an in-memory TTL store.
        quota: Daily budget tracker.
        rate_limiter: Admission pacing for outbound calls.
        fallback: Degraded content provider.
        prompt_builder: Descriptor → provider call planner.
        call_logger: Optional sink for per-run records.
    """

    def __init__(
        self,
        client: BaseLLMClient,
        settings: Settings | None = None,
        cache: BaseCacheStore | None = None,
        quota: QuotaTracker | None = None,
        rate_limiter: RateLimiter | None = None,
        fallback: FallbackProvider | None = None,
        prompt_builder: PromptBuilder | None = None,
        call_logger: CallLogger | None = None,
    ) -> None:
        settings = settings or Settings()
        self._client = client
        self._settings = settings
        self._cache = cache or MemoryCacheStore(ttl_seconds=settings.cache_ttl_seconds)
        self._quota = quota or QuotaTracker(max_calls=settings.max_daily_calls)
        self._rate_limiter = rate_limiter or RateLimiter(
            min_interval=settings.rate_limit_interval_s
        )
        self._fallback = fallback or FallbackProvider()
        self._prompts = prompt_builder or PromptBuilder(settings)
        self._call_logger = call_logger
        self._timeout = settings.provider_timeout_s
        self._serialize = settings.rate_limit_mode == "serialize"
        self._dispatch_gate = DispatchGate()
        self._manual_mode = settings.manual_mode

    # --- Request path ---

    async def run(self, descriptor: RequestDescriptor) -> InsightResult:
        """Resolve one request to a result. Never raises on provider failure.

        Raises:
            FingerprintError: If the descriptor params cannot be canonicalized.
        """
        fingerprint = compute_fingerprint(descriptor)
        set_request_context(descriptor.category, fingerprint)

        cached = self._cache.get(fingerprint)
        if cached is not None:
            logger.info(
                "Cache hit for %s", descriptor.category, extra={"source": "cache"}
            )
            return self._result(descriptor, fingerprint, cached, "cache")

        if self._quota.daily_limit_reached():
            return self._fallback_result(descriptor, fingerprint)

        call = self._prompts.plan(descriptor)
        if self._serialize:
            async with self._dispatch_gate:
                return await self._dispatch(descriptor, fingerprint, call)
        return await self._dispatch(descriptor, fingerprint, call)

    async def _dispatch(
        self, descriptor: RequestDescriptor, fingerprint: str, call: ProviderCall
    ) -> InsightResult:
        await self._rate_limiter.await_turn()

        # The budget may have been spent by calls admitted while we waited.
        if self._quota.daily_limit_reached():
            return self._fallback_result(descriptor, fingerprint)

        try:
            response = await self._invoke(call)
        except Exception as e:
            error_type = classify_error(e)
            logger.warning(
                "Provider call for %s failed: %s", descriptor.category, e,
                extra={"source": "fallback", "error_type": error_type},
            )
            return self._fallback_result(
                descriptor, fingerprint, error=f"{error_type}: {e}",
                error_type=error_type, variant=call.variant,
            )

        if call.cacheable:
            self._cache.put(fingerprint, response.content)
        self._quota.record_call()
        return self._result(
            descriptor, fingerprint, response.content, "live",
            response=response, variant=call.variant,
        )

    async def _invoke(self, call: ProviderCall) -> LLMResponse:
        """Invoke the provider once, bounded by the configured timeout."""
        try:
            async with asyncio.timeout(self._timeout):
                response = await self._client.complete(
                    messages=call.messages,
                    system=call.system,
                    max_tokens=call.max_tokens,
                    temperature=call.temperature,
                )
        except TimeoutError as e:
            raise ProviderTimeout(
                f"Provider did not answer within {self._timeout:.1f}s"
            ) from e
        if not isinstance(response.content, str) or not response.content.strip():
            raise EmptyResponseError("Provider returned empty text")
        return response

    def _fallback_result(
        self,
        descriptor: RequestDescriptor,
        fingerprint: str,
        error: str | None = None,
        error_type: str | None = None,
        variant: str | None = None,
    ) -> InsightResult:
        text = self._fallback.fallback_for(descriptor)
        return self._result(
            descriptor, fingerprint, text, "fallback",
            error=error, error_type=error_type, variant=variant,
        )

    def _result(
        self,
        descriptor: RequestDescriptor,
        fingerprint: str,
        text: str,
        source: str,
        error: str | None = None,
        error_type: str | None = None,
        response: LLMResponse | None = None,
        variant: str | None = None,
    ) -> InsightResult:
        if self._call_logger is not None:
            self._call_logger.record(
                category=descriptor.category,
                fingerprint=fingerprint,
                source=source,
                response=response,
                variant=variant,
                error_type=error_type,
            )
        return InsightResult(
            category=descriptor.category,
            text=text,
            source=source,
            fingerprint=fingerprint,
            error=error,
        )

    def degraded(
        self, descriptor: RequestDescriptor, error: str | None = None
    ) -> InsightResult:
        """Fallback result for a request that could not be run at all."""
        try:
            fingerprint = compute_fingerprint(descriptor)
        except FingerprintError:
            fingerprint = f"{descriptor.category}:unfingerprintable"
        return self._fallback_result(
            descriptor, fingerprint, error=error, error_type="unknown"
        )

    # --- Dispatch gate ---

    @property
    def manual_mode(self) -> bool:
        return self._manual_mode

    def set_manual_mode(self, enabled: bool) -> None:
        self._manual_mode = enabled

    def should_dispatch(self) -> bool:
        """False while manual mode asks callers to defer requests themselves."""
        return not self._manual_mode

    # --- Diagnostics surface ---

    def cache_size(self) -> int:
        return self._cache.size()

    def daily_calls(self) -> int:
        return self._quota.daily_calls()

    def max_calls(self) -> int:
        return self._quota.max_calls

    def remaining_calls(self) -> int:
        return self._quota.remaining()

    def can_make_call(self) -> bool:
        return self._quota.remaining() > 0

    def usage(self) -> UsageStats:
        """Live snapshot for the usage panel."""
        remaining = self.remaining_calls()
        return build_usage_stats(
            cache_size=self.cache_size(),
            daily_calls=self.daily_calls(),
            max_calls=self.max_calls(),
            remaining_calls=remaining,
            can_make_call=remaining > 0,
        )

    def clear_cache(self, reset_quota: bool = False) -> str:
        """Drop every cached answer; optionally zero today's call count too.

        Returns:
            A message carrying the stats from before the clear.
        """
        previous = {
            "cacheSize": self._cache.size(),
            "dailyCalls": self._quota.daily_calls(),
            "maxCalls": self._quota.max_calls,
        }
        self._cache.clear()
        if reset_quota:
            self._quota.reset()
        return f"Cache cleared. Previous stats: {json.dumps(previous)}"
