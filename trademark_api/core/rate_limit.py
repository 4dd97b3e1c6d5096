"""Rate limit configuration wiring.

Quota tiers are read from settings once and handed to the gate at
construction. Nothing here is cached at module level, so tests can build
gates with tiny windows side by side with the application's own.

Default tiers, evaluated tightest first:
- minute: fixed window, 3 requests per 60 seconds
- hour: token bucket, 20 per hour refill, burst of 10
- day: fixed window, 50 per 86400 seconds

A tier configured with rate 0 is disabled. Disabling hour and day leaves the
single per-minute tier.
"""

from __future__ import annotations

import time
from typing import Callable

from trademark_api.adapters.rate_limit.base import AbstractQuotaStore, QuotaPolicy
from trademark_api.adapters.rate_limit.in_memory import InMemoryQuotaStore
from trademark_api.core.config import AppSettings
from trademark_api.services.quota_ledger import QuotaLedger
from trademark_api.services.rate_limit_gate import RateLimitGate

MINUTE = 60.0
HOUR = 60 * MINUTE
DAY = 24 * HOUR

TIER_PERIODS: dict[str, float] = {
    "minute": MINUTE,
    "hour": HOUR,
    "day": DAY,
}


def build_quota_policies(app_settings: AppSettings) -> tuple[QuotaPolicy, ...]:
    """Translate ``APP_RATE_LIMIT_*`` settings into quota policies.

    Args:
        app_settings: Application settings.

    Returns:
        Policies in evaluation order; empty when rate limiting is disabled.
    """

    if not app_settings.rate_limit_enabled:
        return ()

    policies: list[QuotaPolicy] = []
    for tier, period in TIER_PERIODS.items():
        rate = getattr(app_settings, f"rate_limit_{tier}_rate")
        if rate == 0:
            continue
        policies.append(
            QuotaPolicy(
                name=tier,
                kind=getattr(app_settings, f"rate_limit_{tier}_kind"),
                rate=rate,
                period_seconds=period,
                capacity=getattr(app_settings, f"rate_limit_{tier}_capacity"),
            )
        )
    return tuple(policies)


def create_rate_limit_gate(
    app_settings: AppSettings,
    *,
    store: AbstractQuotaStore | None = None,
    clock: Callable[[], float] = time.time,
) -> RateLimitGate:
    """Build a gate over the configured tiers.

    Args:
        app_settings: Application settings.
        store: Quota state store; a fresh in-memory store by default.
        clock: Time source returning UNIX seconds.
    """

    policies = build_quota_policies(app_settings)
    ledger = QuotaLedger(
        store if store is not None else InMemoryQuotaStore(), policies, clock=clock
    )
    return RateLimitGate(ledger, order=[p.name for p in policies])
