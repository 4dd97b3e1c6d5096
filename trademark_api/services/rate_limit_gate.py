"""Multi-tier admission control.

The gate walks an ordered list of quotas and stops at the first rejection,
so a looser tier never loses capacity to a request a tighter tier already
blocked. Units consumed from earlier tiers before a rejection stay spent.
``check`` answers the same question without spending anything.
"""

from __future__ import annotations

import logging
from typing import Sequence

from trademark_api.adapters.rate_limit.base import AdmissionResult
from trademark_api.core.logging import hash_identifier
from trademark_api.services.quota_ledger import QuotaLedger

logger = logging.getLogger(__name__)


class RateLimitGate:
    """Admit or reject a client across several quota tiers.

    Attributes:
        order: Quota names in evaluation order.
    """

    def __init__(self, ledger: QuotaLedger, order: Sequence[str] | None = None) -> None:
        """Create a gate over ``ledger``.

        Args:
            ledger: Ledger holding the quota policies.
            order: Evaluation order; defaults to the ledger's policy order.

        Raises:
            ValueError: If ``order`` names a quota the ledger doesn't know or
                repeats one.
        """
        self._ledger = ledger
        resolved = tuple(order) if order is not None else tuple(ledger.policies)
        unknown = [name for name in resolved if name not in ledger.policies]
        if unknown:
            raise ValueError(f"unknown quotas in order: {unknown}")
        if len(set(resolved)) != len(resolved):
            raise ValueError("quota order must not repeat names")
        self.order = resolved

    def admit(self, key: str) -> AdmissionResult:
        """Consume one unit from every tier, in order, until one rejects.

        Args:
            key: Client identifier.

        Returns:
            ``AdmissionResult(ok=True)`` when every tier admitted, otherwise
            the first rejecting tier's result.
        """

        key_hash = hash_identifier(key)
        for quota_name in self.order:
            result = self._ledger.consume(quota_name, key)
            if not result.ok:
                logger.warning(
                    "rate_limit.exceeded",
                    extra={
                        "quota": quota_name,
                        "client_hash": key_hash,
                        "retry_after": result.retry_after,
                    },
                )
                return result

        logger.info(
            "rate_limit.allowed",
            extra={"client_hash": key_hash, "quotas": list(self.order)},
        )
        return AdmissionResult(ok=True)

    def check(self, key: str) -> AdmissionResult:
        """Evaluate every tier, in order, without consuming any units.

        Each tier is judged on its current state alone, so the answer is what
        ``admit`` would return if called right now.

        Args:
            key: Client identifier.

        Returns:
            ``AdmissionResult(ok=True)`` when every tier would admit, otherwise
            the first tier that would reject.
        """

        for quota_name in self.order:
            result = self._ledger.check(quota_name, key)
            if not result.ok:
                return result
        return AdmissionResult(ok=True)
