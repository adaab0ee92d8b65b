"""
consolidation/overload/detection.py
────────────────────────────────────
Run an overload policy over every host of a scheduling tick.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from consolidation.shared.models import HostView, OverloadPolicy

logger = logging.getLogger(__name__)


def find_overloaded_hosts(policy: OverloadPolicy, hosts: Iterable[HostView]) -> List[str]:
    """
    Evaluate `policy` once per host and return the ids of overloaded hosts.

    Order follows `hosts`. Configuration errors raised by the policy
    (MissingFallbackError, InvalidConfigurationError) propagate unchanged.
    """
    overloaded: List[str] = []
    checked = 0
    for host in hosts:
        checked += 1
        if policy.is_overloaded(host):
            overloaded.append(host.host_id)

    if overloaded:
        logger.info(
            "%d of %d hosts overloaded: %s",
            len(overloaded), checked, ", ".join(overloaded),
        )
    else:
        logger.debug("No overloaded hosts among %d checked.", checked)
    return overloaded
