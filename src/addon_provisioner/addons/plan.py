"""Plan name reconciliation between configured and remote add-on plans."""

from __future__ import annotations

PLAN_TIER_SEPARATOR = ':'


def reconcile_plan(remote_plan: str, configured_plan: str | None) -> str:
    """Return the plan name to persist after reading an add-on.

    A plan configured as a bare service slug (``heroku-postgresql``) is
    satisfied by whatever tier the backend picked
    (``heroku-postgresql:standard-0``), so the remote tier is dropped.
    When nothing is configured, or the configuration already names a tier,
    the remote plan is kept as-is.
    """
    if not configured_plan or PLAN_TIER_SEPARATOR in configured_plan:
        return remote_plan
    slug, _, _ = remote_plan.partition(PLAN_TIER_SEPARATOR)
    return slug
