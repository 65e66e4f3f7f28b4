"""
BeerBot decision engine (BlackBox)
----------------------------------
Pure order-decision functions for one role of the four-stage Beer Game chain.

Design goals:
- Deterministic (no RNG). Same history in -> same order out.
- Stateless across calls: the caller sends the whole `weeks` history every round,
  so nothing is cached here. Costs a resend per round, never goes stale.
- BlackBox only: each role decides from its own fields and its own past orders.

How the pipeline controller works:
1) Forecast demand as the integer moving average of `incoming_orders`.
2) Estimate what is still in transit by walking the role's own orders against
   `arriving_shipments`, never letting the running total drop below zero.
3) Order up to forecast * (lead time + 1) from the current inventory position
   (on hand - backlog + in transit). Clamp to non-negative integers.

The older "simple" rule (forecast + backlog + safety - inventory) is kept as a
separate policy and can be selected by name.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

# ===================== Constants =====================
LEAD_TIME = 2          # weeks between placing an order and receiving it
FALLBACK_ORDER = 10    # used when there is no history yet
DEFAULT_POLICY = "pipeline"

ROLES = ("retailer", "wholesaler", "distributor", "factory")


class UnknownPolicyError(KeyError):
    pass


class SettingsError(ValueError):
    pass


@dataclass(frozen=True)
class RoleObservation:
    """One week of one role's state as reported by the simulator."""
    inventory: int = 0
    backlog: int = 0
    incoming_orders: int = 0
    arriving_shipments: int = 0

    @classmethod
    def from_dict(cls, role_state: Optional[Dict[str, Any]]) -> "RoleObservation":
        if not role_state:
            return cls()
        # null fields decode as 0
        return cls(
            inventory=int(role_state.get("inventory") or 0),
            backlog=int(role_state.get("backlog") or 0),
            incoming_orders=int(role_state.get("incoming_orders") or 0),
            arriving_shipments=int(role_state.get("arriving_shipments") or 0),
        )


# ===================== History extraction =====================
def extract_role_history(weeks: list, role: str) -> List[RoleObservation]:
    """Return one observation per week for `role`, zeros where the role is missing."""
    return [RoleObservation.from_dict((w.get("roles") or {}).get(role)) for w in weeks]


def extract_role_orders(weeks: list, role: str) -> List[int]:
    """Orders the role placed in each week; 0 where the week has no entry."""
    return [int((w.get("orders") or {}).get(role) or 0) for w in weeks]


# ===================== Forecast =====================
def forecast(history: Sequence[RoleObservation], window: int) -> int:
    """Integer moving average of incoming orders over the last `window` weeks.

    Only the weeks that exist are averaged, so a 2-week history with window 5
    averages 2 values. Returns 0 for an empty history.
    """
    if window < 1:
        window = 1
    recent = history[-window:]
    if not recent:
        return 0
    return sum(obs.incoming_orders for obs in recent) // len(recent)


# ===================== Policies =====================
def pipeline_in_transit(history: Sequence[RoleObservation], order_history: Sequence[int]) -> int:
    """Approximate quantity ordered but not yet received.

    The running total is clamped to zero after every week, not just at the end.
    """
    pipeline = 0
    for i, obs in enumerate(history):
        ordered = order_history[i] if i < len(order_history) else 0
        pipeline = max(0, pipeline + ordered - obs.arriving_shipments)
    return pipeline


def decide(
    history: Sequence[RoleObservation],
    order_history: Sequence[int],
    safety_stock: int,
    window: int,
    lead_time: int = LEAD_TIME,
) -> int:
    """Order-up-to decision on inventory position, including the pipeline.

    `safety_stock` is part of the shared policy signature but does not enter
    this formula; the (lead_time + 1) cover plays that role.
    """
    if not history:
        return FALLBACK_ORDER
    last = history[-1]

    fc = forecast(history, window)
    pipeline = pipeline_in_transit(history, order_history)

    target_position = fc * (lead_time + 1)
    inventory_position = last.inventory - last.backlog + pipeline

    return max(0, target_position - inventory_position)


def decide_simple(history: Sequence[RoleObservation], safety_stock: int, window: int) -> int:
    """Cover forecast + backlog + safety stock from what is on hand. No pipeline."""
    if not history:
        return FALLBACK_ORDER
    last = history[-1]

    order = forecast(history, window) + last.backlog + safety_stock - last.inventory
    return max(0, order)


class Policy(Protocol):
    def __call__(
        self,
        history: Sequence[RoleObservation],
        order_history: Sequence[int],
        safety_stock: int,
        window: int,
    ) -> int: ...


def _simple_policy(
    history: Sequence[RoleObservation],
    order_history: Sequence[int],
    safety_stock: int,
    window: int,
) -> int:
    return decide_simple(history, safety_stock, window)


POLICIES: Dict[str, Policy] = {
    "pipeline": decide,
    "simple": _simple_policy,
}


def get_policy(name: str) -> Policy:
    try:
        return POLICIES[name]
    except KeyError:
        raise UnknownPolicyError(
            f"unknown policy {name!r}, expected one of {sorted(POLICIES)}"
        ) from None


def cap_order(order: int, max_order: int) -> int:
    """Clamp to `max_order`; a cap of 0 means no cap."""
    if max_order > 0 and order > max_order:
        return max_order
    return order


# ===================== Tuning =====================
@dataclass(frozen=True)
class TuningParameters:
    safety_stock: int = 10
    ma_window: int = 4
    max_order: int = 0
    policy: str = DEFAULT_POLICY

    def validate(self) -> "TuningParameters":
        if self.ma_window < 1:
            raise SettingsError("MA_WINDOW must be >= 1")
        if self.safety_stock < 0:
            raise SettingsError("SAFETY_STOCK must be >= 0")
        if self.max_order < 0:
            raise SettingsError("MAX_ORDER must be >= 0")
        if self.policy not in POLICIES:
            raise SettingsError(f"POLICY must be one of {sorted(POLICIES)}, got {self.policy!r}")
        return self


# ===================== Round =====================
def decide_round(weeks: list, params: Optional[TuningParameters] = None) -> Dict[str, int]:
    """Orders for all four roles from an already decoded `weeks` list."""
    if params is None:
        params = TuningParameters()

    policy = get_policy(params.policy)
    logger.info("round policy=%s weeks_len=%d", params.policy, len(weeks))

    orders: Dict[str, int] = {}
    for role in ROLES:
        history = extract_role_history(weeks, role)
        order_history = extract_role_orders(weeks, role)
        o = policy(history, order_history, params.safety_stock, params.ma_window)
        orders[role] = cap_order(o, params.max_order)

        last = history[-1] if history else RoleObservation()
        logger.debug("role=%s inv=%d back=%d in_orders=%d arriving=%d -> order=%d",
                     role, last.inventory, last.backlog, last.incoming_orders,
                     last.arriving_shipments, orders[role])
    return orders
