"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state. IDs returned by creation
endpoints are stored so follow-up requests can reference them.
"""

from dataclasses import dataclass


@dataclass
class OrderState:
    order_id: str | None = None
    customer_id: str | None = None
    attempt_number: int = 0
    current_status: str = "placed"


@dataclass
class ComplaintState:
    order_id: str | None = None
    customer_id: str | None = None
    complaint_id: str | None = None
    version: int | None = None
    remedy: str = "replacement"
