"""Aftersales bounded context — Order lifecycle and complaint resolution.

Derives the customer-facing delivery status of an order, tracks delivery
attempts, and drives complaint cases from investigation through pickup to a
remedy (replacement order or refund). Coupons, refund requests, replacement
orders and notification intents are written in the same unit of work as the
case transition that authorises them. Uses CQRS because the workflows are
guarded state machines over current state.
"""

from protean.domain import Domain

from aftersales.utils.logging import configure_logging, get_logger

configure_logging(log_dir="logs", log_file_prefix="aftersales")

logger = get_logger(__name__)

aftersales = Domain(name="aftersales")
