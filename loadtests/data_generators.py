"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the API's Pydantic request schemas.
"""

import random
import uuid
from datetime import UTC, date, datetime, timedelta

from faker import Faker

fake = Faker()

PAYMENT_METHODS = ["cod", "upi", "card", "netbanking"]
COMPLAINT_TYPES = ["not_received", "damaged", "return", "replace", "warranty"]
FAILURE_REASONS = ["receiver_absent", "phone_switched_off", "refused", "wrong_address", "other"]


def customer_id() -> str:
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def order_item() -> dict:
    return {
        "product_id": f"prod-{uuid.uuid4().hex[:6]}",
        "name": fake.catch_phrase()[:255],
        "price": round(random.uniform(5.0, 300.0), 2),
        "quantity": random.randint(1, 3),
    }


def order_data(customer: str | None = None, payment_method: str | None = None) -> dict:
    """PlaceOrderRequest payload. Prepaid methods are marked paid."""
    method = payment_method or random.choice(PAYMENT_METHODS)
    return {
        "customer_id": customer or customer_id(),
        "customer_name": fake.name()[:255],
        "customer_email": fake.email(),
        "customer_phone": fake.msisdn()[:15],
        "payment_method": method,
        "payment_status": "pending" if method == "cod" else "paid",
        "delivery_notes": fake.sentence(),
        "items": [order_item() for _ in range(random.randint(1, 4))],
    }


def complaint_data(order_id: str, customer: str, complaint_type: str | None = None) -> dict:
    return {
        "order_id": order_id,
        "user_id": customer,
        "complaint_type": complaint_type or random.choice(COMPLAINT_TYPES[1:]),
        "description": fake.paragraph(nb_sentences=3),
        "evidence_images": [fake.image_url() for _ in range(random.randint(0, 3))],
    }


def pickup_data() -> dict:
    pickup = datetime.now(UTC) + timedelta(days=random.randint(1, 5))
    return {"pickup_date": pickup.isoformat(), "admin_notes": fake.sentence()}


def delivery_date(days_ahead: int = 1) -> str:
    return (date.today() + timedelta(days=days_ahead)).isoformat()


def failure_reason() -> str:
    return random.choice(FAILURE_REASONS)
