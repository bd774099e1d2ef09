import json

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def aftersales_bed():
    from aftersales.domain import aftersales

    bed = DomainFixture(aftersales)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(aftersales_bed):
    with aftersales_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def dispatcher():
    """A fresh FakeDispatcher for every test."""
    from aftersales.notification import reset_dispatcher, set_dispatcher
    from aftersales.notification.fake_dispatcher import FakeDispatcher

    fake = FakeDispatcher()
    set_dispatcher(fake)
    yield fake
    reset_dispatcher()


DEFAULT_ITEMS = [
    {"product_id": "prod-kb", "name": "Mechanical Keyboard", "price": 120.0, "quantity": 1},
    {"product_id": "prod-mp", "name": "Mouse Pad XL", "price": 15.5, "quantity": 2},
]


@pytest.fixture()
def make_order():
    """Place an order through the command bus and advance it to ``status``."""
    from protean import current_domain

    from aftersales.order.fulfillment import MarkOrderDelivered, MarkOrderProcessing, MarkOrderShipped
    from aftersales.order.placement import PlaceOrder

    steps = {
        "processing": [MarkOrderProcessing],
        "shipped": [MarkOrderProcessing, MarkOrderShipped],
        "delivered": [MarkOrderProcessing, MarkOrderShipped, MarkOrderDelivered],
    }

    def _make(
        status="placed",
        payment_method="upi",
        payment_status="paid",
        customer_id="cust-001",
        items=None,
    ):
        order_id = current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                customer_name="Asha Rao",
                customer_email="asha@example.com",
                customer_phone="+91-98450-00000",
                payment_method=payment_method,
                payment_status=payment_status,
                items=json.dumps(items or DEFAULT_ITEMS),
            ),
            asynchronous=False,
        )
        for command_cls in steps.get(status, []):
            current_domain.process(command_cls(order_id=order_id), asynchronous=False)
        return order_id

    return _make


@pytest.fixture()
def engine():
    from aftersales.complaint.engine import ResolutionEngine

    return ResolutionEngine()


@pytest.fixture()
def make_case(make_order, engine):
    """File a complaint on a fresh delivered order and advance it along the happy path.

    ``stage`` is one of: investigating, resolved_true, resolved_false,
    pickup_scheduled, picked_up.
    """
    from datetime import UTC, datetime, timedelta

    def _make(complaint_type="damaged", stage="investigating", payment_method="upi"):
        order_id = make_order(status="delivered", payment_method=payment_method)
        case = engine.file_complaint(
            order_id=order_id,
            user_id="cust-001",
            complaint_type=complaint_type,
            description="The keyboard arrived with a cracked case.",
            evidence_images=["https://cdn.example.com/evidence/1.jpg"],
        )
        if stage == "resolved_false":
            return engine.resolve_as_false(str(case.id), notes="Photos show no damage")
        if stage == "investigating":
            return case
        case = engine.resolve_as_true(str(case.id), notes="Courier confirmed damage")
        if stage == "resolved_true":
            return case
        case = engine.schedule_pickup(str(case.id), pickup_date=datetime.now(UTC) + timedelta(days=2))
        if stage == "pickup_scheduled":
            return case
        return engine.mark_picked_up(str(case.id))

    return _make
