"""BDD tests for complaint resolution."""

from datetime import UTC, datetime, timedelta

from aftersales.errors import Conflict, InvalidTransition
from aftersales.order.order import Order
from protean.utils.globals import current_domain
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/complaint_resolution.feature")


@when(parsers.cfparse('the customer files a "{complaint_type}" complaint'), target_fixture="case")
def file_complaint(engine, order_id, complaint_type):
    return engine.file_complaint(
        order_id=order_id,
        user_id="cust-001",
        complaint_type=complaint_type,
        description="Something went wrong with my order",
    )


@when("the admin resolves the complaint as true", target_fixture="case")
def resolve_as_true(engine, case):
    return engine.resolve_as_true(str(case.id), notes="Verified with courier")


@when("the admin resolves the complaint as false", target_fixture="case")
def resolve_as_false(engine, case):
    return engine.resolve_as_false(str(case.id), notes="Evidence does not match")


@when("the admin tries to resolve the complaint as true")
def try_resolve_as_true(engine, case, error):
    try:
        engine.resolve_as_true(str(case.id))
    except InvalidTransition as exc:
        error["exc"] = exc


@when("the admin schedules a pickup", target_fixture="case")
def schedule_pickup(engine, case):
    return engine.schedule_pickup(str(case.id), pickup_date=datetime.now(UTC) + timedelta(days=1))


@when("the courier collects the item", target_fixture="case")
def collect_item(engine, case):
    return engine.mark_picked_up(str(case.id))


@when("the admin creates a replacement order", target_fixture="case")
def create_replacement(engine, case):
    return engine.create_replacement_order(str(case.id))


@when("the admin tries to create another replacement order")
def try_create_replacement(engine, case, error):
    try:
        engine.create_replacement_order(str(case.id))
    except Conflict as exc:
        error["exc"] = exc


@when(parsers.cfparse('the admin processes a "{refund_method}" refund'), target_fixture="case")
def process_refund(engine, case, refund_method):
    return engine.process_refund(str(case.id), refund_method=refund_method)


@when("admin A resolves the complaint as true at the loaded version")
def admin_a_resolves(engine, case):
    engine.resolve_as_true(str(case.id), expected_version=case._version)


@when("admin B resolves the complaint as false at the loaded version")
def admin_b_resolves(engine, case, error):
    try:
        engine.resolve_as_false(str(case.id), expected_version=case._version)
    except Conflict as exc:
        error["exc"] = exc


@then(parsers.cfparse('the complaint is "{status}"'))
def complaint_status_is(engine, case, status):
    assert engine.get(str(case.id)).investigation_status == status


@then(parsers.cfparse("an apology coupon for {percent:d} percent is issued"))
def coupon_issued(case, percent):
    assert case.coupon_code.startswith("SORRY")
    assert case.coupon_discount_percent == percent


@then("no coupon is issued")
def no_coupon(case):
    assert case.coupon_code is None


@then(parsers.cfparse('the complaint is resolved with "{resolution_type}"'))
def resolved_with(case, resolution_type):
    assert case.resolution_type == resolution_type


@then("a zero-amount replacement order exists")
def replacement_exists(case):
    replacement = current_domain.repository_for(Order).get(str(case.replacement_order_id))
    assert replacement.total_amount == 0.0
    assert replacement.parent_order_id == str(case.order_id)


@then("exactly one replacement order exists")
def exactly_one_replacement(order_id):
    replacements = current_domain.repository_for(Order)._dao.query.filter(parent_order_id=order_id).all().items
    assert len(replacements) == 1


@then(parsers.cfparse('the order complaint status is "{complaint_status}"'))
def order_complaint_status(order_id, complaint_status):
    assert current_domain.repository_for(Order).get(order_id).complaint_status == complaint_status
