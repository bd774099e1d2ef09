from protean.fields import DateTime, Float, Identifier, String

from aftersales.domain import aftersales


@aftersales.event(part_of="StoreCredit")
class StoreCreditIssued:
    __version__ = "v1"

    credit_id = Identifier(required=True)
    code = String(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    refund_id = Identifier(required=True)
    complaint_id = Identifier()
    amount = Float(required=True)
    expires_at = DateTime(required=True)
    issued_at = DateTime(required=True)
