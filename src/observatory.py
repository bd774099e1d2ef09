"""OrderDesk Observatory — live view of the aftersales message flow.

Serves Protean's Observatory dashboard, Prometheus metrics and REST API for
the event pipeline that drives notification dispatch and the complaint queue
when the aftersales domain runs with asynchronous processing.

Usage:
    uvicorn src.observatory:app --host 0.0.0.0 --port 9000
"""

from aftersales.domain import aftersales
from protean.server.observatory import create_observatory_app

aftersales.init()

app = create_observatory_app(
    domains=[aftersales],
    title="OrderDesk Observatory",
)
