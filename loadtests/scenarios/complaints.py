"""Complaint resolution load test scenarios.

A delivered order is complained about, upheld, collected and remedied with
either a replacement order or a refund. A second journey races two admins on
the same case to exercise the version check.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import complaint_data, customer_id, order_data, pickup_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ComplaintState


class _DeliveredOrderMixin:
    def _deliver_new_order(self):
        self.state.customer_id = customer_id()
        resp = self.client.post("/orders", json=order_data(self.state.customer_id), name="POST /orders")
        if resp.status_code != 201:
            self.interrupt()
        self.state.order_id = resp.json()["order_id"]
        for step in ("processing", "shipped", "delivered"):
            self.client.put(f"/orders/{self.state.order_id}/{step}", name=f"PUT /orders/{{id}}/{step}")


class ComplaintResolutionJourney(_DeliveredOrderMixin, SequentialTaskSet):
    """Deliver -> File -> Approve -> Schedule Pickup -> Picked Up -> Remedy."""

    def on_start(self):
        self.state = ComplaintState(remedy=random.choice(["replacement", "refund"]))
        self._deliver_new_order()

    def _complaint_call(self, method, path, name, json=None):
        with self.client.request(method, path, json=json, catch_response=True, name=name) as resp:
            if resp.status_code in (200, 201):
                body = resp.json()
                self.state.complaint_id = body["complaint_id"]
                self.state.version = body["version"]
            else:
                resp.failure(f"{name} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def file_complaint(self):
        payload = complaint_data(self.state.order_id, self.state.customer_id)
        self._complaint_call("POST", "/complaints", "POST /complaints", json=payload)

    @task
    def approve(self):
        self._complaint_call(
            "PUT",
            f"/complaints/{self.state.complaint_id}/approve",
            "PUT /complaints/{id}/approve",
            json={"notes": "Verified against courier photos", "expected_version": self.state.version},
        )

    @task
    def schedule_pickup(self):
        payload = {**pickup_data(), "expected_version": self.state.version}
        self._complaint_call(
            "PUT", f"/complaints/{self.state.complaint_id}/pickup", "PUT /complaints/{id}/pickup", json=payload
        )

    @task
    def picked_up(self):
        self._complaint_call(
            "PUT",
            f"/complaints/{self.state.complaint_id}/picked-up",
            "PUT /complaints/{id}/picked-up",
            json={"expected_version": self.state.version},
        )

    @task
    def remedy(self):
        if self.state.remedy == "replacement":
            self._complaint_call(
                "POST",
                f"/complaints/{self.state.complaint_id}/replacement",
                "POST /complaints/{id}/replacement",
                json={"expected_version": self.state.version},
            )
        else:
            self._complaint_call(
                "POST",
                f"/complaints/{self.state.complaint_id}/refund",
                "POST /complaints/{id}/refund",
                json={
                    "refund_method": random.choice(["upi", "bank", "gift_card"]),
                    "expected_version": self.state.version,
                },
            )

    @task
    def done(self):
        self.interrupt()


class DoubleClickReplacementJourney(_DeliveredOrderMixin, SequentialTaskSet):
    """Two replacement requests for the same case: exactly one may succeed."""

    def on_start(self):
        self.state = ComplaintState()
        self._deliver_new_order()

    @task
    def prepare_case(self):
        resp = self.client.post(
            "/complaints",
            json=complaint_data(self.state.order_id, self.state.customer_id, "damaged"),
            name="POST /complaints",
        )
        self.state.complaint_id = resp.json()["complaint_id"]
        base = f"/complaints/{self.state.complaint_id}"
        self.client.put(f"{base}/approve", json={}, name="PUT /complaints/{id}/approve")
        self.client.put(f"{base}/pickup", json=pickup_data(), name="PUT /complaints/{id}/pickup")
        resp = self.client.put(f"{base}/picked-up", json={}, name="PUT /complaints/{id}/picked-up")
        self.state.version = resp.json()["version"]

    @task
    def race(self):
        statuses = []
        for _ in range(2):
            with self.client.post(
                f"/complaints/{self.state.complaint_id}/replacement",
                json={"expected_version": self.state.version},
                catch_response=True,
                name="POST /complaints/{id}/replacement (race)",
            ) as resp:
                statuses.append(resp.status_code)
                if resp.status_code in (200, 409):
                    resp.success()
        if sorted(statuses) != [200, 409]:
            self.user.environment.events.request.fire(
                request_type="CHECK",
                name="replacement is one-shot",
                response_time=0,
                response_length=0,
                exception=AssertionError(f"Unexpected statuses {statuses}"),
            )
        self.interrupt()


class ComplaintUser(HttpUser):
    wait_time = between(1, 3)
    tasks = {ComplaintResolutionJourney: 4, DoubleClickReplacementJourney: 1}
