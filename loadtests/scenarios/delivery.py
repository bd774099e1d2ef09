"""Delivery attempt load test scenarios.

Ships an order and fails every delivery attempt until the order is sent back
to the provider, then reads the customer-facing status.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import customer_id, delivery_date, failure_reason, order_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OrderState

MAX_FAILED_ATTEMPTS = 3


class FailedDeliveryJourney(SequentialTaskSet):
    """Place -> Ship -> (Schedule -> Fail) x3 -> Read Status."""

    def on_start(self):
        self.state = OrderState(customer_id=customer_id())

    @task
    def place_and_ship(self):
        resp = self.client.post("/orders", json=order_data(self.state.customer_id), name="POST /orders")
        if resp.status_code != 201:
            self.interrupt()
        self.state.order_id = resp.json()["order_id"]
        self.client.put(f"/orders/{self.state.order_id}/processing", name="PUT /orders/{id}/processing")
        self.client.put(f"/orders/{self.state.order_id}/shipped", name="PUT /orders/{id}/shipped")
        self.state.current_status = "shipped"

    @task
    def fail_attempts(self):
        for day in range(1, MAX_FAILED_ATTEMPTS + 1):
            with self.client.post(
                f"/orders/{self.state.order_id}/delivery-attempts",
                json={"scheduled_date": delivery_date(day)},
                catch_response=True,
                name="POST /orders/{id}/delivery-attempts",
            ) as resp:
                if resp.status_code != 201:
                    resp.failure(f"Schedule attempt failed: {resp.status_code} — {extract_error_detail(resp)}")
                    self.interrupt()
                self.state.attempt_number = resp.json()["attempt_number"]

            self.client.put(
                f"/orders/{self.state.order_id}/delivery-attempts/{self.state.attempt_number}",
                json={"status": "failed", "failure_reason": failure_reason()},
                name="PUT /orders/{id}/delivery-attempts/{n}",
            )

    @task
    def read_status(self):
        with self.client.get(
            f"/orders/{self.state.order_id}/status",
            catch_response=True,
            name="GET /orders/{id}/status",
        ) as resp:
            if resp.status_code != 200 or ("Returning to Provider" not in resp.text and "COD" not in resp.text):
                resp.failure(f"Unexpected status: {resp.text[:200]}")
        self.interrupt()


class DeliveryUser(HttpUser):
    wait_time = between(1, 3)
    tasks = [FailedDeliveryJourney]
