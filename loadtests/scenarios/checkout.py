"""Checkout and payment load test scenarios.

Stateful SequentialTaskSet journeys that place an order and drive its
redirect payment through the callback endpoints the gateway would hit.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    delivery_order_data,
    failure_message,
    partial_refund_amount,
    pg_token,
    pickup_order_data,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState


class _OrderJourney(SequentialTaskSet):
    def on_start(self):
        self.state = CheckoutState()

    def place_order(self, payload: dict, name: str):
        with self.client.post("/orders", json=payload, catch_response=True, name=name) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.order_id = body["id"]
                self.state.total_amount = body["total_amount"]
            else:
                resp.failure(f"Create order failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def ready(self):
        with self.client.post(
            "/payments/ready",
            json={"order_id": self.state.order_id},
            catch_response=True,
            name="POST /payments/ready",
        ) as resp:
            if resp.status_code == 200:
                self.state.tids.append(resp.json()["tid"])
                self.state.payment_status = "ready"
            else:
                resp.failure(f"Ready failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    def approve(self):
        with self.client.get(
            "/payments/success",
            params={"order_id": self.state.order_id, "pg_token": pg_token()},
            catch_response=True,
            name="GET /payments/success",
        ) as resp:
            if resp.status_code == 200:
                self.state.payment_status = "completed"
            else:
                resp.failure(f"Approval failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()


class PaidOrderJourney(_OrderJourney):
    """Place Delivery Order -> Ready -> Success -> Status -> Partial Refund.

    The happy path. Generates events: OrderPlaced, PaymentReady,
    PaymentApproved, PaymentRefunded.
    """

    @task
    def create_order(self):
        self.place_order(delivery_order_data(), "POST /orders (delivery)")

    @task
    def ready_payment(self):
        self.ready()

    @task
    def approve_payment(self):
        self.approve()

    @task
    def check_status(self):
        with self.client.get(
            f"/payments/status/{self.state.order_id}",
            catch_response=True,
            name="GET /payments/status/{order_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Status failed: {resp.status_code}: {extract_error_detail(resp)}")
            elif resp.json()["payment_status"] != self.state.payment_status:
                resp.failure(f"Expected {self.state.payment_status}, got {resp.json()['payment_status']}")

    @task
    def partial_refund(self):
        amount = partial_refund_amount(self.state.total_amount)
        with self.client.post(
            f"/payments/refund/{self.state.order_id}",
            json={"cancel_amount": amount},
            catch_response=True,
            name="POST /payments/refund/{order_id}",
        ) as resp:
            if resp.status_code == 200:
                self.state.refunded_amount += amount
            else:
                resp.failure(f"Refund failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class FailedThenPaidJourney(_OrderJourney):
    """Place Pickup Order -> Ready -> Fail -> Ready -> Success.

    The buyer's first attempt fails on the gateway page and the second one
    goes through on a new transaction.
    """

    @task
    def create_order(self):
        self.place_order(pickup_order_data(), "POST /orders (pickup)")

    @task
    def ready_payment(self):
        self.ready()

    @task
    def fail_payment(self):
        with self.client.get(
            "/payments/fail",
            params={"order_id": self.state.order_id, "error_msg": failure_message()},
            catch_response=True,
            name="GET /payments/fail",
        ) as resp:
            if resp.status_code == 200:
                self.state.payment_status = "failed"
            else:
                resp.failure(f"Fail callback failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def ready_again(self):
        self.ready()
        if len(set(self.state.tids)) != 2:
            self.interrupt()

    @task
    def approve_payment(self):
        self.approve()

    @task
    def done(self):
        self.interrupt()


class AbandonedPaymentJourney(_OrderJourney):
    """Place Delivery Order -> Ready -> Cancel.

    The buyer backs out on the gateway page; the payment stays ready.
    """

    @task
    def create_order(self):
        self.place_order(delivery_order_data(num_items=1), "POST /orders (delivery)")

    @task
    def ready_payment(self):
        self.ready()

    @task
    def cancel_payment(self):
        with self.client.get(
            "/payments/cancel",
            params={"order_id": self.state.order_id},
            catch_response=True,
            name="GET /payments/cancel",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cancel callback failed: {resp.status_code}: {extract_error_detail(resp)}")
            elif resp.json()["payment_status"] != "ready":
                resp.failure(f"Cancel changed the payment to {resp.json()['payment_status']}")

    @task
    def done(self):
        self.interrupt()


class CheckoutUser(HttpUser):
    """Locust user simulating order placement and payment.

    Weighted distribution:
    - 60% Paid order with a partial refund
    - 25% Failed payment, retried
    - 15% Abandoned payment
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        PaidOrderJourney: 12,
        FailedThenPaidJourney: 5,
        AbandonedPaymentJourney: 3,
    }
