from unittest.mock import MagicMock, call

import pytest

from infrastructure.api.http_client import ApiError
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from use_cases.errors import (
    EventLoadFailed,
    NotAuthenticated,
    PaymentInitiationFailed,
    QuantityOutOfRange,
    ReservationFailed,
    ReservationOrphaned,
)
from use_cases.purchase_flow import MOMO_NOTICE, USSD_NOTICE, PurchaseWorkflow
from use_cases.purchase_validation import PurchaseIntent

TICKET = {"id": "t-1", "event_id": "e1", "user_id": "u1", "quantity": 1, "status": "pending", "ticket_code": "TCK-1"}
PAYMENT = {"id": "p-1", "ticket_id": "t-1", "amount": 15.0, "payment_type": "momo", "status": "pending", "momo_ref": "ref-9"}


def _event_body(max_tickets=50, sold_tickets=0):
    return {"event": {
        "id": "e1", "title": "Kigali Jazz", "description": "Live", "date": "2026-12-01T19:00:00Z",
        "location": "Kigali", "price": 15.0, "max_tickets": max_tickets, "sold_tickets": sold_tickets,
        "status": "active",
    }}


def _intent(quantity=1, method="momo", phone="+250700000000"):
    return PurchaseIntent(event_id="e1", quantity=quantity, phone_number=phone, payment_type=method)


@pytest.fixture
def client():
    client = MagicMock()
    client.get.return_value = _event_body()
    return client


@pytest.fixture
def audit():
    return MagicMock()


@pytest.fixture
def workflow(client, ready_session, audit):
    wf = PurchaseWorkflow("e1", ready_session, client, audit_repo=audit)
    wf.load()
    return wf


def test_load_moves_to_ready(client, ready_session):
    wf = PurchaseWorkflow("e1", ready_session, client)
    assert wf.state == "loading-event"

    outcome = wf.load()

    assert outcome.status == "SUCCEEDED"
    assert wf.state == "ready"
    assert wf.available == 50
    assert wf.quantity_options == list(range(1, 11))
    client.get.assert_called_once_with("/events/e1")


def test_load_failure_is_terminal_and_redirects_to_catalog(client, ready_session):
    client.get.side_effect = ApiError(404, "Event not found")
    wf = PurchaseWorkflow("e1", ready_session, client)

    outcome = wf.load()

    assert outcome.status == "FAILED"
    assert outcome.next_view == "catalog"
    assert isinstance(outcome.error, EventLoadFailed)
    assert outcome.notification == "Event not found"
    assert wf.state == "failed"
    assert wf.is_terminal
    assert not wf.can_submit
    assert wf.submit(_intent()).status == "IGNORED"


def test_sold_out_event_disables_submission(client, ready_session):
    client.get.return_value = _event_body(100, 100)
    wf = PurchaseWorkflow("e1", ready_session, client)
    wf.load()

    assert wf.available == 0
    assert wf.quantity_options == []
    assert not wf.can_submit
    assert wf.submit(_intent()).status == "IGNORED"
    client.post.assert_not_called()


def test_negative_availability_is_clamped(client, ready_session):
    client.get.return_value = _event_body(10, 14)
    wf = PurchaseWorkflow("e1", ready_session, client)
    wf.load()

    assert wf.available == 0


def test_scenario_a_quantity_above_available_is_rejected_locally(client, ready_session):
    client.get.return_value = _event_body(50, 48)
    wf = PurchaseWorkflow("e1", ready_session, client)
    wf.load()

    outcome = wf.submit(_intent(quantity=3))

    assert outcome.status == "REJECTED"
    assert isinstance(outcome.error, QuantityOutOfRange)
    assert outcome.error.available == 2
    assert wf.state == "ready"
    client.post.assert_not_called()


def test_scenario_b_momo_success(workflow, client, audit):
    client.post.side_effect = [{"ticket": TICKET}, {"payment": PAYMENT, "momo": {"status": "PENDING"}}]

    outcome = workflow.submit(_intent())

    assert outcome.status == "SUCCEEDED"
    assert outcome.notification == MOMO_NOTICE
    assert outcome.next_view == "ticket"
    assert outcome.reservation_id == "t-1"
    assert outcome.payment.provider_reference == "ref-9"
    assert workflow.state == "succeeded"
    assert client.post.call_args_list == [
        call("/tickets", json={"event_id": "e1", "quantity": 1}),
        call("/payment/initiate", json={
            "event_id": "e1", "quantity": 1, "phone_number": "+250700000000", "payment_type": "momo",
        }),
    ]
    actions = [c[0][0] for c in audit.log_action.call_args_list]
    assert actions == [AuditAction.RESERVATION_CREATED, AuditAction.PAYMENT_INITIATED]


def test_ussd_success_promises_sms(workflow, client):
    client.post.side_effect = [{"ticket": TICKET}, {"payment": dict(PAYMENT, payment_type="ussd")}]

    outcome = workflow.submit(_intent(method="ussd"))

    assert outcome.status == "SUCCEEDED"
    assert outcome.notification == USSD_NOTICE
    assert outcome.next_view == "ticket"
    assert outcome.reservation_id == "t-1"


def test_scenario_c_payment_failure_keeps_reservation(workflow, client):
    client.post.side_effect = [{"ticket": TICKET}, ApiError(502, "MoMo service unavailable")]

    outcome = workflow.submit(_intent())

    assert outcome.status == "FAILED"
    assert isinstance(outcome.error, PaymentInitiationFailed)
    assert isinstance(outcome.error, ReservationOrphaned)
    assert outcome.error.reservation_id == "t-1"
    assert outcome.notification == "MoMo service unavailable"
    assert workflow.state == "failed"
    assert workflow.reservation.id == "t-1"
    assert workflow.reservation.status == "pending"
    assert client.post.call_count == 2


def test_reservation_failure_skips_payment(workflow, client):
    client.post.side_effect = ApiError(400, "Not enough tickets available")

    outcome = workflow.submit(_intent())

    assert outcome.status == "FAILED"
    assert isinstance(outcome.error, ReservationFailed)
    assert outcome.notification == "Not enough tickets available"
    assert client.post.call_count == 1


def test_network_failure_uses_generic_reservation_message(workflow, client):
    client.post.side_effect = ApiError(None, "Network error: timed out")

    outcome = workflow.submit(_intent())

    assert outcome.notification == ReservationFailed.default_message


def test_failed_submission_can_be_retried(workflow, client):
    client.post.side_effect = [
        ApiError(500, "Failed to create ticket"),
        {"ticket": TICKET},
        {"payment": PAYMENT},
    ]

    assert workflow.submit(_intent()).status == "FAILED"
    assert workflow.can_submit
    assert workflow.submit(_intent()).status == "SUCCEEDED"


def test_scenario_d_anonymous_submit_makes_no_calls(client, anonymous_session):
    wf = PurchaseWorkflow("e1", anonymous_session, client)
    wf.load()

    outcome = wf.submit(_intent())

    assert outcome.status == "REJECTED"
    assert isinstance(outcome.error, NotAuthenticated)
    assert outcome.next_view == "login"
    client.post.assert_not_called()


def test_repeat_submit_while_submitting_is_ignored(workflow, client):
    nested = []

    def create_ticket(path, json=None):
        if path == "/tickets":
            nested.append(workflow.submit(_intent()))
            return {"ticket": TICKET}
        return {"payment": PAYMENT}

    client.post.side_effect = create_ticket

    outcome = workflow.submit(_intent())

    assert outcome.status == "SUCCEEDED"
    assert [o.status for o in nested] == ["IGNORED"]
    assert [c[0][0] for c in client.post.call_args_list].count("/tickets") == 1


def test_submit_uses_latest_availability(workflow, client):
    client.get.return_value = _event_body(50, 49)
    assert workflow.refresh_event()

    outcome = workflow.submit(_intent(quantity=2))

    assert outcome.status == "REJECTED"
    assert outcome.error.available == 1
    client.post.assert_not_called()


def test_disposed_workflow_drops_late_result(workflow, client):
    def create_ticket(path, json=None):
        if path == "/tickets":
            workflow.dispose()
            return {"ticket": TICKET}
        return {"payment": PAYMENT}

    client.post.side_effect = create_ticket

    outcome = workflow.submit(_intent())

    assert outcome.status == "DISCARDED"
    assert workflow.state == "submitting"
    assert workflow.reservation is None
    assert not workflow.can_submit


def test_total_and_default_phone(workflow):
    assert workflow.total(3) == 45.0
    assert workflow.default_phone() == "+250700000000"
