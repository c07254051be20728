from __future__ import annotations

import asyncio

import pytest

from order_desk.database.orders import InMemoryOrderSink
from order_desk.models.checkout import CheckoutStep, CustomerDetailsUpdate, OrderLineItem
from order_desk.services.checkout import (
    CONFIGURATION_UNAVAILABLE_MESSAGE,
    SUBMISSION_FAILED_MESSAGE,
    SUBMISSION_TIMEOUT_MESSAGE,
    CheckoutWorkflow,
    UnknownPackSize,
)
from order_desk.services.order_sink import ConfigurationUnavailable, SubmissionRejected
from order_desk.services.wizard import (
    BasketReview,
    Closed,
    DetailsForm,
    InvalidTransition,
    SelectSize,
    SubmissionInProgress,
    Success,
)
from tests.test_utils import COMPLETE_DETAILS, add_size, fill_basket_and_details


class GatedSink:
    """Sink that waits for the test to release each submission."""

    def __init__(self):
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.orders = []

    async def submit(self, order):
        self.entered.set()
        await self.release.wait()
        self.orders.append(order)


class FlakySink:
    """Sink that fails a fixed number of times, recording every request id."""

    def __init__(self, failures: int):
        self.failures = failures
        self.seen: list[str] = []

    async def submit(self, order):
        self.seen.append(order.request_id)
        if self.failures:
            self.failures -= 1
            raise SubmissionRejected("insert failed")


def test_resolved_sizes_exclude_unavailable(workflow):
    labels = [s.label for s in workflow.sizes]

    assert "1L" not in labels
    assert labels[-1] == "IBC 600L"


def test_add_flow_merges_and_resets_pending(workflow):
    workflow.open()
    add_size(workflow, "5L", 2)

    assert workflow.state == BasketReview()
    assert workflow.header == "Basket (2 items)"

    workflow.add_another()
    assert workflow.state == SelectSize()
    add_size(workflow, "5L", 3)

    assert len(workflow.basket) == 1
    assert workflow.basket.line_for("5L").quantity == 5


def test_add_past_quantity_cap_is_refused_and_keeps_selection(product, order_sink):
    workflow = CheckoutWorkflow(product=product, order_sink=order_sink, max_quantity=10)
    workflow.open()
    add_size(workflow, "5L", 9)
    workflow.add_another()
    workflow.choose_size("5L")
    workflow.set_pending_quantity(5)

    with pytest.raises(InvalidTransition):
        workflow.confirm_add()

    assert workflow.state == SelectSize(pending=workflow.size_for("5L"), pending_quantity=5)
    assert workflow.basket.line_for("5L").quantity == 9

    workflow.set_pending_quantity(1)
    assert workflow.confirm_add() == BasketReview()
    assert workflow.basket.line_for("5L").quantity == 10


def test_choose_unknown_size_raises(workflow):
    workflow.open()

    with pytest.raises(UnknownPackSize):
        workflow.choose_size("1L")


def test_view_basket_needs_lines(workflow):
    workflow.open()
    assert workflow.can_view_basket is False
    with pytest.raises(InvalidTransition):
        workflow.view_basket()

    add_size(workflow, "20L", 1)
    workflow.close()
    workflow.open()

    assert workflow.can_view_basket is True
    assert workflow.view_basket() == BasketReview()


def test_continue_needs_lines(workflow):
    workflow.open()
    add_size(workflow, "20L", 1)
    workflow.remove_line("20L")

    assert workflow.can_continue is False
    with pytest.raises(InvalidTransition):
        workflow.proceed()


def test_reopen_resets_selection_but_keeps_basket(workflow):
    workflow.open()
    add_size(workflow, "5L", 2)
    workflow.add_another()
    workflow.choose_size("20L")
    workflow.set_pending_quantity(6)

    workflow.close()
    state = workflow.open()

    assert state == SelectSize(pending=None, pending_quantity=1)
    assert workflow.basket.line_for("5L").quantity == 2


def test_basket_edits_only_in_review(workflow):
    workflow.open()
    add_size(workflow, "5L", 2)

    workflow.update_quantity("5L", 0)
    assert workflow.basket.line_for("5L").quantity == 2
    workflow.update_quantity("5L", 4)
    assert workflow.basket.line_for("5L").quantity == 4

    workflow.add_another()
    with pytest.raises(InvalidTransition):
        workflow.update_quantity("5L", 1)
    with pytest.raises(InvalidTransition):
        workflow.remove_line("5L")


def test_back_from_details_keeps_form_values(workflow):
    fill_basket_and_details(workflow)

    assert workflow.back() == BasketReview()
    assert workflow.proceed() == DetailsForm()
    assert workflow.details.name == "Jane Smith"
    assert workflow.details.postcode == "B1 1AA"


def test_incomplete_details_block_submission_silently(workflow, order_sink):
    details = dict(COMPLETE_DETAILS, phone="", town="  ")
    fill_basket_and_details(workflow, details)

    assert workflow.can_submit is False
    assert workflow.missing_fields == ["phone", "town"]

    state = asyncio.run(workflow.submit())

    assert state == DetailsForm()
    assert order_sink.attempts == 0


def test_successful_submission_of_two_lines(workflow, order_sink):
    """Two lines (5L x2, 20L x1) go out as one order for 'Multiple sizes', qty 3."""
    fill_basket_and_details(workflow)
    assert workflow.can_submit is True

    state = asyncio.run(workflow.submit())

    assert isinstance(state, Success)
    assert state.step == CheckoutStep.SUCCESS
    assert workflow.header == "Order received"
    assert len(order_sink.orders) == 1

    order = next(iter(order_sink.orders.values()))
    assert order == state.order
    assert order.size_label == "Multiple sizes"
    assert order.sku is None
    assert order.quantity == 3
    assert order.items == (
        OrderLineItem(label="5L", sku="HYD-5", quantity=2),
        OrderLineItem(label="20L", sku="HYD-20", quantity=1),
    )
    assert order.customer_company == "Acme Plant Hire"
    assert order.delivery_address_line2 is None
    assert order.delivery_county is None
    assert order.product_slug == "hydraulic-oil-iso-46"


def test_single_line_order_carries_sku(workflow, order_sink):
    workflow.open()
    add_size(workflow, "20L", 4)
    workflow.proceed()
    workflow.update_details(CustomerDetailsUpdate(**COMPLETE_DETAILS))

    state = asyncio.run(workflow.submit())

    assert state.order.size_label == "20L"
    assert state.order.sku == "HYD-20"
    assert state.order.quantity == 4


def test_success_is_left_only_by_closing_and_basket_is_not_restored(workflow):
    fill_basket_and_details(workflow)
    asyncio.run(workflow.submit())

    with pytest.raises(InvalidTransition):
        workflow.open()
    with pytest.raises(InvalidTransition):
        workflow.back()

    workflow.close()
    assert workflow.open() == SelectSize()
    assert workflow.basket.is_empty
    assert workflow.details.name == ""


def test_rejected_submission_keeps_form(workflow, order_sink):
    fill_basket_and_details(workflow)
    details_before = workflow.details.model_copy()
    order_sink.fail_with = SubmissionRejected("quota exceeded")

    state = asyncio.run(workflow.submit())

    assert state == DetailsForm(submitting=False, error=SUBMISSION_FAILED_MESSAGE)
    assert workflow.can_submit is True
    assert workflow.details == details_before
    assert len(workflow.basket) == 2
    assert order_sink.orders == {}


def test_unconfigured_sink_asks_visitor_to_call(workflow, order_sink):
    fill_basket_and_details(workflow)
    order_sink.fail_with = ConfigurationUnavailable("no credentials")

    state = asyncio.run(workflow.submit())

    assert state.error == CONFIGURATION_UNAVAILABLE_MESSAGE


def test_unexpected_sink_error_is_contained(workflow, order_sink):
    fill_basket_and_details(workflow)
    order_sink.fail_with = RuntimeError("socket exploded")

    state = asyncio.run(workflow.submit())

    assert state.error == SUBMISSION_FAILED_MESSAGE
    assert "socket" not in state.error


def test_timeout_is_retryable(product):
    sink = InMemoryOrderSink(delay=1.0)
    workflow = CheckoutWorkflow(product=product, order_sink=sink, submit_timeout=0.05)
    fill_basket_and_details(workflow)

    state = asyncio.run(workflow.submit())
    assert state == DetailsForm(submitting=False, error=SUBMISSION_TIMEOUT_MESSAGE)
    assert sink.orders == {}

    sink.delay = 0
    state = asyncio.run(workflow.submit())
    assert isinstance(state, Success)
    assert sink.attempts == 2
    assert len(sink.orders) == 1


def test_retry_reuses_request_id_until_something_changes(product):
    sink = FlakySink(failures=2)
    workflow = CheckoutWorkflow(product=product, order_sink=sink)
    fill_basket_and_details(workflow)

    asyncio.run(workflow.submit())
    asyncio.run(workflow.submit())
    assert sink.seen[0] == sink.seen[1]

    workflow.update_details(CustomerDetailsUpdate(notes="Deliver after 9am"))
    state = asyncio.run(workflow.submit())

    assert isinstance(state, Success)
    assert sink.seen[2] != sink.seen[1]
    assert state.order.notes == "Deliver after 9am"


def test_second_submit_while_in_flight_is_refused(product):
    async def scenario():
        sink = GatedSink()
        workflow = CheckoutWorkflow(product=product, order_sink=sink)
        fill_basket_and_details(workflow)

        task = asyncio.create_task(workflow.submit())
        await sink.entered.wait()

        assert workflow.state == DetailsForm(submitting=True)
        assert workflow.can_submit is False
        with pytest.raises(SubmissionInProgress):
            await workflow.submit()
        with pytest.raises(SubmissionInProgress):
            workflow.update_details(CustomerDetailsUpdate(name="Someone Else"))

        sink.release.set()
        await task
        return workflow, sink

    workflow, sink = asyncio.run(scenario())

    assert isinstance(workflow.state, Success)
    assert len(sink.orders) == 1


def test_closing_during_submission_ignores_late_result(product):
    async def scenario():
        sink = GatedSink()
        workflow = CheckoutWorkflow(product=product, order_sink=sink)
        fill_basket_and_details(workflow)

        task = asyncio.create_task(workflow.submit())
        await sink.entered.wait()
        workflow.close()
        workflow.open()

        sink.release.set()
        await task
        return workflow

    workflow = asyncio.run(scenario())

    assert workflow.state == SelectSize()
    assert len(workflow.basket) == 2


def test_cancelled_submission_reenables_the_form(product):
    async def scenario():
        sink = GatedSink()
        workflow = CheckoutWorkflow(product=product, order_sink=sink)
        fill_basket_and_details(workflow)

        task = asyncio.create_task(workflow.submit())
        await sink.entered.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return workflow, sink

    workflow, sink = asyncio.run(scenario())

    assert workflow.state == DetailsForm(submitting=False, error=SUBMISSION_FAILED_MESSAGE)
    assert workflow.can_submit is True
    assert sink.orders == []
    assert workflow.back() == BasketReview()
    assert len(workflow.basket) == 2


def test_teardown_during_submission_ignores_late_result(product):
    async def scenario():
        sink = GatedSink()
        workflow = CheckoutWorkflow(product=product, order_sink=sink)
        fill_basket_and_details(workflow)

        task = asyncio.create_task(workflow.submit())
        await sink.entered.wait()
        workflow.teardown()

        sink.release.set()
        await task
        return workflow

    workflow = asyncio.run(scenario())

    assert workflow.state == Closed()
    assert workflow.basket.is_empty
