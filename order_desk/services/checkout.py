"""
Checkout Workflow

Runs one purchase drawer for one product: resolves its pack sizes, keeps the
basket and the details form, drives the wizard states and hands the finished
order request to the order sink.
"""

import asyncio
import logging
import uuid
from typing import Optional

from ..models.checkout import CustomerDetails, CustomerDetailsUpdate, OrderRequest
from ..models.product import PackSizeOffer, Product
from . import wizard
from .basket import Basket, DEFAULT_MAX_QUANTITY
from .order_sink import ConfigurationUnavailable, OrderSink, OrderSinkError, SubmissionTimeout
from .size_catalog import resolve_sizes

logger = logging.getLogger(__name__)

CONFIGURATION_UNAVAILABLE_MESSAGE = "Order service is not configured yet. Please call us directly."
SUBMISSION_FAILED_MESSAGE = "Couldn't submit right now. Please call us directly."
SUBMISSION_TIMEOUT_MESSAGE = "The order service took too long to respond. Please try again."


class UnknownPackSize(LookupError):
    """The product does not offer the requested pack size"""
    pass


def build_order_request(
    product: Product,
    basket: Basket,
    details: CustomerDetails,
    request_id: str,
) -> OrderRequest:
    """Snapshot the basket and the details form into an order request"""
    return OrderRequest(
        request_id=request_id,
        product_title=product.title,
        product_slug=product.slug,
        size_label=basket.size_summary_label,
        sku=basket.single_sku,
        quantity=basket.total_quantity,
        items=basket.snapshot(),
        customer_name=details.name.strip(),
        customer_company=details.company.strip() or None,
        customer_email=details.email.strip(),
        customer_phone=details.phone.strip(),
        delivery_address_line1=details.line1.strip(),
        delivery_address_line2=details.line2.strip() or None,
        delivery_town=details.town.strip(),
        delivery_county=details.county.strip() or None,
        delivery_postcode=details.postcode.strip(),
        notes=details.notes.strip() or None,
    )


class CheckoutWorkflow:
    """
    One visitor's purchase drawer.

    The basket survives closing and reopening the drawer; it is only emptied
    by a successful submission or by tearing the workflow down. Only submit()
    awaits. A submission that finishes after the drawer was closed, reopened
    or torn down does not touch the state.
    """

    def __init__(
        self,
        product: Product,
        order_sink: OrderSink,
        submit_timeout: float = 15.0,
        max_quantity: int = DEFAULT_MAX_QUANTITY,
    ):
        self.product = product
        self.sizes: list[PackSizeOffer] = resolve_sizes(
            product.pack_sizes,
            product.unavailable_pack_sizes,
        )
        self.basket = Basket(max_quantity=max_quantity)
        self.details = CustomerDetails()
        self.state: wizard.WizardState = wizard.Closed()
        self.max_quantity = max_quantity

        self._order_sink = order_sink
        self._submit_timeout = submit_timeout
        self._epoch = 0
        self._torn_down = False
        self._request_id: Optional[str] = None

    # ==================== Drawer ====================

    @property
    def is_open(self) -> bool:
        return not isinstance(self.state, wizard.Closed)

    def open(self) -> wizard.WizardState:
        """Open the drawer on the size selection step"""
        self.state = wizard.open_wizard(self.state)
        self._epoch += 1
        return self.state

    def close(self) -> wizard.WizardState:
        """Close the drawer, keeping the basket for later"""
        if isinstance(self.state, wizard.DetailsForm) and self.state.submitting:
            logger.info(f"Drawer for {self.product.slug} closed during submission")
        self.state = wizard.close_wizard(self.state)
        self._epoch += 1
        return self.state

    def teardown(self) -> None:
        """Drop the session; late submission results are ignored from now on"""
        self._torn_down = True
        self.basket.clear()
        self.state = wizard.Closed()

    # ==================== Size selection ====================

    def size_for(self, label: str) -> PackSizeOffer:
        """Look up one of the product's resolved sizes"""
        size = next((s for s in self.sizes if s.label == label), None)
        if size is None:
            raise UnknownPackSize(f"{self.product.slug} is not offered in {label}")
        return size

    def choose_size(self, label: str) -> wizard.WizardState:
        self.state = wizard.choose_size(self.state, self.size_for(label))
        return self.state

    def set_pending_quantity(self, quantity: int) -> wizard.WizardState:
        self.state = wizard.set_pending_quantity(self.state, quantity, self.max_quantity)
        return self.state

    def confirm_add(self) -> wizard.WizardState:
        """Put the pending selection in the basket and move to the basket"""
        current = self.state
        next_state = wizard.confirm_add(current)
        if not self.basket.add_or_merge(current.pending, current.pending_quantity):
            raise wizard.InvalidTransition(
                f"At most {self.max_quantity} of {current.pending.label} per order"
            )
        self._request_id = None
        self.state = next_state
        return self.state

    def view_basket(self) -> wizard.WizardState:
        self.state = wizard.view_basket(self.state, len(self.basket))
        return self.state

    # ==================== Basket review ====================

    def add_another(self) -> wizard.WizardState:
        self.state = wizard.add_another(self.state)
        return self.state

    def update_quantity(self, label: str, quantity: int) -> wizard.WizardState:
        """Basket stepper; quantities outside the allowed range are ignored"""
        if not isinstance(self.state, wizard.BasketReview):
            raise wizard.InvalidTransition(f"Cannot edit the basket from {self.state.step.value}")
        if self.basket.set_quantity(label, quantity):
            self._request_id = None
        return self.state

    def remove_line(self, label: str) -> wizard.WizardState:
        if not isinstance(self.state, wizard.BasketReview):
            raise wizard.InvalidTransition(f"Cannot edit the basket from {self.state.step.value}")
        if self.basket.remove(label):
            self._request_id = None
        return self.state

    def proceed(self) -> wizard.WizardState:
        self.state = wizard.proceed_to_details(self.state, len(self.basket))
        return self.state

    def back(self) -> wizard.WizardState:
        self.state = wizard.go_back(self.state)
        return self.state

    # ==================== Details & submission ====================

    def update_details(self, update: CustomerDetailsUpdate) -> wizard.WizardState:
        """Apply edits to the details form"""
        state = self.state
        if not isinstance(state, wizard.DetailsForm):
            raise wizard.InvalidTransition(f"Cannot edit details from {state.step.value}")
        if state.submitting:
            raise wizard.SubmissionInProgress("Order submission in progress")

        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        if changes:
            self.details = self.details.model_copy(update=changes)
            self._request_id = None
        return self.state

    @property
    def missing_fields(self) -> list[str]:
        return self.details.missing_fields()

    @property
    def can_submit(self) -> bool:
        state = self.state
        return (
            isinstance(state, wizard.DetailsForm)
            and not state.submitting
            and not self.basket.is_empty
            and self.details.is_complete
        )

    async def submit(self) -> wizard.WizardState:
        """
        Send the order request to the sink.

        Incomplete details leave the state as it is. Sink failures and
        timeouts keep the form on screen with a message for the visitor.
        """
        state = self.state
        next_state = wizard.begin_submit(state)

        if self.basket.is_empty or not self.details.is_complete:
            logger.debug(f"Submit refused for {self.product.slug}: missing {self.missing_fields}")
            return state

        if self._request_id is None:
            self._request_id = uuid.uuid4().hex
        order = build_order_request(self.product, self.basket, self.details, self._request_id)

        epoch = self._epoch
        self.state = next_state

        error_message: Optional[str] = None
        try:
            await asyncio.wait_for(self._order_sink.submit(order), timeout=self._submit_timeout)
        except (asyncio.TimeoutError, SubmissionTimeout):
            logger.warning(f"Order {order.request_id} timed out after {self._submit_timeout}s")
            error_message = SUBMISSION_TIMEOUT_MESSAGE
        except ConfigurationUnavailable as e:
            logger.error(f"Order sink unavailable: {e}")
            error_message = CONFIGURATION_UNAVAILABLE_MESSAGE
        except OrderSinkError as e:
            logger.error(f"Order {order.request_id} rejected: {e}")
            error_message = SUBMISSION_FAILED_MESSAGE
        except asyncio.CancelledError:
            logger.warning(f"Order {order.request_id} submission cancelled")
            if not self._torn_down and epoch == self._epoch:
                self.state = wizard.submission_failed(self.state, SUBMISSION_FAILED_MESSAGE)
            raise
        except Exception:
            logger.exception(f"Unexpected error submitting order {order.request_id}")
            error_message = SUBMISSION_FAILED_MESSAGE

        if self._torn_down or epoch != self._epoch:
            logger.info(f"Ignoring late result for order {order.request_id}")
            return self.state

        if error_message:
            self.state = wizard.submission_failed(self.state, error_message)
            return self.state

        self.state = wizard.submission_succeeded(self.state, order)
        self.basket.clear()
        self.details = CustomerDetails()
        self._request_id = None
        logger.info(
            f"Order {order.request_id} submitted: {order.quantity}x {order.size_label} "
            f"of {order.product_slug}"
        )
        return self.state

    # ==================== Display ====================

    @property
    def header(self) -> str:
        return wizard.header_label(self.state, self.basket.total_quantity, len(self.basket))

    @property
    def add_label(self) -> str:
        return wizard.add_button_label(self.state)

    @property
    def can_view_basket(self) -> bool:
        return isinstance(self.state, wizard.SelectSize) and not self.basket.is_empty

    @property
    def can_continue(self) -> bool:
        return isinstance(self.state, wizard.BasketReview) and not self.basket.is_empty
