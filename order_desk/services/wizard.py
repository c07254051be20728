"""
Checkout Wizard States

The drawer moves through SelectSize -> BasketReview -> DetailsForm -> Success,
with Closed outside the wizard. Each state is an immutable value and every
transition is a plain function returning the next state or raising
InvalidTransition. Basket and form data live elsewhere; transitions only get
the facts they guard on.
"""

from dataclasses import dataclass
from typing import Optional, Union

from ..models.checkout import CheckoutStep, OrderRequest
from ..models.product import PackSizeOffer


class InvalidTransition(Exception):
    """The requested action is not available in the current state"""
    pass


class SubmissionInProgress(InvalidTransition):
    """An order submission is already waiting on the sink"""
    pass


@dataclass(frozen=True)
class Closed:
    step = CheckoutStep.CLOSED


@dataclass(frozen=True)
class SelectSize:
    pending: Optional[PackSizeOffer] = None
    pending_quantity: int = 1
    step = CheckoutStep.SELECT_SIZE


@dataclass(frozen=True)
class BasketReview:
    step = CheckoutStep.BASKET


@dataclass(frozen=True)
class DetailsForm:
    submitting: bool = False
    error: Optional[str] = None
    step = CheckoutStep.DETAILS


@dataclass(frozen=True)
class Success:
    order: OrderRequest
    step = CheckoutStep.SUCCESS


WizardState = Union[Closed, SelectSize, BasketReview, DetailsForm, Success]


def _expect(state: WizardState, kind: type, action: str):
    if not isinstance(state, kind):
        raise InvalidTransition(f"Cannot {action} from {state.step.value}")
    return state


def open_wizard(state: WizardState) -> SelectSize:
    """Open the drawer on a fresh size selection"""
    _expect(state, Closed, "open the wizard")
    return SelectSize()


def close_wizard(state: WizardState) -> Closed:
    """Close the drawer from any state"""
    return Closed()


def choose_size(state: WizardState, size: PackSizeOffer) -> SelectSize:
    current = _expect(state, SelectSize, "choose a size")
    return SelectSize(pending=size, pending_quantity=current.pending_quantity)


def set_pending_quantity(state: WizardState, quantity: int, max_quantity: int) -> SelectSize:
    """Stepper for the quantity to add; values outside 1..max_quantity are ignored"""
    current = _expect(state, SelectSize, "change the quantity")
    if quantity < 1 or quantity > max_quantity:
        return current
    return SelectSize(pending=current.pending, pending_quantity=quantity)


def confirm_add(state: WizardState) -> BasketReview:
    current = _expect(state, SelectSize, "add to basket")
    if current.pending is None:
        raise InvalidTransition("Select a size before adding to the basket")
    return BasketReview()


def view_basket(state: WizardState, line_count: int) -> BasketReview:
    _expect(state, SelectSize, "view the basket")
    if line_count == 0:
        raise InvalidTransition("The basket is empty")
    return BasketReview()


def add_another(state: WizardState) -> SelectSize:
    _expect(state, BasketReview, "add another size")
    return SelectSize()


def proceed_to_details(state: WizardState, line_count: int) -> DetailsForm:
    _expect(state, BasketReview, "continue to details")
    if line_count == 0:
        raise InvalidTransition("The basket is empty")
    return DetailsForm()


def go_back(state: WizardState) -> Union[SelectSize, BasketReview]:
    """Back control: basket goes to size selection, details go to the basket"""
    if isinstance(state, BasketReview):
        return SelectSize()
    if isinstance(state, DetailsForm):
        if state.submitting:
            raise SubmissionInProgress("Order submission in progress")
        return BasketReview()
    raise InvalidTransition(f"Cannot go back from {state.step.value}")


def begin_submit(state: WizardState) -> DetailsForm:
    current = _expect(state, DetailsForm, "submit")
    if current.submitting:
        raise SubmissionInProgress("Order submission in progress")
    return DetailsForm(submitting=True)


def submission_failed(state: WizardState, message: str) -> DetailsForm:
    _expect(state, DetailsForm, "record a failed submission")
    return DetailsForm(submitting=False, error=message)


def submission_succeeded(state: WizardState, order: OrderRequest) -> Success:
    _expect(state, DetailsForm, "record a successful submission")
    return Success(order=order)


def header_label(state: WizardState, total_quantity: int, line_count: int) -> str:
    """Drawer title for the current state"""
    if isinstance(state, BasketReview):
        if line_count == 0:
            return "Basket"
        noun = "item" if total_quantity == 1 else "items"
        return f"Basket ({total_quantity} {noun})"
    if isinstance(state, DetailsForm):
        return "Your details"
    if isinstance(state, Success):
        return "Order received"
    return "Add to basket"


def add_button_label(state: WizardState) -> str:
    """Caption of the add-to-basket control"""
    if isinstance(state, SelectSize) and state.pending is not None:
        return f"Add {state.pending_quantity} × {state.pending.label} to basket"
    return "Select a size to add"
