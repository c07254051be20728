"""Checkout drawer API routes for the order desk"""

import logging
from typing import Callable

from fastapi import APIRouter, HTTPException, Depends, Request, status

from ..core.config import Settings, get_settings
from ..core.session import CheckoutSession, CheckoutSessionManager, session_manager
from ..database.products import ProductDatabase
from ..models.basket import QuantityRequest, SelectSizeRequest
from ..models.checkout import (
    CheckoutView,
    CreateSessionRequest,
    CustomerDetailsUpdate,
)
from ..services.checkout import CheckoutWorkflow, UnknownPackSize
from ..services.order_sink import OrderSink
from ..services.wizard import DetailsForm, InvalidTransition, SelectSize, Success
from .products import get_product_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout/sessions", tags=["Checkout"])


def get_session_manager() -> CheckoutSessionManager:
    return session_manager


def get_order_sink(request: Request) -> OrderSink:
    """Order sink created at startup"""
    return request.app.state.order_sink


def build_view(session: CheckoutSession) -> CheckoutView:
    """Render the drawer state of a session"""
    workflow = session.workflow
    state = workflow.state

    return CheckoutView(
        session_id=session.session_id,
        product_slug=workflow.product.slug,
        product_title=workflow.product.title,
        step=state.step,
        header=workflow.header,
        sizes=workflow.sizes,
        pending_size=state.pending if isinstance(state, SelectSize) else None,
        pending_quantity=state.pending_quantity if isinstance(state, SelectSize) else 1,
        add_label=workflow.add_label,
        can_view_basket=workflow.can_view_basket,
        lines=workflow.basket.views(),
        total_quantity=workflow.basket.total_quantity,
        size_summary_label=workflow.basket.size_summary_label,
        can_continue=workflow.can_continue,
        details=workflow.details,
        missing_fields=workflow.missing_fields,
        can_submit=workflow.can_submit,
        submitting=isinstance(state, DetailsForm) and state.submitting,
        error_message=state.error if isinstance(state, DetailsForm) else None,
        order=state.order if isinstance(state, Success) else None,
    )


def _get_session(session_id: str, manager: CheckoutSessionManager) -> CheckoutSession:
    session = manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Checkout session not found")
    return session


def _apply(session: CheckoutSession, action: Callable[[CheckoutWorkflow], object]) -> CheckoutView:
    """Run a workflow action and translate its errors into HTTP errors"""
    try:
        action(session.workflow)
    except UnknownPackSize as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    session.touch()
    return build_view(session)


@router.post("", response_model=CheckoutView, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: CreateSessionRequest,
    products: ProductDatabase = Depends(get_product_db),
    manager: CheckoutSessionManager = Depends(get_session_manager),
    order_sink: OrderSink = Depends(get_order_sink),
    settings: Settings = Depends(get_settings),
):
    """Create a checkout session for a product page"""
    product = products.get_product(request.product_slug)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    manager.cleanup_old_sessions(settings.session_max_age_hours)

    workflow = CheckoutWorkflow(
        product=product,
        order_sink=order_sink,
        submit_timeout=settings.order_submit_timeout_seconds,
        max_quantity=settings.max_line_quantity,
    )
    session = manager.create_session(workflow)
    return build_view(session)


@router.get("/{session_id}", response_model=CheckoutView)
async def get_session(
    session_id: str,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """Get the current drawer state"""
    return build_view(_get_session(session_id, manager))


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """End a checkout session and discard its basket"""
    if manager.delete_session(session_id):
        return {"message": "Checkout session deleted"}
    raise HTTPException(status_code=404, detail="Checkout session not found")


@router.post("/{session_id}/open", response_model=CheckoutView)
async def open_drawer(session_id: str, manager: CheckoutSessionManager = Depends(get_session_manager)):
    return _apply(_get_session(session_id, manager), lambda w: w.open())


@router.post("/{session_id}/close", response_model=CheckoutView)
async def close_drawer(session_id: str, manager: CheckoutSessionManager = Depends(get_session_manager)):
    return _apply(_get_session(session_id, manager), lambda w: w.close())


@router.post("/{session_id}/select", response_model=CheckoutView)
async def select_size(
    session_id: str,
    request: SelectSizeRequest,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """Pick the pack size to add"""
    return _apply(_get_session(session_id, manager), lambda w: w.choose_size(request.label))


@router.post("/{session_id}/pending-quantity", response_model=CheckoutView)
async def set_pending_quantity(
    session_id: str,
    request: QuantityRequest,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """Set how many of the selected size to add"""
    return _apply(_get_session(session_id, manager), lambda w: w.set_pending_quantity(request.quantity))


@router.post("/{session_id}/add", response_model=CheckoutView)
async def add_to_basket(session_id: str, manager: CheckoutSessionManager = Depends(get_session_manager)):
    """Add the pending selection to the basket"""
    return _apply(_get_session(session_id, manager), lambda w: w.confirm_add())


@router.post("/{session_id}/view-basket", response_model=CheckoutView)
async def view_basket(session_id: str, manager: CheckoutSessionManager = Depends(get_session_manager)):
    return _apply(_get_session(session_id, manager), lambda w: w.view_basket())


@router.post("/{session_id}/add-another", response_model=CheckoutView)
async def add_another_size(session_id: str, manager: CheckoutSessionManager = Depends(get_session_manager)):
    return _apply(_get_session(session_id, manager), lambda w: w.add_another())


@router.post("/{session_id}/continue", response_model=CheckoutView)
async def continue_to_details(session_id: str, manager: CheckoutSessionManager = Depends(get_session_manager)):
    return _apply(_get_session(session_id, manager), lambda w: w.proceed())


@router.post("/{session_id}/back", response_model=CheckoutView)
async def go_back(session_id: str, manager: CheckoutSessionManager = Depends(get_session_manager)):
    return _apply(_get_session(session_id, manager), lambda w: w.back())


@router.put("/{session_id}/basket/{label:path}", response_model=CheckoutView)
async def update_basket_line(
    session_id: str,
    label: str,
    request: QuantityRequest,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """Update a basket line quantity; values below 1 are ignored"""
    return _apply(_get_session(session_id, manager), lambda w: w.update_quantity(label, request.quantity))


@router.delete("/{session_id}/basket/{label:path}", response_model=CheckoutView)
async def remove_basket_line(
    session_id: str,
    label: str,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """Remove a basket line"""
    return _apply(_get_session(session_id, manager), lambda w: w.remove_line(label))


@router.patch("/{session_id}/details", response_model=CheckoutView)
async def update_details(
    session_id: str,
    request: CustomerDetailsUpdate,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """Update contact and delivery details"""
    return _apply(_get_session(session_id, manager), lambda w: w.update_details(request))


@router.post("/{session_id}/submit", response_model=CheckoutView)
async def submit_order(
    session_id: str,
    manager: CheckoutSessionManager = Depends(get_session_manager),
):
    """
    Submit the basket as a delivery-quote request.

    Incomplete details leave the form as it is (see missing_fields).
    A failed submission keeps the form and reports error_message.
    """
    session = _get_session(session_id, manager)
    try:
        await session.workflow.submit()
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    session.touch()
    return build_view(session)
