from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from order_service.domain import OrderLine
from order_service.models import OrderRequest, OrderResponse
from order_service.outcome import Outcome, OutcomeKind

router = APIRouter()

STATUS_CODES = {
    OutcomeKind.VALIDATION_ERROR: 400,
    OutcomeKind.NOT_FOUND: 404,
    OutcomeKind.CONFLICT: 409,
    OutcomeKind.INTERNAL_ERROR: 500,
    OutcomeKind.SERVICE_UNAVAILABLE: 503,
}


def _raise_for(outcome: Outcome) -> None:
    if outcome.ok:
        return
    detail = {"message": outcome.message}
    if outcome.errors:
        detail["errors"] = outcome.errors
    if outcome.kind is OutcomeKind.CONFLICT:
        detail["available"] = outcome.available
        detail["requested"] = outcome.requested
    raise HTTPException(status_code=STATUS_CODES[outcome.kind], detail=detail)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or mistyped bodies are validation errors too: 400 in the same shape as the workflow's."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body")
        errors.append(f"{field}: {error['msg']}" if field else error["msg"])
    return JSONResponse(
        status_code=STATUS_CODES[OutcomeKind.VALIDATION_ERROR],
        content={"detail": {"message": "; ".join(errors), "errors": errors}},
    )


@router.get("/health")
def health(request: Request) -> dict:
    broker = request.app.state.broker
    return {"status": "ok", "broker": "open" if broker is not None and broker.is_open else "closed"}


@router.post("/api/Pedido/Cadastrar", response_model=OrderResponse, status_code=201)
def create_order(
    payload: OrderRequest, request: Request, authorization: Optional[str] = Header(default=None)
) -> OrderResponse:
    lines = [OrderLine(product_id=item.product_id, quantity=item.quantity) for item in payload.items]
    outcome = request.app.state.workflow.create_order(payload.customer_id, lines, authorization=authorization)
    _raise_for(outcome)
    return OrderResponse.from_order(outcome.order)


@router.get("/api/Pedido/ObterPorId/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, request: Request) -> OrderResponse:
    outcome = request.app.state.workflow.get_order(order_id)
    _raise_for(outcome)
    return OrderResponse.from_order(outcome.order)


@router.delete("/api/Pedido/Excluir/{order_id}", status_code=204)
def cancel_order(order_id: int, request: Request) -> Response:
    outcome = request.app.state.workflow.cancel_order(order_id)
    _raise_for(outcome)
    return Response(status_code=204)
