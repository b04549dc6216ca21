from fastapi import APIRouter, HTTPException, Request

from inventory_service.models import ProductRequest, ProductResponse

router = APIRouter()


@router.get("/health")
def health(request: Request) -> dict:
    worker = request.app.state.worker_thread
    return {"status": "ok", "stock_worker": "running" if worker is not None and worker.is_alive() else "stopped"}


@router.get("/api/Produto/ObterPorId/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, request: Request) -> ProductResponse:
    product = request.app.state.store.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductResponse.from_product(product)


@router.post("/api/Produto/Cadastrar", response_model=ProductResponse, status_code=201)
def add_product(payload: ProductRequest, request: Request) -> ProductResponse:
    product = request.app.state.store.add_product(
        name=payload.name,
        price=payload.price,
        stock_quantity=payload.stock_quantity,
        description=payload.description,
    )
    return ProductResponse.from_product(product)
