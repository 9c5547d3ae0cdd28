# app/main.py
import time
from typing import Optional, Any, Dict, List, Iterable

from fastapi import FastAPI, APIRouter, Body, Depends, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from .auth import api_key_middleware
from .config import Settings
from .database import ProductStore, SEED_PRODUCTS
from .errors import AppError
from .handlers import (
    list_products_logic, search_products_logic, product_stats_logic,
    get_product_logic, create_product_logic, update_product_logic,
    delete_product_logic
)
from .logger import get_logger, set_level
from .models import Product, ProductPage, ProductStats, ErrorResponse

logger = get_logger("main")

GENERIC_ERROR_MESSAGE = "Something went wrong on the server."

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


# ---------------------------
# Product routes
# ---------------------------
# Fixed segments (/search, /stats) must be registered before /{product_id},
# check_route_precedence() enforces this when the app is built.
# The x-api-key check for everything under /api is api_key_middleware.
router = APIRouter(
    prefix="/api/products",
    responses=ERROR_RESPONSES,
)

@router.get("/search", response_model=List[Product])
async def search_products(q: Optional[str] = Query(None), store: ProductStore = Depends(get_store)):
    return await search_products_logic(store, q)

@router.get("/stats", response_model=ProductStats)
async def product_stats(store: ProductStore = Depends(get_store)):
    return await product_stats_logic(store)

@router.get("", response_model=ProductPage)
async def list_products(
    category: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    store: ProductStore = Depends(get_store),
):
    return await list_products_logic(store, category, page, limit)

@router.post("", status_code=201, response_model=Product)
async def create_product(body: Any = Body(None), store: ProductStore = Depends(get_store)):
    return await create_product_logic(store, body)

@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, store: ProductStore = Depends(get_store)):
    return await get_product_logic(store, product_id)

@router.put("/{product_id}", response_model=Product)
async def update_product(product_id: str, body: Any = Body(None), store: ProductStore = Depends(get_store)):
    return await update_product_logic(store, product_id, body)

@router.delete("/{product_id}", status_code=204, response_class=Response)
async def delete_product(product_id: str, store: ProductStore = Depends(get_store)):
    await delete_product_logic(store, product_id)
    return Response(status_code=204)


def check_route_precedence(routes: Iterable[Any]) -> None:
    """
    Fail if a path-parameter route is registered ahead of a fixed route it
    would capture (e.g. ``/{product_id}`` before ``/search``).
    """
    seen: List[APIRoute] = []
    for route in routes:
        if not isinstance(route, APIRoute):
            continue
        if "{" not in route.path:
            for earlier in seen:
                if "{" not in earlier.path or not (earlier.methods & route.methods):
                    continue
                if earlier.path_regex.match(route.path):
                    raise RuntimeError(f"route {route.path} is shadowed by {earlier.path}")
        seen.append(route)


# ---------------------------
# Error translation
# ---------------------------
def _error_body(message: str, errors: Optional[List[str]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return body

async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [str(e.get("msg", "Invalid request")) for e in exc.errors()]
    return JSONResponse(status_code=400, content=_error_body("Validation failed", errors))

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )

async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body(GENERIC_ERROR_MESSAGE))


# ---------------------------
# App factory
# ---------------------------
def create_app(settings: Optional[Settings] = None, store: Optional[ProductStore] = None) -> FastAPI:
    settings = settings if settings is not None else Settings.from_env()
    set_level(settings.log_level)

    app = FastAPI(title="products-api (in-memory demo)")
    app.state.settings = settings
    app.state.store = store if store is not None else ProductStore(seed=SEED_PRODUCTS)

    # last added runs first: request logging, then CORS, then the /api key check
    app.middleware("http")(api_key_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Hello World from the Products API!"

    app.include_router(router)
    check_route_precedence(app.router.routes)

    if not settings.api_key:
        logger.warning("API_KEY is not set - every /api request will be refused")
    return app


app = create_app()


def run():
    settings = app.state.settings
    logger.info("Server is running on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
