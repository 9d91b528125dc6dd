"""
HTTP API — FastAPI application over the services container.

Routes unwrap `Result` values; error values become `{message, error}` bodies
with a status picked by error type.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from kungfu import Ok, Error

from orderdesk._types import OrderDeskError, StoreUnavailable
from orderdesk.cache import CacheUnavailable, Tier
from orderdesk.config import Settings
from orderdesk.orders import OrderMutationFailed, OrderNotFound
from orderdesk.services import Services, build_services
from orderdesk.api._schemas import (
    CreateOrderIn,
    DiscountResultOut,
    MessageOut,
    OrderData,
    OrderListData,
    OrderOut,
    OrderSaved,
    UpdateOrderIn,
)

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ApiError(Exception):
    """Error value lifted to an HTTP response."""

    def __init__(self, status_code: int, message: str, error: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error


def status_for(error: OrderDeskError) -> int:
    match error:
        case OrderNotFound():
            return 404
        case CacheUnavailable() | StoreUnavailable():
            return 503
        case OrderMutationFailed():
            return 500
        case _:
            # Business rules: stock, quantity, unknown customer/product
            return 422


def fail(error: OrderDeskError, message: str) -> ApiError:
    return ApiError(status_for(error), message, str(error))


# ═══════════════════════════════════════════════════════════════════════════════
# Dependencies
# ═══════════════════════════════════════════════════════════════════════════════


def get_services(request: Request) -> Services:
    services: Services = request.app.state.services
    return services


ServicesDep = Annotated[Services, Depends(get_services)]


# ═══════════════════════════════════════════════════════════════════════════════
# Application
# ═══════════════════════════════════════════════════════════════════════════════


def create_app(
    settings: Settings | None = None,
    *,
    tiers: tuple[Tier[object], ...] | None = None,
) -> FastAPI:
    """
    Build the app. Services are created on startup and disposed on shutdown.

    Example:
        app = create_app(Settings.from_env())
        uvicorn.run(app)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.services = await build_services(settings, tiers=tiers)
        try:
            yield
        finally:
            await app.state.services.close()

    app = FastAPI(title="orderdesk", lifespan=lifespan)

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "error": exc.error},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "message": "The given data was invalid.",
                "error": jsonable_encoder(exc.errors()),
            },
        )

    # ───────────────────────────────────────────────────────────────────────
    # Routes
    # ───────────────────────────────────────────────────────────────────────

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/orders")
    async def list_orders(services: ServicesDep) -> OrderListData:
        match await services.read_cache.get_all_orders():
            case Ok(orders):
                return OrderListData(data=[OrderOut.from_domain(o) for o in orders])
            case Error(e):
                raise fail(e, "Error loading orders")

    @app.get("/orders/{order_id}")
    async def show_order(order_id: int, services: ServicesDep) -> OrderData:
        match await services.read_cache.get_order(order_id):
            case Ok(order):
                return OrderData(data=OrderOut.from_domain(order))
            case Error(e):
                raise fail(e, "Error loading order")

    @app.post("/orders", status_code=201)
    async def create_order(body: CreateOrderIn, services: ServicesDep) -> OrderSaved:
        match await services.lifecycle.create(body.customer_id, body.to_domain()):
            case Ok(order):
                return OrderSaved(
                    data=OrderOut.from_domain(order),
                    message="Order created successfully",
                )
            case Error(e):
                raise fail(e, "Error creating order")

    @app.put("/orders/{order_id}")
    async def update_order(
        order_id: int, body: UpdateOrderIn, services: ServicesDep
    ) -> OrderSaved:
        match await services.lifecycle.update(order_id, body.to_domain()):
            case Ok(order):
                return OrderSaved(
                    data=OrderOut.from_domain(order),
                    message="Order updated successfully",
                )
            case Error(e):
                raise fail(e, "Error updating order")

    @app.delete("/orders/{order_id}")
    async def delete_order(order_id: int, services: ServicesDep) -> MessageOut:
        match await services.lifecycle.delete(order_id):
            case Ok(_):
                return MessageOut(message="Order deleted successfully")
            case Error(e):
                raise fail(e, "Error deleting order")

    @app.post("/orders/{order_id}/calculate-discount")
    async def calculate_discount(order_id: int, services: ServicesDep) -> DiscountResultOut:
        match await services.discounts.calculate(order_id):
            case Ok(result):
                return DiscountResultOut.from_domain(result)
            case Error(e):
                raise fail(e, "Error calculating discount")

    return app


__all__ = ("create_app", "ApiError", "status_for", "get_services")
