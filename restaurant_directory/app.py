from __future__ import annotations

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .restaurants.config import ServiceConfig
from .restaurants.coordinator import RestaurantDirectory
from .restaurants.errors import BackendError, DuplicateError, NotFoundError
from .restaurants.models import (
    CacheStats,
    RatingRequest,
    RestaurantCreate,
    RestaurantView,
    SuccessResponse,
)
from .restaurants.query import RestaurantQueryService
from .restaurants.services import get_config, get_directory, get_query_service

app = FastAPI(title="Restaurant Directory API", version="1.0.0")


# ── Error mapping ────────────────────────────────────────────────────────


@app.exception_handler(DuplicateError)
async def duplicate_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"success": False, "message": exc.message})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"success": False, "message": exc.message})


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": exc.message, "error": exc.detail},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Raw inputs are left out: a NaN or Infinity input cannot be rendered as JSON.
    errors = [
        {key: value for key, value in err.items() if key not in ("input", "ctx")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


# ── Service endpoints ────────────────────────────────────────────────────


@app.get("/")
def service_info(config: ServiceConfig = Depends(get_config)) -> dict:
    return {
        "cache_endpoint": config.cache_endpoint,
        "table_name": config.table_name,
        "aws_region": config.aws_region,
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/cache/stats", response_model=CacheStats)
def cache_stats(directory: RestaurantDirectory = Depends(get_directory)) -> CacheStats:
    return CacheStats(**directory.cache_stats())


# ── Restaurant endpoints ─────────────────────────────────────────────────


@app.post("/restaurants", response_model=SuccessResponse)
def create_restaurant(
    body: RestaurantCreate,
    directory: RestaurantDirectory = Depends(get_directory),
) -> SuccessResponse:
    directory.create(body.name, body.cuisine, body.region)
    return SuccessResponse()


@app.post("/restaurants/rating", response_model=SuccessResponse)
def rate_restaurant(
    body: RatingRequest,
    directory: RestaurantDirectory = Depends(get_directory),
) -> SuccessResponse:
    directory.rate(body.name, body.rating)
    return SuccessResponse()


@app.get("/restaurants/cuisine/{cuisine}", response_model=list[RestaurantView])
def restaurants_by_cuisine(
    cuisine: str,
    limit: int | None = None,
    queries: RestaurantQueryService = Depends(get_query_service),
) -> list[RestaurantView]:
    return queries.query(cuisine=cuisine, limit=limit)


@app.get("/restaurants/region/{region}", response_model=list[RestaurantView])
def restaurants_by_region(
    region: str,
    limit: int | None = None,
    queries: RestaurantQueryService = Depends(get_query_service),
) -> list[RestaurantView]:
    return queries.query(region=region, limit=limit)


@app.get(
    "/restaurants/region/{region}/cuisine/{cuisine}",
    response_model=list[RestaurantView],
)
def restaurants_by_region_and_cuisine(
    region: str,
    cuisine: str,
    limit: int | None = None,
    queries: RestaurantQueryService = Depends(get_query_service),
) -> list[RestaurantView]:
    return queries.query(cuisine=cuisine, region=region, limit=limit)


@app.get("/restaurants/{name}", response_model=RestaurantView)
def get_restaurant(
    name: str,
    directory: RestaurantDirectory = Depends(get_directory),
) -> RestaurantView:
    return directory.get(name)


@app.delete("/restaurants/{name}", response_model=SuccessResponse)
def delete_restaurant(
    name: str,
    directory: RestaurantDirectory = Depends(get_directory),
) -> SuccessResponse:
    directory.delete(name)
    return SuccessResponse()
