from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RestaurantCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Unique restaurant name")
    cuisine: str
    region: str


class RatingRequest(BaseModel):
    name: str = Field(..., min_length=1)
    rating: float = Field(..., allow_inf_nan=False)


class Restaurant(BaseModel):
    """Full durable record, as stored and as mirrored in the cache."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    cuisine: str | None = None
    region: str | None = None
    rating: float = 0.0
    num_ratings: int = Field(default=0, alias="numRatings")

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "Restaurant":
        """Build a record from a raw store/cache item.

        Missing or null ``rating``/``numRatings`` are read as zero.
        """
        data = dict(item)
        data["rating"] = float(data.get("rating") or 0)
        data["numRatings"] = int(data.get("numRatings") or 0)
        return cls.model_validate(data)

    def to_item(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def to_view(self) -> "RestaurantView":
        return RestaurantView(
            name=self.name,
            cuisine=self.cuisine,
            rating=self.rating,
            region=self.region,
        )


class RestaurantView(BaseModel):
    name: str
    cuisine: str | None
    rating: float
    region: str | None


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str | None = None


class CacheStats(BaseModel):
    enabled: bool
    size: int | None
    hits: int
    misses: int
    hit_rate: float
