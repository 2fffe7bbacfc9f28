"""Normalized listing models shared by every listing provider.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``), matching the JSON the web front end reads.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PropertyProviderId = Literal["showcase_idx", "zillow_bridge", "realtor_rapidapi", "xposure"]
ListingStatus = Literal["active", "pending", "sold", "off_market"]


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PropertySearchParams(_Model):
    """Provider-neutral search filters."""

    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    property_type: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    min_square_feet: int | None = None
    max_square_feet: int | None = None
    status: Literal["active", "pending", "sold"] | None = None
    limit: int = Field(default=20, ge=1)
    offset: int = Field(default=0, ge=0)
    sort_by: Literal["price", "listDate", "squareFeet"] | None = None
    sort_order: Literal["asc", "desc"] | None = None


class Address(_Model):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "US"


class Coordinates(_Model):
    latitude: float
    longitude: float


class PropertyDetails(_Model):
    property_type: str = "house"
    bedrooms: int = 0
    bathrooms: float = 0
    square_feet: int = 0
    lot_size: float | None = None
    year_built: int | None = None


class Agent(_Model):
    name: str = ""
    email: str | None = None
    phone: str | None = None
    company: str | None = None


class NormalizedProperty(_Model):
    """A listing in the common shape, whatever its source."""

    id: str
    source_provider: PropertyProviderId
    external_id: str
    mls_number: str | None = None
    title: str
    description: str = ""
    price: float = 0
    address: Address = Field(default_factory=Address)
    coordinates: Coordinates | None = None
    details: PropertyDetails = Field(default_factory=PropertyDetails)
    features: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    virtual_tour_url: str | None = None
    video_url: str | None = None
    agent: Agent | None = None
    list_date: str = ""
    modified_date: str = ""
    status: ListingStatus = "active"


class PropertySearchResponse(_Model):
    """One provider's answer to a search."""

    success: bool
    properties: list[NormalizedProperty] = Field(default_factory=list)
    total: int = 0
    limit: int = 20
    offset: int = 0
    provider: PropertyProviderId
    error: str | None = None


class ConnectionCheck(_Model):
    """Result of a listing provider connectivity test."""

    success: bool
    message: str


class AggregatedSearchResult(_Model):
    """Merged results across every queried listing provider."""

    success: bool
    properties: list[NormalizedProperty] = Field(default_factory=list)
    total_by_provider: dict[str, int] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    providers_queried: list[PropertyProviderId] = Field(default_factory=list)
