"""Static metadata for listing providers and shared normalization helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from reai.errors import ConfigurationError
from reai.properties.models import PropertyProviderId


@dataclass(frozen=True)
class ProviderField:
    """A credential or setting an admin must supply for a provider."""

    key: str
    label: str
    type: Literal["text", "password", "select"]
    required: bool
    placeholder: str = ""
    description: str = ""


@dataclass(frozen=True)
class PropertyProviderInfo:
    """Metadata describing one listing provider."""

    id: PropertyProviderId
    name: str
    description: str
    website: str
    docs_url: str
    base_url: str
    supported_regions: tuple[str, ...]
    features: tuple[str, ...] = ()
    fields: tuple[ProviderField, ...] = field(default_factory=tuple)
    requires_api_key: bool = True


PROPERTY_PROVIDERS: dict[PropertyProviderId, PropertyProviderInfo] = {
    "showcase_idx": PropertyProviderInfo(
        id="showcase_idx",
        name="Showcase IDX",
        description=(
            "Acceso directo a datos MLS con integración IDX. Ideal para agentes y "
            "brokers con membresía MLS."
        ),
        website="https://showcaseidx.com",
        docs_url="https://showcaseidx.com/docs/api",
        base_url="https://api.showcaseidx.com/v2",
        supported_regions=("US", "CA"),
        features=(
            "Datos MLS en tiempo real",
            "Fotos de alta resolución",
            "Tours virtuales",
            "Información de agentes",
        ),
        fields=(
            ProviderField(
                key="api_key",
                label="API Key",
                type="password",
                required=True,
                description="Obtén tu API key desde el dashboard de Showcase IDX",
            ),
        ),
    ),
    "zillow_bridge": PropertyProviderInfo(
        id="zillow_bridge",
        name="Zillow (Bridge Data Output)",
        description=(
            "Acceso a datos de Zillow y múltiples MLS a través de Bridge Data Output. "
            "Requiere suscripción a MLS específico."
        ),
        website="https://www.zillowgroup.com/developers/",
        docs_url="https://bridgedataoutput.com/docs/platform/",
        base_url="https://api.bridgedataoutput.com/api/v2",
        supported_regions=("US",),
        features=(
            "Datos de Zillow y múltiples MLS",
            "Zestimates (estimaciones de valor)",
            "Datos de vecindarios",
            "Historial de ventas",
        ),
        fields=(
            ProviderField(
                key="api_key",
                label="Access Token",
                type="password",
                required=True,
                description="Token de acceso de Bridge Data Output",
            ),
            ProviderField(
                key="server_token",
                label="Server Token",
                type="password",
                required=True,
                description="Token del servidor para autenticación",
            ),
            ProviderField(
                key="dataset",
                label="Dataset (MLS)",
                type="text",
                required=True,
                placeholder="test, actris, crmls...",
                description="Identificador del MLS al que tienes acceso",
            ),
        ),
    ),
    "realtor_rapidapi": PropertyProviderInfo(
        id="realtor_rapidapi",
        name="Realtor.com (RapidAPI)",
        description=(
            "Acceso a datos de Realtor.com a través de RapidAPI. Propiedades en "
            "venta y alquiler en todo Estados Unidos."
        ),
        website="https://rapidapi.com/apidojo/api/realtor",
        docs_url="https://rapidapi.com/apidojo/api/realtor/details",
        base_url="https://realtor-data1.p.rapidapi.com",
        supported_regions=("US",),
        features=(
            "Propiedades en venta y alquiler",
            "Detalles completos de propiedades",
            "Fotos de alta resolución",
        ),
        fields=(
            ProviderField(
                key="rapidapi_key",
                label="RapidAPI Key",
                type="password",
                required=True,
                description="Tu API Key de RapidAPI para acceder a Realtor Data",
            ),
        ),
    ),
    "xposure": PropertyProviderInfo(
        id="xposure",
        name="Xposure MLS Puerto Rico",
        description="Listados MLS de Puerto Rico importados desde Xposure.",
        website="https://puertorico.xposureapp.com",
        docs_url="https://puertorico.xposureapp.com",
        base_url="",
        supported_regions=("PR",),
        features=("Listados locales de Puerto Rico",),
        requires_api_key=False,
    ),
}

PROPERTY_TYPE_MAP: dict[str, str] = {
    "single family": "house",
    "single-family": "house",
    "singlefamily": "house",
    "house": "house",
    "condo": "condo",
    "condominium": "condo",
    "apartment": "apartment",
    "townhouse": "townhouse",
    "townhome": "townhouse",
    "multi-family": "multi_family",
    "multifamily": "multi_family",
    "land": "land",
    "lot": "land",
    "commercial": "commercial",
}


def get_property_provider_info(provider: str) -> PropertyProviderInfo:
    """Return metadata for *provider*."""
    info = PROPERTY_PROVIDERS.get(provider)  # type: ignore[call-overload]
    if info is None:
        raise ConfigurationError(
            f"Unknown property provider: {provider!r}",
            hint=f"Supported providers: {', '.join(PROPERTY_PROVIDERS)}",
        )
    return info


def normalize_property_type(value: str) -> str:
    """Map a provider's property type onto the shared vocabulary."""
    normalized = value.lower().strip()
    return PROPERTY_TYPE_MAP.get(normalized, normalized)


def mask_secret(value: str | None) -> str:
    """Mask a provider credential for display, keeping its first and last 4 chars."""
    if not value or len(value) < 12:
        return "••••••••"
    return f"{value[:4]}••••{value[-4:]}"
