"""Real-estate AI services built on multi-provider completions.

Analysis and content services send a Spanish JSON-mode prompt through
``AIClient.complete_multi`` and parse the merged answer into a dataclass.
Listing embeddings go through ``AIClient.create_embedding``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from typing import TYPE_CHECKING, Any, Literal

from reai.embeddings import cosine_similarity
from reai.errors import ServiceError
from reai.prompts import SYSTEM_PROMPTS
from reai.providers.models import ChatMessage, CompletionOptions

if TYPE_CHECKING:
    from reai.client import AIClient

logger = logging.getLogger(__name__)

Region = Literal["puerto_rico", "us_mainland", "other"]
LifestyleFit = Literal["excellent", "good", "fair", "poor"]
Trend = Literal["increasing", "stable", "decreasing"]


@dataclass(frozen=True)
class LifestyleProfile:
    """What a buyer wants from their next home."""

    ideal_life_description: str
    priorities: str = ""
    budget: float | None = None
    location: str | None = None
    preferred_property_types: tuple[str, ...] = ()
    purpose: str | None = None
    timeline: str | None = None
    main_priority: str | None = None


@dataclass(frozen=True)
class SuggestedLocation:
    """A location the model detected in the profile text."""

    city: str | None = None
    state: str | None = None
    country: str = "US"
    postal_code: str | None = None
    region: Region = "us_mainland"


@dataclass(frozen=True)
class LifestyleAnalysis:
    """Structured reading of a lifestyle profile."""

    keywords: list[str]
    summary: str
    lifestyle_type: str
    suggested_locations: list[SuggestedLocation] = field(default_factory=list)
    embedding: list[float] | None = None

    @property
    def suggested_location(self) -> SuggestedLocation | None:
        """First detected location, if any."""
        return self.suggested_locations[0] if self.suggested_locations else None


@dataclass(frozen=True)
class PropertyData:
    """Listing facts sent to the matcher."""

    id: str
    title: str
    price: float
    description: str = ""
    address: str = ""
    city: str = ""
    amenities: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    bedrooms: int | None = None
    bathrooms: float | None = None
    square_feet: int | None = None
    neighborhood: str | None = None
    year_built: int | None = None


@dataclass(frozen=True)
class PropertyMatch:
    """Compatibility verdict for one listing."""

    property_id: str
    match_score: int
    match_reasons: list[str]
    lifestyle_fit: LifestyleFit


@dataclass(frozen=True)
class DemandRequest:
    """Market to analyze."""

    city: str
    time_range: str
    property_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class HotZone:
    """A high-demand area within the analyzed market."""

    name: str
    score: int
    reason: str = ""


@dataclass(frozen=True)
class DemandAnalysis:
    """Demand forecast for a market."""

    demand_score: int
    trend: Trend
    insights: list[str]
    recommendations: list[str]
    hot_zones: list[HotZone]


_PURPOSE_LABELS = {
    "vivir": "Vivir / Residencia principal",
    "retiro": "Retiro / Jubilación",
    "invertir": "Inversión inmobiliaria",
    "negocio": "Establecer un negocio",
    "no_seguro": "Explorando opciones",
}
_PRIORITY_LABELS = {
    "tranquilidad": "Tranquilidad y paz",
    "social": "Cercanía y vida social",
    "crecimiento": "Oportunidad de crecimiento",
    "estabilidad": "Estabilidad a largo plazo",
    "flexibilidad": "Flexibilidad",
}
_TIMELINE_LABELS = {
    "inmediato": "Inmediato (0-3 meses)",
    "pronto": "Pronto (3-6 meses)",
    "explorando": "Explorando (6+ meses)",
}

_PURPOSE_INSTRUCTIONS = {
    "invertir": (
        "INSTRUCCIONES PARA INVERSIÓN:\n"
        "- Menciona el potencial de valorización del área\n"
        "- Indica si es zona con alta demanda de alquiler (turístico o largo plazo)\n"
        "- Evalúa el ROI potencial basado en alquileres del mercado"
    ),
    "vivir": (
        "INSTRUCCIONES PARA RESIDENCIA:\n"
        "- Evalúa la tranquilidad y seguridad del área\n"
        "- Si hay riesgos conocidos (zonas inundables, ruido, tráfico), mencionarlos claramente"
    ),
    "retiro": (
        "INSTRUCCIONES PARA RESIDENCIA:\n"
        "- Evalúa la tranquilidad y seguridad del área\n"
        "- Evalúa acceso a servicios médicos"
    ),
    "negocio": (
        "INSTRUCCIONES PARA NEGOCIO:\n"
        "- Evalúa el flujo de tráfico y visibilidad comercial\n"
        "- Indica si la zona es comercial o residencial"
    ),
}
_PRIORITY_INSTRUCTIONS = {
    "social": (
        "INSTRUCCIONES PARA CERCANÍA SOCIAL:\n"
        "- Menciona escuelas, centros comerciales, supermercados y hospitales "
        "cercanos con nombres específicos"
    ),
    "tranquilidad": (
        "INSTRUCCIONES PARA TRANQUILIDAD:\n"
        "- Evalúa si es zona residencial tranquila y la privacidad respecto a vecinos"
    ),
    "crecimiento": (
        "INSTRUCCIONES PARA CRECIMIENTO:\n"
        "- Menciona desarrollos urbanos planificados y la tendencia de precios"
    ),
}
_PUERTO_RICO_CONTEXT = (
    "INFORMACIÓN CONTEXTUAL DE PUERTO RICO (usar si aplica):\n"
    "- Zonas con riesgo de inundación: Loíza, partes bajas de Carolina, Cataño\n"
    "- Zonas premium: Condado, Ocean Park, Dorado Beach, Palmas del Mar, Guaynabo\n"
    "- Alta demanda turística: Isla Verde, Condado, Rincón, Vieques, Culebra\n"
    "- Si la propiedad está en zona con riesgo de inundación conocido, SIEMPRE mencionarlo"
)


def _format_budget(budget: float | None, default: str) -> str:
    return f"${budget:,.0f}" if budget else default


def _parse_json(raw: str, service: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ServiceError(
            f"{service}: model returned invalid JSON",
            hint="Retry the request; JSON mode may be unsupported by a provider.",
        ) from exc
    if not isinstance(parsed, dict):
        raise ServiceError(f"{service}: expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _as_str(value: Any, default: str) -> str:
    if isinstance(value, str) and value:
        return value
    return default


def _as_float(value: Any, default: float) -> float:
    # 0 and missing both mean "not provided"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number or default


def parse_suggested_locations(parsed: dict[str, Any]) -> list[SuggestedLocation]:
    """Read ``suggestedLocations`` (array) or the legacy ``suggestedLocation`` object."""
    raw_locations = parsed.get("suggestedLocations")
    if isinstance(raw_locations, list):
        candidates = raw_locations
    elif isinstance(parsed.get("suggestedLocation"), dict):
        candidates = [parsed["suggestedLocation"]]
    else:
        return []

    locations = []
    for loc in candidates:
        if not isinstance(loc, dict):
            continue
        if not (loc.get("city") or loc.get("state") or loc.get("country") or loc.get("postalCode")):
            continue
        state = loc.get("state") or None
        region = loc.get("region") or ("puerto_rico" if state == "PR" else "us_mainland")
        locations.append(
            SuggestedLocation(
                city=loc.get("city") or None,
                state=state,
                country=loc.get("country") or "US",
                postal_code=loc.get("postalCode") or None,
                region=region,
            )
        )
    return locations


def build_lifestyle_prompt(profile: LifestyleProfile) -> str:
    """User prompt for lifestyle analysis."""
    types = ", ".join(profile.preferred_property_types) or "No especificados"
    return (
        "Analiza este perfil de estilo de vida para búsqueda de propiedades:\n\n"
        f'Descripción de vida ideal: "{profile.ideal_life_description}"\n'
        f"Prioridades: {profile.priorities}\n"
        f"Presupuesto: {_format_budget(profile.budget, 'No especificado')}\n"
        f"Ubicación preferida por el usuario: {profile.location or 'No especificada'}\n"
        f"Tipos de propiedad: {types}\n\n"
        "Por favor:\n"
        "1. Extrae las palabras clave más importantes (5-10)\n"
        "2. Resume las preferencias principales (2-3 frases)\n"
        "3. Identifica el tipo de estilo de vida (urbano, costero, familiar, rural, profesional, etc.)\n"
        "4. Extrae TODAS las ubicaciones mencionadas en la descripción de vida ideal.\n\n"
        "Responde en formato JSON:\n"
        '{"keywords": ["palabra1", ...], "summary": "resumen breve", '
        '"lifestyleType": "tipo", "suggestedLocations": [{"city": "ciudad o null", '
        '"state": "código de 2 letras", "country": "US o PR", '
        '"region": "puerto_rico | us_mainland | other"}]}\n\n'
        'Para Puerto Rico usa state="PR", country="PR", region="puerto_rico". '
        "Si no hay ubicación clara, devuelve un array vacío []."
    )


async def analyze_lifestyle_profile(
    client: AIClient, profile: LifestyleProfile
) -> LifestyleAnalysis:
    """Extract keywords, summary, lifestyle type and locations; embed the result."""
    raw = await client.complete_multi(
        [
            ChatMessage.system(SYSTEM_PROMPTS["lifestyle_analysis"]),
            ChatMessage.user(build_lifestyle_prompt(profile)),
        ],
        CompletionOptions(temperature=0.7, json_mode=True, task="analysis"),
    )
    parsed = _parse_json(raw, "lifestyle analysis")
    keywords = _str_list(parsed.get("keywords"))
    locations = parse_suggested_locations(parsed)
    logger.debug("Lifestyle analysis extracted %d location(s)", len(locations))

    embedding_text = " ".join(
        [profile.ideal_life_description, profile.priorities, *keywords]
    ).strip()
    embedding = await client.create_embedding(embedding_text)

    return LifestyleAnalysis(
        keywords=keywords,
        summary=_as_str(parsed.get("summary"), profile.ideal_life_description[:200]),
        lifestyle_type=_as_str(parsed.get("lifestyleType"), "general"),
        suggested_locations=locations,
        embedding=embedding,
    )


def _contextual_instructions(purpose: str | None, priority: str | None) -> str:
    parts = [
        _PURPOSE_INSTRUCTIONS.get(purpose or ""),
        _PRIORITY_INSTRUCTIONS.get(priority or ""),
        _PUERTO_RICO_CONTEXT,
    ]
    return "\n\n".join(p for p in parts if p)


def _describe_property(index: int, p: PropertyData) -> str:
    location = f"{p.address}, {p.city}" + (f", {p.neighborhood}" if p.neighborhood else "")
    return (
        f"{index}. ID: {p.id}\n"
        f"   - Título: {p.title}\n"
        f"   - Ubicación: {location}\n"
        f"   - Precio: ${p.price:,.0f}\n"
        f"   - Habitaciones: {p.bedrooms or 'N/A'}, Baños: {p.bathrooms or 'N/A'}\n"
        f"   - Pies cuadrados: {p.square_feet or 'N/A'}\n"
        f"   - Año construcción: {p.year_built or 'N/A'}\n"
        f"   - Amenidades: {', '.join(p.amenities[:8])}\n"
        f"   - Descripción: {p.description[:300]}..."
    )


def build_matching_prompt(profile: LifestyleProfile, properties: list[PropertyData]) -> str:
    """User prompt for property matching."""
    listing = "\n\n".join(_describe_property(i, p) for i, p in enumerate(properties, 1))
    return (
        "Analiza la compatibilidad entre este perfil de usuario y las siguientes propiedades.\n\n"
        "PERFIL DEL USUARIO:\n"
        f'- Vida ideal: "{profile.ideal_life_description}"\n'
        f"- Propósito: {_PURPOSE_LABELS.get(profile.purpose or '', 'No especificado')}\n"
        f"- Prioridad principal: {_PRIORITY_LABELS.get(profile.main_priority or '', 'No especificada')}\n"
        f"- Timeline de compra: {_TIMELINE_LABELS.get(profile.timeline or '', 'No especificado')}\n"
        f"- Prioridades adicionales: {profile.priorities or 'No especificadas'}\n"
        f"- Presupuesto: {_format_budget(profile.budget, 'Flexible')}\n"
        f"- Ubicación preferida: {profile.location or 'Cualquiera en Puerto Rico'}\n\n"
        f"{_contextual_instructions(profile.purpose, profile.main_priority)}\n\n"
        f"PROPIEDADES DISPONIBLES:\n{listing}\n\n"
        "INSTRUCCIONES DE EVALUACIÓN:\n"
        "1. matchScore (0-100)\n"
        "2. matchReasons: 4-6 razones específicas y contextuales\n"
        '3. lifestyleFit: "excellent" (90+), "good" (70-89), "fair" (50-69), "poor" (<50)\n\n'
        'Responde en formato JSON: {"matches": [{"propertyId": "id", "matchScore": 95, '
        '"matchReasons": ["..."], "lifestyleFit": "excellent"}]}'
    )


def _fit_for(score: int) -> LifestyleFit:
    if score >= 90:
        return "excellent"
    if score >= 70:
        return "good"
    if score >= 50:
        return "fair"
    return "poor"


async def match_properties_with_profile(
    client: AIClient, profile: LifestyleProfile, properties: list[PropertyData]
) -> list[PropertyMatch]:
    """Score each listing against *profile*."""
    if not properties:
        return []
    logger.debug("Matching %d properties with AI", len(properties))
    raw = await client.complete_multi(
        [
            ChatMessage.system(SYSTEM_PROMPTS["property_matching"]),
            ChatMessage.user(build_matching_prompt(profile, properties)),
        ],
        CompletionOptions(temperature=0.6, max_tokens=8000, json_mode=True, task="analysis"),
    )
    parsed = _parse_json(raw, "property matching")

    matches: list[PropertyMatch] = []
    for item in parsed.get("matches") or []:
        if not isinstance(item, dict) or not item.get("propertyId"):
            continue
        score = _as_int(item.get("matchScore"), 0)
        fit = item.get("lifestyleFit")
        matches.append(
            PropertyMatch(
                property_id=str(item["propertyId"]),
                match_score=max(0, min(100, score)),
                match_reasons=_str_list(item.get("matchReasons")),
                lifestyle_fit=fit if fit in ("excellent", "good", "fair", "poor") else _fit_for(score),
            )
        )
    logger.debug("AI returned %d matches from %d properties", len(matches), len(properties))
    return matches


def build_demand_prompt(request: DemandRequest) -> str:
    """User prompt for demand analysis."""
    types = ", ".join(request.property_types) or "Todos"
    return (
        f"Analiza la demanda inmobiliaria para: {request.city}\n\n"
        "Contexto:\n"
        f"- Ubicación: {request.city}, Puerto Rico/Latam\n"
        f"- Rango de tiempo: {request.time_range}\n"
        f"- Tipos de propiedad: {types}\n\n"
        "Considera tendencias del mercado, patrones de migración, infraestructura, "
        "inventario, incentivos fiscales (Ley 60) y demanda de alquileres a corto plazo.\n\n"
        "Genera: score de demanda (0-100), tendencia (increasing/stable/decreasing), "
        "3-5 insights, 3 recomendaciones para inversores y zonas hot.\n\n"
        'Responde en formato JSON: {"demandScore": 85, "trend": "increasing", '
        '"insights": ["..."], "recommendations": ["..."], '
        '"hotZones": [{"name": "zona", "score": 90, "reason": "razón"}]}'
    )


async def analyze_demand(client: AIClient, request: DemandRequest) -> DemandAnalysis:
    """Forecast demand for a market, defaulting missing fields."""
    raw = await client.complete_multi(
        [
            ChatMessage.system(SYSTEM_PROMPTS["demand_prediction"]),
            ChatMessage.user(build_demand_prompt(request)),
        ],
        CompletionOptions(temperature=0.6, max_tokens=2000, json_mode=True, task="analysis"),
    )
    parsed = _parse_json(raw, "demand analysis")

    trend = parsed.get("trend")
    hot_zones = [
        HotZone(
            name=str(z.get("name", "")),
            score=_as_int(z.get("score"), 0),
            reason=str(z.get("reason", "")),
        )
        for z in parsed.get("hotZones") or []
        if isinstance(z, dict) and z.get("name")
    ]
    return DemandAnalysis(
        demand_score=_as_int(parsed.get("demandScore") or 50, 50),
        trend=trend if trend in ("increasing", "stable", "decreasing") else "stable",
        insights=_str_list(parsed.get("insights")),
        recommendations=_str_list(parsed.get("recommendations")),
        hot_zones=hot_zones,
    )


ContentType = Literal["post", "story", "video_script", "live_script"]
Platform = Literal["instagram", "facebook", "tiktok", "youtube", "linkedin"]

DEFAULT_HASHTAGS = ("#BienesRaices", "#RealEstate", "#Inversion")
DEFAULT_AUDIENCE = "Inversionistas inmobiliarios en Puerto Rico"

_PLATFORM_INSTRUCTIONS: dict[str, str] = {
    "instagram": "Usa emojis, hashtags, y un tono vibrante. Longitud: 150-300 caracteres.",
    "facebook": "Tono más profesional pero accesible. Incluye call-to-action claro.",
    "tiktok": "Corto, rápido, con hooks inmediatos. Menciona tendencias actuales.",
    "youtube": "Estructura clara con intro, contenido, y CTA. Longitud: 500-1000 palabras.",
    "linkedin": "Tono profesional. Incluye datos y insights de mercado.",
}
_CONTENT_TYPE_INSTRUCTIONS: dict[str, str] = {
    "post": "Crea un post completo con introducción, puntos clave, y CTA.",
    "story": "Crea una secuencia de 3-4 stories con texto corto y emojis.",
    "video_script": "Crea un script de video corto (30-60 segundos) con indicaciones visuales.",
    "live_script": "Crea un guion completo para un live de 30 minutos con secciones y tiempos.",
}

# Value multipliers used when the model omits a projection.
EQUITY_FALLBACK_GROWTH = {"1y": 1.08, "3y": 1.25, "5y": 1.45, "10y": 2.0}


@dataclass(frozen=True)
class ViralContentRequest:
    """Social media content to generate."""

    prompt: str
    content_type: ContentType = "post"
    platform: Platform = "instagram"
    target_audience: str | None = None


@dataclass(frozen=True)
class ViralContent:
    """Generated post with engagement hints."""

    content: str
    hook: str
    hashtags: list[str]
    viral_score: int
    tips: list[str]


@dataclass(frozen=True)
class RemodelTip:
    """An improvement with its estimated return."""

    improvement: str
    cost: float
    added_value: float
    roi: float


@dataclass(frozen=True)
class EquityForecast:
    """Projected property values and improvement advice."""

    predicted_value_1y: float
    predicted_value_3y: float
    predicted_value_5y: float
    predicted_value_10y: float
    confidence_level: int
    remodel_tips: list[RemodelTip]
    zoning_info: str
    development_opportunities: list[str]


def build_viral_content_prompt(request: ViralContentRequest) -> str:
    """User prompt for viral content generation."""
    return (
        f'Genera contenido viral sobre: "{request.prompt}"\n\n'
        f"Tipo de contenido: {request.content_type}\n"
        f"Plataforma: {request.platform}\n"
        f"Audiencia objetivo: {request.target_audience or DEFAULT_AUDIENCE}\n\n"
        "Instrucciones específicas:\n"
        f"- Plataforma: {_PLATFORM_INSTRUCTIONS.get(request.platform, '')}\n"
        f"- Tipo: {_CONTENT_TYPE_INSTRUCTIONS.get(request.content_type, '')}\n\n"
        "Genera contenido que:\n"
        "1. Tenga un hook/encabezado irresistible\n"
        "2. Proporcione valor único y práctico\n"
        "3. Incluya estadísticas o datos relevantes del mercado\n"
        "4. Tenga un call-to-action claro y específico\n"
        "5. Sea optimizado para el algoritmo de la plataforma\n\n"
        'Responde en formato JSON: {"content": "contenido completo", '
        '"hook": "encabezado hook (primeras 10-15 palabras)", '
        '"hashtags": ["hashtag1", "hashtag2"], "viralScore": 85, '
        '"tips": ["tip para maximizar engagement 1", "tip 2"]}'
    )


async def generate_viral_content(
    client: AIClient, request: ViralContentRequest
) -> ViralContent:
    """Write a social media post for *request*'s platform and format."""
    raw = await client.complete_multi(
        [
            ChatMessage.system(SYSTEM_PROMPTS["viral_content"]),
            ChatMessage.user(build_viral_content_prompt(request)),
        ],
        CompletionOptions(temperature=0.8, max_tokens=2000, json_mode=True, task="content"),
    )
    parsed = _parse_json(raw, "viral content")
    return ViralContent(
        content=_as_str(parsed.get("content"), ""),
        hook=_as_str(parsed.get("hook"), ""),
        hashtags=_str_list(parsed.get("hashtags")) or list(DEFAULT_HASHTAGS),
        viral_score=_as_int(parsed.get("viralScore") or 70, 70),
        tips=_str_list(parsed.get("tips")),
    )


def build_equity_prompt(prop: PropertyData, current_value: float) -> str:
    """User prompt for equity forecasting."""
    return (
        "Analiza y proyecta el valor de esta propiedad:\n\n"
        "PROPIEDAD:\n"
        f"- Título: {prop.title}\n"
        f"- Ubicación: {prop.address}, {prop.city}\n"
        f"- Valor actual: ${current_value:,.0f}\n"
        f"- Tipo: {prop.bedrooms or 'N/A'} hab, {prop.bathrooms or 'N/A'} baños, "
        f"{prop.square_feet or 'N/A'} sqft\n"
        f"- Amenidades: {', '.join(prop.amenities)}\n"
        f"- Descripción: {prop.description[:300]}\n\n"
        f"Genera proyecciones de plusvalía considerando tendencias del mercado en "
        f"{prop.city}, desarrollo de infraestructura cercana, patrones históricos de "
        "valorización en PR, demanda de la zona y potencial de mejoras.\n\n"
        "Incluye recomendaciones de remodelación con ROI estimado, información de "
        "zonificación y oportunidades de desarrollo.\n\n"
        'Responde en formato JSON: {"predictedValue1Y": 520000, "predictedValue3Y": 580000, '
        '"predictedValue5Y": 680000, "predictedValue10Y": 850000, "confidenceLevel": 82, '
        '"remodelTips": [{"improvement": "Renovación de cocina", "cost": 25000, '
        '"addedValue": 45000, "roi": 80}], '
        '"zoningInfo": "Residencial R-4, permite construcción de ADU", '
        '"developmentOpportunities": ["oportunidad 1", "oportunidad 2"]}'
    )


async def generate_equity_forecast(
    client: AIClient, prop: PropertyData, current_value: float
) -> EquityForecast:
    """Project *prop*'s value at 1, 3, 5 and 10 years.

    Missing projections fall back to fixed growth multipliers of
    *current_value*.
    """
    raw = await client.complete_multi(
        [
            ChatMessage.system(SYSTEM_PROMPTS["equity_forecast"]),
            ChatMessage.user(build_equity_prompt(prop, current_value)),
        ],
        CompletionOptions(temperature=0.6, max_tokens=2000, json_mode=True, task="analysis"),
    )
    parsed = _parse_json(raw, "equity forecast")

    def projected(key: str, horizon: str) -> float:
        return _as_float(parsed.get(key), current_value * EQUITY_FALLBACK_GROWTH[horizon])

    tips = [
        RemodelTip(
            improvement=str(t["improvement"]),
            cost=_as_float(t.get("cost"), 0.0),
            added_value=_as_float(t.get("addedValue"), 0.0),
            roi=_as_float(t.get("roi"), 0.0),
        )
        for t in parsed.get("remodelTips") or []
        if isinstance(t, dict) and t.get("improvement")
    ]
    return EquityForecast(
        predicted_value_1y=projected("predictedValue1Y", "1y"),
        predicted_value_3y=projected("predictedValue3Y", "3y"),
        predicted_value_5y=projected("predictedValue5Y", "5y"),
        predicted_value_10y=projected("predictedValue10Y", "10y"),
        confidence_level=_as_int(parsed.get("confidenceLevel") or 75, 75),
        remodel_tips=tips,
        zoning_info=_as_str(parsed.get("zoningInfo"), "No disponible"),
        development_opportunities=_str_list(parsed.get("developmentOpportunities")),
    )


def property_embedding_text(prop: PropertyData) -> str:
    """Text embedded for a listing."""
    return (
        f"{prop.title} {prop.description}\n"
        f"Ubicación: {prop.city}, {prop.address}\n"
        f"Amenidades: {', '.join(prop.amenities)}\n"
        f"Características: {', '.join(prop.features)}\n"
        f"{prop.bedrooms or ''} habitaciones {prop.bathrooms or ''} baños"
    )


async def create_property_embedding(client: AIClient, prop: PropertyData) -> list[float]:
    """Embed a listing so it can be compared with a lifestyle embedding."""
    return await client.create_embedding(property_embedding_text(prop))


def calculate_profile_similarity(
    profile_embedding: list[float], property_embedding: list[float]
) -> float:
    """Cosine similarity between a profile and a listing embedding."""
    return cosine_similarity(profile_embedding, property_embedding)
