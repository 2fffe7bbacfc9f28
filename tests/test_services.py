"""Real-estate AI services: prompt building and response parsing."""

from __future__ import annotations

import json

import pytest

from reai.client import AIClient
from reai.config import ProviderConfig
from reai.errors import ServiceError
from reai.services import (
    DEFAULT_HASHTAGS,
    DemandRequest,
    LifestyleProfile,
    PropertyData,
    ViralContentRequest,
    analyze_demand,
    analyze_lifestyle_profile,
    build_lifestyle_prompt,
    build_matching_prompt,
    build_viral_content_prompt,
    calculate_profile_similarity,
    create_property_embedding,
    generate_equity_forecast,
    generate_viral_content,
    match_properties_with_profile,
    parse_suggested_locations,
)
from tests.helpers import ScriptedProvider, loader_for, route_providers

pytestmark = pytest.mark.unit

PROFILE = LifestyleProfile(
    ideal_life_description="Quiero vivir cerca de la playa en Rincón y surfear cada mañana",
    priorities="tranquilidad, naturaleza",
    budget=450000,
    purpose="retiro",
    main_priority="tranquilidad",
    timeline="pronto",
)

LISTINGS = [
    PropertyData(id="p1", title="Casa de playa", price=420000, city="Rincón"),
    PropertyData(id="p2", title="Apartamento urbano", price=300000, city="San Juan"),
]


def _client(
    monkeypatch: pytest.MonkeyPatch, config: ProviderConfig, replies: list[str]
) -> tuple[AIClient, ScriptedProvider]:
    provider = ScriptedProvider(script=list(replies))
    route_providers(
        monkeypatch, {config.provider: provider}, "reai.orchestrator", "reai.embeddings"
    )
    return AIClient(loader=loader_for(config)), provider


@pytest.mark.asyncio
async def test_lifestyle_analysis_parses_and_embeds(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    reply = json.dumps(
        {
            "keywords": ["playa", "surf"],
            "summary": "Retiro costero",
            "lifestyleType": "costero",
            "suggestedLocations": [
                {"city": "Rincón", "state": "PR", "country": "PR", "region": "puerto_rico"}
            ],
        }
    )
    client, provider = _client(monkeypatch, openai_config, [reply])

    analysis = await analyze_lifestyle_profile(client, PROFILE)

    assert analysis.keywords == ["playa", "surf"]
    assert analysis.lifestyle_type == "costero"
    assert analysis.suggested_location is not None
    assert analysis.suggested_location.city == "Rincón"
    assert analysis.embedding == [1.0, 0.0, 0.0]
    text, _model = provider.embed_calls[0]
    assert text.endswith("playa surf")
    _, options = provider.complete_calls[0]
    assert options.json_mode is True
    assert options.task == "analysis"


@pytest.mark.asyncio
async def test_lifestyle_analysis_defaults_missing_fields(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, _ = _client(monkeypatch, openai_config, ["{}"])

    analysis = await analyze_lifestyle_profile(client, PROFILE)

    assert analysis.keywords == []
    assert analysis.summary == PROFILE.ideal_life_description[:200]
    assert analysis.lifestyle_type == "general"
    assert analysis.suggested_locations == []


@pytest.mark.asyncio
async def test_invalid_json_raises_service_error(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, _ = _client(monkeypatch, openai_config, ["not json"])

    with pytest.raises(ServiceError) as exc:
        await analyze_lifestyle_profile(client, PROFILE)
    assert isinstance(exc.value.__cause__, json.JSONDecodeError)


@pytest.mark.asyncio
async def test_json_array_is_not_an_object(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, _ = _client(monkeypatch, openai_config, ["[1, 2]"])

    with pytest.raises(ServiceError, match="JSON object"):
        await analyze_demand(client, DemandRequest(city="Dorado", time_range="6 meses"))


def test_legacy_single_location_is_accepted() -> None:
    locations = parse_suggested_locations(
        {"suggestedLocation": {"city": "Austin", "state": "TX"}}
    )
    assert len(locations) == 1
    assert locations[0].region == "us_mainland"
    assert locations[0].country == "US"


def test_empty_locations_are_skipped() -> None:
    locations = parse_suggested_locations(
        {"suggestedLocations": [{"city": None, "state": None}, {"state": "PR"}, "junk"]}
    )
    assert [loc.state for loc in locations] == ["PR"]
    assert locations[0].region == "puerto_rico"


def test_lifestyle_prompt_formats_budget() -> None:
    prompt = build_lifestyle_prompt(PROFILE)
    assert "$450,000" in prompt
    assert "Ubicación preferida por el usuario: No especificada" in prompt


def test_matching_prompt_adds_purpose_context() -> None:
    prompt = build_matching_prompt(PROFILE, LISTINGS)
    assert "Retiro / Jubilación" in prompt
    assert "INSTRUCCIONES PARA TRANQUILIDAD" in prompt
    assert "1. ID: p1" in prompt and "2. ID: p2" in prompt


@pytest.mark.asyncio
async def test_matching_empty_list_skips_model_call(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, provider = _client(monkeypatch, openai_config, [])

    assert await match_properties_with_profile(client, PROFILE, []) == []
    assert provider.complete_calls == []


@pytest.mark.asyncio
async def test_matching_clamps_scores_and_derives_fit(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    reply = json.dumps(
        {
            "matches": [
                {"propertyId": "p1", "matchScore": 140, "matchReasons": ["Frente al mar"]},
                {"propertyId": "p2", "matchScore": "55", "lifestyleFit": "fair"},
                {"matchScore": 99},
            ]
        }
    )
    client, provider = _client(monkeypatch, openai_config, [reply])

    matches = await match_properties_with_profile(client, PROFILE, LISTINGS)

    assert [(m.property_id, m.match_score, m.lifestyle_fit) for m in matches] == [
        ("p1", 100, "excellent"),
        ("p2", 55, "fair"),
    ]
    assert matches[0].match_reasons == ["Frente al mar"]
    _, options = provider.complete_calls[0]
    assert options.max_tokens == 8000


@pytest.mark.asyncio
async def test_demand_defaults(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    reply = json.dumps({"trend": "booming", "hotZones": [{"name": "Condado", "score": 90}, {}]})
    client, _ = _client(monkeypatch, openai_config, [reply])

    analysis = await analyze_demand(client, DemandRequest(city="San Juan", time_range="1 año"))

    assert analysis.demand_score == 50
    assert analysis.trend == "stable"
    assert analysis.insights == []
    assert [z.name for z in analysis.hot_zones] == ["Condado"]


@pytest.mark.asyncio
async def test_lifestyle_analysis_ignores_non_string_text_fields(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    reply = json.dumps({"summary": {"es": "Retiro"}, "lifestyleType": 7})
    client, _ = _client(monkeypatch, openai_config, [reply])

    analysis = await analyze_lifestyle_profile(client, PROFILE)

    assert analysis.summary == PROFILE.ideal_life_description[:200]
    assert analysis.lifestyle_type == "general"


def test_viral_content_prompt_uses_platform_and_type() -> None:
    prompt = build_viral_content_prompt(
        ViralContentRequest(prompt="Invertir en Dorado", content_type="story", platform="tiktok")
    )

    assert 'Genera contenido viral sobre: "Invertir en Dorado"' in prompt
    assert "Corto, rápido, con hooks inmediatos" in prompt
    assert "secuencia de 3-4 stories" in prompt
    assert "Inversionistas inmobiliarios en Puerto Rico" in prompt


@pytest.mark.asyncio
async def test_viral_content_parses_reply(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    reply = json.dumps(
        {
            "content": "Dorado te espera",
            "hook": "¿Sabías que...?",
            "hashtags": ["#Dorado"],
            "viralScore": 91,
            "tips": ["Publica a las 7pm"],
        }
    )
    client, provider = _client(monkeypatch, openai_config, [reply])

    content = await generate_viral_content(client, ViralContentRequest(prompt="Dorado"))

    assert content.hashtags == ["#Dorado"]
    assert content.viral_score == 91
    assert content.tips == ["Publica a las 7pm"]
    _, options = provider.complete_calls[0]
    assert options.json_mode is True
    assert options.task == "content"
    assert options.temperature == 0.8


@pytest.mark.asyncio
async def test_viral_content_defaults(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, _ = _client(monkeypatch, openai_config, ["{}"])

    content = await generate_viral_content(client, ViralContentRequest(prompt="Condado"))

    assert content.content == ""
    assert content.hook == ""
    assert content.hashtags == list(DEFAULT_HASHTAGS)
    assert content.hashtags == ["#BienesRaices", "#RealEstate", "#Inversion"]
    assert content.viral_score == 70
    assert content.tips == []


@pytest.mark.asyncio
async def test_viral_content_invalid_json(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, _ = _client(monkeypatch, openai_config, ["<html>oops</html>"])

    with pytest.raises(ServiceError, match="viral content"):
        await generate_viral_content(client, ViralContentRequest(prompt="Condado"))


@pytest.mark.asyncio
async def test_equity_forecast_parses_reply(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    reply = json.dumps(
        {
            "predictedValue1Y": 460000,
            "predictedValue3Y": 510000,
            "predictedValue5Y": 590000,
            "predictedValue10Y": 780000,
            "confidenceLevel": 82,
            "remodelTips": [
                {"improvement": "Cocina", "cost": 25000, "addedValue": 45000, "roi": 80},
                {"cost": 1},
            ],
            "zoningInfo": "R-4",
            "developmentOpportunities": ["ADU"],
        }
    )
    client, provider = _client(monkeypatch, openai_config, [reply])

    forecast = await generate_equity_forecast(client, LISTINGS[0], 420000)

    assert forecast.predicted_value_1y == 460000
    assert forecast.predicted_value_10y == 780000
    assert forecast.confidence_level == 82
    assert [t.improvement for t in forecast.remodel_tips] == ["Cocina"]
    assert forecast.remodel_tips[0].added_value == 45000
    assert forecast.zoning_info == "R-4"
    assert forecast.development_opportunities == ["ADU"]
    messages, _ = provider.complete_calls[0]
    assert "Valor actual: $420,000" in messages[-1].content


@pytest.mark.asyncio
async def test_equity_forecast_defaults(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, _ = _client(monkeypatch, openai_config, [json.dumps({"predictedValue3Y": 0})])

    forecast = await generate_equity_forecast(client, LISTINGS[0], 100000)

    assert forecast.predicted_value_1y == pytest.approx(108000)
    assert forecast.predicted_value_3y == pytest.approx(125000)
    assert forecast.predicted_value_5y == pytest.approx(145000)
    assert forecast.predicted_value_10y == pytest.approx(200000)
    assert forecast.confidence_level == 75
    assert forecast.remodel_tips == []
    assert forecast.zoning_info == "No disponible"
    assert forecast.development_opportunities == []


@pytest.mark.asyncio
async def test_equity_forecast_invalid_json(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, _ = _client(monkeypatch, openai_config, ["{truncated"])

    with pytest.raises(ServiceError) as exc:
        await generate_equity_forecast(client, LISTINGS[0], 100000)
    assert isinstance(exc.value.__cause__, json.JSONDecodeError)


@pytest.mark.asyncio
async def test_property_embedding_includes_features(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    client, provider = _client(monkeypatch, openai_config, [])
    listing = PropertyData(
        id="p3",
        title="Villa",
        price=900000,
        city="Dorado",
        amenities=("piscina",),
        features=("vista al mar", "generador"),
        bedrooms=4,
    )

    embedding = await create_property_embedding(client, listing)

    assert embedding == [1.0, 0.0, 0.0]
    text, _model = provider.embed_calls[0]
    assert "Características: vista al mar, generador" in text
    assert "Amenidades: piscina" in text
    assert "4 habitaciones" in text
    assert provider.complete_calls == []


def test_profile_similarity() -> None:
    assert calculate_profile_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert calculate_profile_similarity([1.0, 0.0], [0.0, 2.0]) == 0.0
