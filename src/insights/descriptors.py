# src/insights/descriptors.py — v1
"""Build request descriptors from dashboard inputs.

Each builder extracts exactly the params its prompt needs: latest health
index values, Celsius-rounded weather summaries, the user's message. No
builder puts wall-clock time in params, so equal inputs always produce
equal fingerprints. The one date-derived value (days since sowing) is
computed from an explicit ``today`` argument.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Sequence

from agrosight.core.models import (
    ChatTurn,
    CropHealthSnapshot,
    FarmContext,
    RequestDescriptor,
    WeatherDay,
)

_EMPTY_HEALTH = CropHealthSnapshot()


def _weather_summary(
    weather: Sequence[WeatherDay] | None,
    days: int,
    fields: Iterable[str] = ("temp_max_c", "rain_pct"),
) -> list[dict[str, Any]]:
    """First *days* forecast days reduced to the listed fields."""
    summary = []
    for day in list(weather or [])[:days]:
        entry: dict[str, Any] = {"description": day.description}
        for name in fields:
            entry[name] = getattr(day, name)
        summary.append(entry)
    return summary


def _farm_params(farm: FarmContext | None, health: CropHealthSnapshot) -> dict[str, Any]:
    farm = farm or FarmContext()
    return {
        "field_id": farm.field_id,
        "crop": farm.crop,
        "location": farm.location,
        "field_area": farm.field_area if farm.field_area is not None else health.field_area,
    }


def _history_params(history: Sequence[ChatTurn | dict[str, str]] | None) -> list[dict[str, str]]:
    turns = []
    for turn in history or []:
        if isinstance(turn, ChatTurn):
            turns.append(turn.model_dump())
        else:
            turns.append(ChatTurn(**turn).model_dump())
    return turns


def farming_insights_request(
    farm: FarmContext | None,
    weather: Sequence[WeatherDay] | None = None,
    health: CropHealthSnapshot | None = None,
    user_query: str | None = None,
) -> RequestDescriptor:
    """General field overview; an explicit *user_query* replaces the prompt."""
    health = health or _EMPTY_HEALTH
    params = _farm_params(farm, health)
    params.update({
        "ndvi": health.latest("ndvi"),
        "evi": health.latest("evi"),
        "lai": health.latest("lai"),
        "ndmi": health.latest("ndmi"),
        "soc": health.latest("soc"),
        "weather": _weather_summary(weather, 3),
        "user_query": user_query or None,
    })
    return RequestDescriptor(category="farming_insights", params=params)


def _chat_params(
    message: str,
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    history: Sequence[ChatTurn | dict[str, str]] | None,
) -> dict[str, Any]:
    health = health or _EMPTY_HEALTH
    params = _farm_params(farm, health)
    params.update({
        "message": message,
        "ndvi": health.latest("ndvi"),
        "evi": health.latest("evi"),
        "lai": health.latest("lai"),
        "history": _history_params(history),
    })
    return params


def chat_request(
    message: str,
    farm: FarmContext | None = None,
    health: CropHealthSnapshot | None = None,
    history: Sequence[ChatTurn | dict[str, str]] | None = None,
) -> RequestDescriptor:
    """Single-shot chat question with recent history inlined in the prompt."""
    return RequestDescriptor(
        category="chat", params=_chat_params(message, farm, health, history)
    )


def chat_advanced_request(
    message: str,
    farm: FarmContext | None = None,
    health: CropHealthSnapshot | None = None,
    history: Sequence[ChatTurn | dict[str, str]] | None = None,
) -> RequestDescriptor:
    """Conversational chat sent as a multi-turn session while history is short."""
    return RequestDescriptor(
        category="chat_advanced", params=_chat_params(message, farm, health, history)
    )


def crop_health_request(
    health: CropHealthSnapshot, farm: FarmContext | None = None
) -> RequestDescriptor:
    params = _farm_params(farm, health)
    params.update({
        "indices": health.latest_indices(),
        "crop_code": health.crop_code,
    })
    return RequestDescriptor(category="crop_health", params=params)


def weather_recommendations_request(
    farm: FarmContext | None, weather: Sequence[WeatherDay] | None
) -> RequestDescriptor:
    farm = farm or FarmContext()
    return RequestDescriptor(
        category="weather_recs",
        params={
            "crop": farm.crop,
            "location": farm.location,
            "weather": _weather_summary(
                weather, 5,
                fields=(
                    "temp_min_c", "temp_max_c", "rain_pct", "wind_speed",
                    "humidity", "uvi", "rain_mm",
                ),
            ),
        },
    )


def fertilizer_request(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
) -> RequestDescriptor:
    health = health or _EMPTY_HEALTH
    params = _farm_params(farm, health)
    params.update({
        "ndvi": health.latest("ndvi"),
        "evi": health.latest("evi"),
        "soc": health.latest("soc"),
        "weather": _weather_summary(weather, 7),
    })
    return RequestDescriptor(category="fertilizer", params=params)


def irrigation_request(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
) -> RequestDescriptor:
    health = health or _EMPTY_HEALTH
    params = _farm_params(farm, health)
    params.update({
        "ndmi": health.latest("ndmi"),
        "ndvi": health.latest("ndvi"),
        "weather": _weather_summary(
            weather, 7, fields=("temp_max_c", "rain_pct", "humidity")
        ),
    })
    return RequestDescriptor(category="irrigation", params=params)


def yield_request(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
    today: date | None = None,
) -> RequestDescriptor:
    health = health or _EMPTY_HEALTH
    params = _farm_params(farm, health)
    days_since_sowing = None
    if health.sowing_date is not None:
        days_since_sowing = ((today or date.today()) - health.sowing_date).days
    params.update({
        "ndvi": health.latest("ndvi"),
        "lai": health.latest("lai"),
        "days_since_sowing": days_since_sowing,
        "weather": _weather_summary(weather, 5, fields=("temp_max_c",)),
    })
    return RequestDescriptor(category="yield", params=params)


def pest_disease_request(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
) -> RequestDescriptor:
    health = health or _EMPTY_HEALTH
    params = _farm_params(farm, health)
    params.update({
        "ndvi": health.latest("ndvi"),
        "weather": _weather_summary(weather, 5, fields=("temp_max_c", "humidity")),
    })
    return RequestDescriptor(category="pest_disease", params=params)


def weed_request(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
) -> RequestDescriptor:
    health = health or _EMPTY_HEALTH
    params = _farm_params(farm, health)
    params.update({
        "ndvi": health.latest("ndvi"),
        "weather": _weather_summary(weather, 3, fields=("temp_max_c",)),
    })
    return RequestDescriptor(category="weed", params=params)


def dashboard_requests(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
    today: date | None = None,
) -> list[RequestDescriptor]:
    """The five panel requests issued together on every dashboard render."""
    return [
        fertilizer_request(farm, health, weather),
        irrigation_request(farm, health, weather),
        yield_request(farm, health, weather, today=today),
        pest_disease_request(farm, health, weather),
        weed_request(farm, health, weather),
    ]
