# src/agronomy/heuristics.py — v2
"""Deterministic agronomy rules behind the dashboard panels.

Each ``*_plan`` function derives panel data from satellite indices, the
weather forecast and the crop type. Missing indices fall back to typical
mid-season values. Each has a ``standard_*`` counterpart returning fixed
guidance for when no farm data can be used at all.

All date arithmetic is relative to an explicit ``today``.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Sequence

from agrosight.agronomy.models import (
    FertilizerPlan,
    GrowthMetrics,
    IrrigationDay,
    PestDiseasePlan,
    SoilAnalysis,
    Threat,
    Weed,
    WeedPlan,
    YieldPrediction,
)
from agrosight.core.models import (
    CropHealthSnapshot,
    FarmContext,
    WeatherDay,
    round_half_up,
)

_KELVIN = 273.15
_DEFAULT_FIELD_AREA = 1000.0
_MATURITY_DAYS = 120
_LARGE_FIELD_SQM = 5000

# Typical mid-season values used when an index has no observation.
_DEFAULT_INDEX = {"ndvi": 0.5, "evi": 0.3, "lai": 2.0, "ndmi": 0.4, "soc": 2.5}


def _index(health: CropHealthSnapshot | None, name: str) -> float:
    value = health.latest(name) if health is not None else None
    return _DEFAULT_INDEX[name] if value is None else value


def _crop(farm: FarmContext | None) -> str:
    return ((farm.crop if farm else None) or "general").lower()


def _field_area(farm: FarmContext | None, health: CropHealthSnapshot | None) -> float:
    if farm is not None and farm.field_area:
        return farm.field_area
    if health is not None and health.field_area:
        return health.field_area
    return _DEFAULT_FIELD_AREA


# === FERTILIZER ===


def fertilizer_plan(
    farm: FarmContext | None, health: CropHealthSnapshot | None
) -> FertilizerPlan:
    crop = _crop(farm)
    area = _field_area(farm, health)
    ndvi = _index(health, "ndvi")

    if "wheat" in crop:
        base_n = 120
    elif "rice" in crop:
        base_n = 100
    elif "corn" in crop:
        base_n = 150
    else:
        base_n = 80
    mult = 1.3 if ndvi < 0.3 else 1.1 if ndvi < 0.5 else 0.9

    return FertilizerPlan(
        n=round_half_up(base_n * mult),
        p=round_half_up(base_n * 0.5 * mult),
        k=round_half_up(base_n * 0.7 * mult),
        s=round_half_up(base_n * 0.2 * mult),
        zn=round_half_up(base_n * 0.05 * mult),
        frequency="Every 14 days" if ndvi < 0.4 else "Every 21 days",
        sources=["Urea", "DAP", "MOP", "Gypsum", "Zinc Sulfate"],
        timing="Early morning (6-8 AM) or late evening (6-8 PM)",
        method="Fertigation or Broadcasting" if area > _LARGE_FIELD_SQM else "Manual application",
        cost_estimate=round_half_up(base_n * mult * 2.5 + area * 0.1),
        soil_analysis=SoilAnalysis(
            ph_level=6.8,
            organic_matter=_index(health, "soc"),
            nitrogen_level="Low" if ndvi < 0.3 else "Medium" if ndvi < 0.6 else "High",
            phosphorus_level="Low" if ndvi < 0.4 else "Medium",
            potassium_level="Medium",
        ),
    )


def standard_fertilizer_plan() -> FertilizerPlan:
    return FertilizerPlan(
        n=120, p=60, k=80, s=25, zn=5,
        frequency="Every 21 days",
        sources=["Urea", "Gypsum", "Potash", "Zinc Sulfate"],
        timing="Early morning or late evening",
        method="Manual application",
        cost_estimate=500,
        soil_analysis=SoilAnalysis(
            ph_level=6.8,
            organic_matter=2.5,
            nitrogen_level="Medium",
            phosphorus_level="Medium",
            potassium_level="Medium",
        ),
    )


# === IRRIGATION ===


def irrigation_schedule(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    weather: Sequence[WeatherDay] | None,
    today: date | None = None,
) -> list[IrrigationDay]:
    """One entry per forecast day, up to a week ahead."""
    today = today or date.today()
    ndmi = _index(health, "ndmi")
    area = _field_area(farm, health)
    stress = "High" if ndmi < 0.3 else "Medium" if ndmi < 0.5 else "Low"
    moisture_adj = 1.5 if ndmi < 0.3 else 1.2 if ndmi < 0.5 else 0.8

    schedule = []
    for i, day in enumerate(list(weather or [])[:7]):
        max_temp = day.temp_max_k - _KELVIN
        rain = day.pop
        base = 25 if max_temp > 30 else 20 if max_temp > 25 else 15
        rain_adj = 0.2 if rain > 0.7 else 0.6 if rain > 0.4 else 1.0
        quantity = round_half_up(base * moisture_adj * rain_adj)
        advice = "adjusted for expected rain" if rain > 0.5 else "recommended"

        schedule.append(IrrigationDay(
            date=(today + timedelta(days=i)).isoformat(),
            quantity_mm=quantity,
            time="05:30 AM" if max_temp > 28 else "06:00 AM",
            precipitation_probability=round_half_up(rain * 100),
            recommendation=f"{quantity}mm irrigation {advice}",
            water_stress_level=stress,
            irrigation_method="Drip irrigation" if area > _LARGE_FIELD_SQM else "Sprinkler",
            duration_hours=round_half_up(quantity / 5),
            priority="High" if ndmi < 0.3 else "Medium" if rain < 0.3 else "Low",
        ))
    return schedule


def standard_irrigation_schedule(today: date | None = None) -> list[IrrigationDay]:
    today = today or date.today()
    return [
        IrrigationDay(
            date=(today + timedelta(days=i)).isoformat(),
            quantity_mm=20,
            time="06:00 AM",
            precipitation_probability=30,
            recommendation="Standard irrigation schedule",
            water_stress_level="Medium",
            irrigation_method="Sprinkler",
            duration_hours=4,
            priority="Medium",
        )
        for i in range(7)
    ]


# === YIELD ===

_BASE_YIELD = {"wheat": 1200, "rice": 1800, "corn": 2500, "apple": 1500, "tomato": 3000}


def growth_stage(days: int, crop: str) -> str:
    if "wheat" in crop or "rice" in crop:
        stages = (
            "Germination & Early Growth",
            "Tillering & Stem Extension",
            "Heading & Flowering",
            "Grain Filling & Maturity",
        )
    else:
        stages = (
            "Seedling Stage",
            "Vegetative Growth",
            "Flowering & Fruit Development",
            "Maturity & Harvest Ready",
        )
    if days < 30:
        return stages[0]
    if days < 60:
        return stages[1]
    if days < 90:
        return stages[2]
    return stages[3]


def yield_prediction(
    farm: FarmContext | None,
    health: CropHealthSnapshot | None,
    today: date | None = None,
) -> YieldPrediction:
    """Yield and growth estimate.

    Without a recorded sowing date the crop is treated as sown today.
    """
    today = today or date.today()
    crop = _crop(farm)
    ndvi = _index(health, "ndvi")
    lai = _index(health, "lai")
    sowing = (health.sowing_date if health else None) or today
    days = max(0, (today - sowing).days)

    multiplier = ndvi * 0.6 + lai * 0.2 + 0.2
    harvest = sowing + timedelta(days=_MATURITY_DAYS)

    return YieldPrediction(
        expected_yield_per_acre=round_half_up(_BASE_YIELD.get(crop, 1000) * multiplier),
        current_growth_stage=growth_stage(days, crop),
        harvesting_period=harvest.strftime("%B %Y"),
        yield_confidence=min(95.0, max(60.0, 70 + ndvi * 30)),
        factors_affecting_yield=[
            "Low vegetation health" if ndvi < 0.4 else "Good vegetation health",
            "Insufficient leaf coverage" if lai < 2 else "Adequate leaf coverage",
            "Weather conditions",
            "Soil fertility management",
        ],
        optimization_suggestions=[
            "Monitor irrigation based on weather forecasts",
            "Apply balanced fertilizers as recommended",
            "Regular pest and disease monitoring",
            "Optimize planting density for next season",
        ],
        growth_metrics=GrowthMetrics(
            days_since_sowing=days,
            growth_rate="Excellent" if ndvi > 0.6 else "Good" if ndvi > 0.4 else "Needs attention",
            maturity_percentage=min(100, round_half_up(days / _MATURITY_DAYS * 100)),
        ),
    )


def standard_yield_prediction(today: date | None = None) -> YieldPrediction:
    today = today or date.today()
    return YieldPrediction(
        expected_yield_per_acre=1200,
        current_growth_stage="Vegetative Growth",
        harvesting_period=(today + timedelta(days=75)).strftime("%B %Y"),
        yield_confidence=75.0,
        factors_affecting_yield=["Weather conditions", "Soil fertility", "Pest management"],
        optimization_suggestions=["Regular monitoring", "Balanced fertilization", "Timely irrigation"],
        growth_metrics=GrowthMetrics(
            days_since_sowing=45, growth_rate="Good", maturity_percentage=60
        ),
    )


# === PEST & DISEASE ===

_PESTS: dict[str, list[Threat]] = {
    "wheat": [
        Threat(name="Aphids", treatment="Imidacloprid spray", severity="Medium",
               prevention="Regular monitoring, beneficial insects", cost_estimate=150),
        Threat(name="Army worms", treatment="Chlorpyrifos application", severity="High",
               prevention="Early detection, crop rotation", cost_estimate=200),
    ],
    "rice": [
        Threat(name="Brown planthopper", treatment="Buprofezin spray", severity="High",
               prevention="Water management, resistant varieties", cost_estimate=180),
        Threat(name="Stem borer", treatment="Carbofuran granules", severity="Medium",
               prevention="Pheromone traps, light traps", cost_estimate=160),
    ],
    "apple": [
        Threat(name="Codling moth", treatment="Organophosphate spray", severity="High",
               prevention="Pheromone traps, sanitation", cost_estimate=220),
        Threat(name="Aphids", treatment="Neem oil application", severity="Medium",
               prevention="Beneficial insects, pruning", cost_estimate=120),
    ],
}

_DISEASES: dict[str, list[Threat]] = {
    "wheat": [
        Threat(name="Rust", treatment="Propiconazole fungicide", severity="High",
               prevention="Resistant varieties, proper spacing", cost_estimate=200),
        Threat(name="Powdery mildew", treatment="Sulfur dust application", severity="Medium",
               prevention="Good air circulation", cost_estimate=100),
    ],
    "rice": [
        Threat(name="Blast", treatment="Tricyclazole spray", severity="High",
               prevention="Balanced fertilization, water management", cost_estimate=250),
        Threat(name="Bacterial blight", treatment="Copper oxychloride", severity="Medium",
               prevention="Clean seed, avoid over-fertilization", cost_estimate=150),
    ],
    "apple": [
        Threat(name="Fire blight", treatment="Streptomycin spray", severity="High",
               prevention="Pruning, sanitation", cost_estimate=300),
        Threat(name="Apple scab", treatment="Captan fungicide", severity="Medium",
               prevention="Resistant varieties, leaf cleanup", cost_estimate=180),
    ],
}


def weather_risk(weather: Sequence[WeatherDay] | None) -> bool:
    """True when the next days are humid (>80%) and warm (>25°C) on average."""
    days = list(weather or [])[:5]
    if not days:
        return False
    humidity = sum(d.humidity for d in days) / len(days)
    temp_c = sum(d.temp_max_k for d in days) / len(days) - _KELVIN
    return humidity > 80 and temp_c > 25


def pest_disease_plan(
    farm: FarmContext | None, weather: Sequence[WeatherDay] | None
) -> PestDiseasePlan:
    """Crop-specific threats; unknown crops get the wheat list."""
    crop = _crop(farm)
    if weather_risk(weather):
        risk = "High risk due to favorable conditions (high humidity and temperature)"
    else:
        risk = "Moderate risk - monitor regularly"
    return PestDiseasePlan(
        diseases=list(_DISEASES.get(crop, _DISEASES["wheat"])),
        pests=list(_PESTS.get(crop, _PESTS["wheat"])),
        weather_risk_assessment=risk,
        monitoring_schedule=[
            "Daily visual inspection during high-risk periods",
            "Weekly systematic field walks",
            "Use pheromone traps for early detection",
            "Monitor weather conditions daily",
        ],
    )


def standard_pest_disease_plan() -> PestDiseasePlan:
    return PestDiseasePlan(
        diseases=[
            Threat(name="Early Leaf Spot", treatment="Chlorothalonil", severity="Medium",
                   prevention="Crop rotation", cost_estimate=150),
            Threat(name="Collar Rot", treatment="Carbendazim", severity="Low",
                   prevention="Proper drainage", cost_estimate=100),
        ],
        pests=[
            Threat(name="Aphids", treatment="Neem Oil", severity="Medium",
                   prevention="Regular monitoring", cost_estimate=80),
            Threat(name="Thrips", treatment="Spinosad", severity="Low",
                   prevention="Yellow sticky traps", cost_estimate=60),
        ],
        weather_risk_assessment="Moderate risk - continue regular monitoring",
        monitoring_schedule=["Daily inspection", "Weekly field walks", "Weather monitoring"],
    )


# === WEEDS ===

_WEEDS: dict[str, list[Weed]] = {
    "wheat": [
        Weed(name="Wild oats", solution="Clodinafop-propargyl herbicide", severity="High",
             timing="Pre-emergence", cost_estimate=180),
        Weed(name="Phalaris minor", solution="Pinoxaden spray", severity="Medium",
             timing="2-3 leaf stage", cost_estimate=150),
    ],
    "rice": [
        Weed(name="Echinochloa", solution="Butachlor pre-emergence", severity="High",
             timing="3-5 days after transplanting", cost_estimate=200),
        Weed(name="Cyperus rotundus", solution="2,4-D application", severity="Medium",
             timing="20-25 days after transplanting", cost_estimate=120),
    ],
    "apple": [
        Weed(name="Broadleaf weeds", solution="Glyphosate spot treatment", severity="Medium",
             timing="Spring before bud break", cost_estimate=100),
        Weed(name="Grass weeds", solution="Mulching + manual removal", severity="Low",
             timing="Throughout growing season", cost_estimate=80),
    ],
}


def weed_plan(farm: FarmContext | None) -> WeedPlan:
    crop = _crop(farm)
    return WeedPlan(
        potential_weeds=list(_WEEDS.get(crop, _WEEDS["wheat"])),
        prevention_strategies=[
            "Crop rotation to break weed cycles",
            "Use of cover crops during off-season",
            "Proper land preparation and leveling",
            "Timely and balanced fertilization",
            "Regular monitoring and early intervention",
        ],
        application_schedule=[
            "Pre-emergence herbicide application",
            "Post-emergence treatment at 2-3 leaf stage",
            "Manual weeding at 30-40 days",
            "Cultivation between rows as needed",
        ],
    )


def standard_weed_plan() -> WeedPlan:
    return WeedPlan(
        potential_weeds=[
            Weed(name="Amaranthus", solution="Manual weeding", severity="Medium",
                 timing="Early growth stage", cost_estimate=80),
            Weed(name="Cynodon dactylon", solution="Mulching", severity="Low",
                 timing="Throughout season", cost_estimate=60),
        ],
        prevention_strategies=["Regular monitoring", "Proper land preparation", "Timely cultivation"],
        application_schedule=["Pre-emergence application", "Manual weeding as needed"],
    )
