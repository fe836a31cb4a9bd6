# src/agronomy/models.py — v1
"""Structured panel data rendered next to the AI text on the dashboard."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

Severity = Literal["Low", "Medium", "High"]
Level = Literal["Low", "Medium", "High"]


class SoilAnalysis(BaseModel):
    ph_level: float
    organic_matter: float
    nitrogen_level: Level
    phosphorus_level: Level
    potassium_level: Level


class FertilizerPlan(BaseModel):
    """Nutrient doses in kg/ha and how to apply them."""

    n: int
    p: int
    k: int
    s: int
    zn: int
    frequency: str
    sources: list[str]
    timing: str
    method: str
    cost_estimate: int
    soil_analysis: SoilAnalysis


class IrrigationDay(BaseModel):
    date: str
    quantity_mm: int
    time: str
    precipitation_probability: int
    recommendation: str
    water_stress_level: Level
    irrigation_method: str
    duration_hours: int
    priority: Level


class GrowthMetrics(BaseModel):
    days_since_sowing: int
    growth_rate: str
    maturity_percentage: int


class YieldPrediction(BaseModel):
    expected_yield_per_acre: int
    current_growth_stage: str
    harvesting_period: str
    yield_confidence: float
    factors_affecting_yield: list[str]
    optimization_suggestions: list[str]
    growth_metrics: GrowthMetrics


class Threat(BaseModel):
    """A pest or disease with its treatment."""

    name: str
    treatment: str
    severity: Severity
    prevention: str
    cost_estimate: int


class PestDiseasePlan(BaseModel):
    diseases: list[Threat]
    pests: list[Threat]
    weather_risk_assessment: str
    monitoring_schedule: list[str]


class Weed(BaseModel):
    name: str
    solution: str
    severity: Severity
    timing: str
    cost_estimate: int


class WeedPlan(BaseModel):
    potential_weeds: list[Weed]
    prevention_strategies: list[str]
    application_schedule: list[str]
