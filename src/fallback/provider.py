# src/fallback/provider.py — v1
"""Deterministic degraded content for when no live or cached answer exists.

Every category has its own static guidance so the text stays plausible
to a farmer; it is personalised only with request params (crop, message)
and stamped with the date it was produced for.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from agrosight.core.models import RequestDescriptor

logger = logging.getLogger(__name__)

_FOOTER = "*Live AI insights are unavailable right now. Please check back later.*"

_TEMPLATES: dict[str, str] = {
    "farming_insights": """Based on standard agronomic guidance:

**Crop Health Summary:**
Your {crop} field shows stable health indicators. Continue current management practices.

**Weather Recommendations:**
Monitor weather conditions and adjust irrigation accordingly.

**Action Items:**
1. Continue regular field monitoring
2. Check soil moisture levels
3. Review fertilization schedule
4. Monitor for pest activity""",
    "chat": """I can't reach the AI assistant right now, but I can provide general farming advice.

Based on your question about "{message}", here are some general recommendations:

**General Farming Best Practices:**
- Monitor soil moisture regularly
- Observe weather patterns for irrigation timing
- Check for pest and disease symptoms weekly
- Maintain proper fertilization schedules
- Keep farm equipment in good condition""",
    "crop_health": """**Crop Health Assessment (Standard Guidance)**

Satellite indices for your {crop} field could not be analysed right now.

**What to check:**
1. NDVI below 0.3 usually signals stressed or sparse vegetation
2. Low NDMI points to water stress; verify soil moisture in the field
3. Walk the field and compare weak patches with healthy ones
4. Keep records of any yellowing, wilting or spotting you observe""",
    "weather_recs": """**Weather Recommendations (Cached Analysis)**

Based on recent weather analysis for your {crop} field:

**General Weather Guidelines:**
- Monitor daily temperature and precipitation
- Adjust irrigation based on rainfall probability
- Plan field activities during favorable weather windows
- Protect crops during extreme weather events

**Standard Recommendations:**
1. **Irrigation**: Check soil moisture before watering
2. **Field Work**: Schedule during dry periods
3. **Pest Management**: Increase monitoring after rain
4. **Equipment**: Prepare for weather changes""",
    "fertilizer": """**Fertilizer Guidance (Standard Recommendations)**

AI insights are temporarily unavailable for your {crop} field.

- Apply a balanced NPK program split across the season
- Common sources: Urea, DAP, MOP, Gypsum and Zinc Sulfate
- Apply early morning or late evening, never before heavy rain
- Test soil every season and adjust doses to the results""",
    "irrigation": """**Irrigation Guidance (Standard Schedule)**

AI scheduling is temporarily unavailable for your {crop} field.

- Irrigate early morning (around 06:00) to limit evaporation
- Roughly 20mm per application is a safe default
- Skip or reduce irrigation when rain probability is above 70%
- Check soil moisture at root depth before each application""",
    "yield": """**Yield Outlook (Standard Estimates)**

AI analysis is temporarily unavailable for your {crop} field.

- Yield depends mostly on vegetation health, weather and soil fertility
- Keep irrigation timely and fertilization balanced
- Scout regularly for pests and disease to protect yield
- Review planting density for next season""",
    "pest_disease": """**Pest & Disease Guidance (Standard Practices)**

AI recommendations are temporarily unavailable for your {crop} field.

- Inspect the field daily during warm, humid periods
- Walk the field systematically once a week
- Use pheromone and yellow sticky traps for early detection
- Rotate crops and remove infected residue""",
    "weed": """**Weed Management (Standard Practices)**

AI recommendations are temporarily unavailable for your {crop} field.

- Prepare land well and level it before sowing
- Apply pre-emergence control, then treat at the 2-3 leaf stage
- Weed manually at 30-40 days where needed
- Rotate crops and use cover crops to break weed cycles""",
}

# Chat variants share one text.
_TEMPLATES["chat_advanced"] = _TEMPLATES["chat"]


class FallbackProvider:
    """Produces category-specific degraded text.

    Args:
        today: Returns the date stamped on fallback text; injectable for tests.
    """

    def __init__(self, today: Callable[[], date] | None = None) -> None:
        self._today = today or date.today

    def fallback_for(self, descriptor: RequestDescriptor) -> str:
        """Return non-empty degraded content for *descriptor*. Never raises."""
        template = _TEMPLATES.get(descriptor.category, _TEMPLATES["farming_insights"])
        crop = str(descriptor.param("crop", "crop")) or "crop"
        message = str(descriptor.param("message", ""))[:50]
        if message:
            message += "..."
        body = template.format(crop=crop, message=message or "your farm")
        try:
            stamp = self._today().isoformat()
        except Exception:  # noqa: BLE001
            logger.exception("Fallback date stamp failed")
            stamp = "unknown date"
        return f"{body}\n\n{_FOOTER}\n_Data as of {stamp}._"

    def categories(self) -> list[str]:
        return sorted(_TEMPLATES)
