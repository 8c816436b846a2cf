"""Render-ready views of analysis results.

Everything here is a pure function of the result dictionary: the web client
and the report exporters only branch on the values produced below.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

SEVERITY_TIERS: Dict[str, Dict[str, str]] = {
    "healthy": {"tier": "Healthy", "css_class": "severity-healthy", "icon": "check-circle"},
    "mild": {"tier": "Mild", "css_class": "severity-mild", "icon": "info"},
    "moderate": {"tier": "Moderate", "css_class": "severity-moderate", "icon": "alert-triangle"},
    "severe": {"tier": "Severe", "css_class": "severity-severe", "icon": "x-circle"},
}

# Upper bounds are inclusive; anything above the last bound is "extensive".
DAMAGE_BANDS = (
    (10.0, "minimal", "Minimal damage: only small surface blemishes are visible."),
    (30.0, "light", "Light damage: a limited area is affected and can be trimmed away."),
    (60.0, "moderate", "Moderate damage: a large part of the fruit shows symptoms."),
)
EXTENSIVE_DAMAGE = ("extensive", "Extensive damage: most of the fruit is affected.")

TREATMENT_SECTIONS = (
    ("immediate", "Immediate Actions"),
    ("prevention", "Prevention"),
    ("chemicals", "Recommended Treatments"),
)


def severity_tier(severity: Optional[str]) -> Dict[str, str]:
    """Map a severity label onto one of the four visual tiers."""
    key = str(severity or "").strip().lower()
    return dict(SEVERITY_TIERS.get(key, SEVERITY_TIERS["healthy"]))


def damage_band(affected_percentage: Any) -> Optional[Dict[str, Any]]:
    """Describe how much of the fruit is damaged, or ``None`` when unknown."""
    if affected_percentage is None or isinstance(affected_percentage, bool):
        return None
    try:
        value = float(affected_percentage)
    except (TypeError, ValueError):
        return None

    for upper_bound, band, description in DAMAGE_BANDS:
        if value <= upper_bound:
            return {"band": band, "description": description, "percentage": value}
    band, description = EXTENSIVE_DAMAGE
    return {"band": band, "description": description, "percentage": value}


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if str(item).strip()]


def build_result_view(result: Mapping[str, Any]) -> Dict[str, Any]:
    """Build the view dictionary for a success or error result."""
    if result.get("error"):
        return {"kind": "error", "message": str(result["error"])}

    disease = result.get("disease") if isinstance(result.get("disease"), Mapping) else {}
    treatment = result.get("treatment") if isinstance(result.get("treatment"), Mapping) else {}

    sections = []
    for key, title in TREATMENT_SECTIONS:
        items = _string_list(treatment.get(key))
        if items:
            sections.append({"key": key, "title": title, "items": items})

    view: Dict[str, Any] = {
        "kind": "success",
        "fruit_type": str(result.get("fruitType") or "Unknown fruit"),
        "is_healthy": bool(result.get("isHealthy")),
        "health_status": result.get("healthStatus"),
        "disease": {
            "name": str(disease.get("name") or "None"),
            "severity": str(disease.get("severity") or "Healthy"),
            "confidence": disease.get("confidence"),
            "description": str(disease.get("description") or ""),
        },
        "severity": severity_tier(disease.get("severity")),
        "damage": damage_band(result.get("affectedPercentage")),
        "treatment_sections": sections,
        "edibility": None,
        "notes": str(result.get("additionalNotes") or "").strip() or None,
    }

    if result.get("isEdible") is not None:
        view["edibility"] = {
            "is_edible": bool(result.get("isEdible")),
            "reason": str(result.get("edibilityReason") or ""),
        }

    return view


def summarize_view(view: Mapping[str, Any]) -> str:
    """Plain-text rendering of a view for terminals and logs."""
    if view.get("kind") == "error":
        return f"Error: {view.get('message')}"

    disease = view["disease"]
    lines = [
        f"Fruit: {view['fruit_type']}",
        f"Status: {'Healthy' if view['is_healthy'] else 'Diseased'}"
        + (f" ({view['health_status']})" if view.get("health_status") else ""),
        f"Disease: {disease['name']} [{view['severity']['tier']}]",
    ]
    if disease.get("confidence") is not None:
        lines.append(f"Confidence: {disease['confidence']}%")
    if disease.get("description"):
        lines.append(f"Description: {disease['description']}")
    if view.get("damage"):
        lines.append(f"Affected: {view['damage']['percentage']:g}% - {view['damage']['description']}")
    if view.get("edibility"):
        edible = "Yes" if view["edibility"]["is_edible"] else "No"
        reason = view["edibility"]["reason"]
        lines.append(f"Edible: {edible}" + (f" - {reason}" if reason else ""))
    for section in view.get("treatment_sections", []):
        lines.append(f"{section['title']}:")
        lines.extend(f"  - {item}" for item in section["items"])
    if view.get("notes"):
        lines.append(f"Notes: {view['notes']}")
    return "\n".join(lines)
