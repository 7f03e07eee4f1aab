"""
Fertilizer Advisor
Classifies N, P, K and pH against fixed breakpoints and attaches remediation text.
Output order is always Nitrogen, Phosphorus, Potassium, pH.
"""

from typing import List

from crop_advisor.models import NutrientAdvice, SoilSample

RECOMMENDATIONS = {
    "Nitrogen": {
        "Low": "Apply urea (46-0-0) or ammonium sulphate in split doses; add well-rotted manure or grow a legume cover crop.",
        "Medium": "Top-dress with a moderate nitrogen dose at the vegetative stage to keep growth steady.",
        "Adequate": "Nitrogen is sufficient. Maintain current practice and avoid excess application.",
    },
    "Phosphorus": {
        "Low": "Apply DAP or single super phosphate at sowing, placed near the root zone.",
        "Medium": "Add a starter dose of phosphate fertilizer at planting to support root development.",
        "Adequate": "Phosphorus is sufficient. No additional phosphate needed this season.",
    },
    "Potassium": {
        "Low": "Apply muriate of potash (MOP) or sulphate of potash before planting; wood ash helps on small plots.",
        "Medium": "Apply a light dose of potash to improve stress tolerance and produce quality.",
        "Adequate": "Potassium is sufficient. Maintain with crop residue return.",
    },
    "pH": {
        "Too Acidic": "Apply agricultural lime (calcium carbonate) or dolomite to raise pH; retest after 3 months.",
        "Too Alkaline": "Apply gypsum or elemental sulphur and add organic matter to lower pH.",
        "Suboptimal": "pH is slightly outside the ideal 6.0-7.5 band. Use organic compost and monitor each season.",
        "Optimal": "pH is in the ideal range for most crops. No correction needed.",
    },
}


def _advice(nutrient: str, status: str, severity: str) -> NutrientAdvice:
    return NutrientAdvice(
        nutrient=nutrient,
        status=status,
        recommendation=RECOMMENDATIONS[nutrient][status],
        severity=severity,
    )


def _macronutrient(nutrient: str, value: float, low: float, medium: float) -> NutrientAdvice:
    if value < low:
        return _advice(nutrient, "Low", "red")
    if value < medium:
        return _advice(nutrient, "Medium", "yellow")
    return _advice(nutrient, "Adequate", "green")


def _ph(value: float) -> NutrientAdvice:
    if value < 5.5:
        return _advice("pH", "Too Acidic", "red")
    if value > 8.0:
        return _advice("pH", "Too Alkaline", "red")
    if value < 6.0 or value > 7.5:
        return _advice("pH", "Suboptimal", "yellow")
    return _advice("pH", "Optimal", "green")


def advise_fertilizer(soil: SoilSample) -> List[NutrientAdvice]:
    return [
        _macronutrient("Nitrogen", soil.nitrogen, low=50, medium=80),
        _macronutrient("Phosphorus", soil.phosphorus, low=30, medium=50),
        _macronutrient("Potassium", soil.potassium, low=30, medium=50),
        _ph(soil.ph),
    ]
