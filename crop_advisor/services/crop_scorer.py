"""
Crop Scorer
Rule-table crop recommendation: every crop gets one point per satisfied
range predicate (N, P, K, pH, rainfall, temperature, humidity), best score wins.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Tuple

from crop_advisor.models import CropCandidate, PredictionInput

logger = logging.getLogger(__name__)

Predicate = Callable[[float], bool]

CRITERIA_COUNT = 7


def above(limit: float) -> Predicate:
    return lambda value: value > limit


def between(low: float, high: float) -> Predicate:
    """Inclusive at both ends"""
    return lambda value: low <= value <= high


def strictly_between(low: float, high: float) -> Predicate:
    return lambda value: low < value < high


@dataclass(frozen=True)
class CropProfile:
    name: str
    nitrogen: Predicate
    phosphorus: Predicate
    potassium: Predicate
    ph: Predicate
    rainfall: Predicate
    temperature: Predicate
    humidity: Predicate

    def criteria(self, data: PredictionInput) -> Tuple[bool, ...]:
        """Evaluate all seven predicates independently"""
        return (
            self.nitrogen(data.nitrogen),
            self.phosphorus(data.phosphorus),
            self.potassium(data.potassium),
            self.ph(data.ph),
            self.rainfall(data.rainfall),
            self.temperature(data.temperature),
            self.humidity(data.humidity),
        )

    def score(self, data: PredictionInput) -> int:
        return sum(1 for matched in self.criteria(data) if matched)


# Declaration order is the tie-break order
CROP_PROFILES: Tuple[CropProfile, ...] = (
    CropProfile(
        name="Rice",
        nitrogen=above(80), phosphorus=above(40), potassium=above(40),
        ph=between(5, 7), rainfall=above(200),
        temperature=between(20, 35), humidity=above(80),
    ),
    CropProfile(
        name="Wheat",
        nitrogen=strictly_between(50, 100), phosphorus=above(30), potassium=above(30),
        ph=between(6, 7.5), rainfall=between(50, 100),
        temperature=between(15, 25), humidity=between(50, 70),
    ),
    CropProfile(
        name="Maize",
        nitrogen=above(60), phosphorus=above(35), potassium=above(35),
        ph=between(5.5, 7.5), rainfall=between(60, 110),
        temperature=between(18, 27), humidity=between(60, 80),
    ),
    CropProfile(
        name="Cotton",
        nitrogen=above(70), phosphorus=above(40), potassium=above(40),
        ph=between(5.8, 8), rainfall=between(60, 120),
        temperature=between(21, 30), humidity=between(50, 80),
    ),
    CropProfile(
        name="Sugarcane",
        nitrogen=above(90), phosphorus=above(45), potassium=above(45),
        ph=between(6, 7.5), rainfall=above(150),
        temperature=between(20, 30), humidity=above(75),
    ),
    CropProfile(
        name="Potato",
        nitrogen=between(50, 80), phosphorus=above(30), potassium=above(50),
        ph=between(5.2, 6.5), rainfall=between(50, 100),
        temperature=between(15, 25), humidity=between(60, 80),
    ),
    CropProfile(
        name="Tomato",
        nitrogen=between(60, 100), phosphorus=above(35), potassium=above(40),
        ph=between(6, 7), rainfall=between(60, 100),
        temperature=between(20, 28), humidity=between(60, 80),
    ),
)

CANDIDATE_CROPS: Tuple[str, ...] = tuple(profile.name for profile in CROP_PROFILES)


def rank_crops(data: PredictionInput) -> List[CropCandidate]:
    """Score every crop and sort best first (stable, so earlier crops win ties)"""
    candidates = [
        CropCandidate(name=profile.name, score=profile.score(data))
        for profile in CROP_PROFILES
    ]
    return sorted(candidates, key=lambda c: c.score, reverse=True)


def score_crops(data: PredictionInput) -> Tuple[str, float, List[str]]:
    """
    Pick the best crop for the given conditions

    Returns:
        (crop, confidence, alternative_crops) where confidence = score / 7
        and alternative_crops are the next two names in ranked order
    """
    ranked = rank_crops(data)
    best = ranked[0]
    confidence = best.score / CRITERIA_COUNT
    alternatives = [c.name for c in ranked[1:3]]

    logger.info(f"Crop prediction: {best.name} with confidence {confidence:.3f} (alternatives: {alternatives})")
    return best.name, confidence, alternatives
