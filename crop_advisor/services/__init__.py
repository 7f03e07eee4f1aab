"""
Crop recommendation services
"""
from .crop_scorer import CANDIDATE_CROPS, rank_crops, score_crops
from .fertilizer_advisor import advise_fertilizer
from .prediction import PredictionService

__all__ = [
    'CANDIDATE_CROPS',
    'rank_crops',
    'score_crops',
    'advise_fertilizer',
    'PredictionService'
]
