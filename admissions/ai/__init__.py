from .generators import (
    RecommendationGenerator,
    StaticGenerator,
    OpenAISchoolGenerator,
    OpenAIProgramGenerator,
    default_generators,
)

__all__ = [
    "RecommendationGenerator",
    "StaticGenerator",
    "OpenAISchoolGenerator",
    "OpenAIProgramGenerator",
    "default_generators",
]
