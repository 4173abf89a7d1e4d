"""Adapters layer - collaborators outside the retrieval core.

Vector similarity and analytics persistence are external concerns. The core
only talks to the abstract interfaces defined here.
"""

from .analytics_sink import AbstractAnalyticsSink, JsonFileAnalyticsSink
from .vector_oracle import AbstractVectorOracle, HttpVectorOracle, NullVectorOracle, StaticVectorOracle


__all__ = [
    "AbstractAnalyticsSink",
    "AbstractVectorOracle",
    "HttpVectorOracle",
    "JsonFileAnalyticsSink",
    "NullVectorOracle",
    "StaticVectorOracle",
]
