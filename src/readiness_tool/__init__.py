"""Puntaje de preparación diaria a partir de pasos, pulso en reposo y sueño."""

from readiness_tool.collector import MetricCollector
from readiness_tool.engine import evaluate, insights, score
from readiness_tool.model import MeasurementTriple, ReadinessReport

__version__ = "0.1.0"

__all__ = [
    "MeasurementTriple",
    "MetricCollector",
    "ReadinessReport",
    "evaluate",
    "insights",
    "score",
]
