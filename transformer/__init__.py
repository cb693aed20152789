"""Transformer module for converting resolved schedules to various output formats."""

from .base import BaseTransformer
from .ical_transformer import ICalTransformer

__all__ = ["BaseTransformer", "ICalTransformer"]
