"""Kardia: ten-year cardiovascular risk estimation with SCORE2 models."""

__version__ = "1.0.0"
