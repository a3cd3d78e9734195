"""Prompt templates for the language model."""

from .templates import BrandOverviewPrompts

__all__ = ["BrandOverviewPrompts"]
