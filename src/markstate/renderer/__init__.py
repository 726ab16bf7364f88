"""Renderer package."""

from .html_renderer import HTMLRenderer

__all__ = ["HTMLRenderer"]
