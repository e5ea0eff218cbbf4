"""Weathercraft Reports: community weather reports with Minecraft account verification."""

__version__ = "1.0.0"
