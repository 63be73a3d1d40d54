"""Preference repositories package."""
from .preference_repository import PreferenceRepository

__all__ = ['PreferenceRepository']
