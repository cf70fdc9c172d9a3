"""Workout record storage."""

from .database import WorkoutStore

__all__ = ["WorkoutStore"]
