"""Spaced-repetition review scheduler for vocabulary and sentences."""

from .backends import JsonFileBackend, MemoryBackend, PersistenceBackend, SQLiteBackend, build_backend
from .clock import Clock, FixedClock, SystemClock
from .config import Settings
from .errors import SchedulerError, StoreFormatError
from .models import ItemType, Level, LevelStats, ReviewItem, StatsReport, make_key
from .prompts import ConsolePrompter, Prompter, ScriptedPrompter
from .scheduler import ReviewScheduler

__all__ = [
    "Clock",
    "ConsolePrompter",
    "FixedClock",
    "ItemType",
    "JsonFileBackend",
    "Level",
    "LevelStats",
    "MemoryBackend",
    "PersistenceBackend",
    "Prompter",
    "ReviewItem",
    "ReviewScheduler",
    "SQLiteBackend",
    "SchedulerError",
    "ScriptedPrompter",
    "Settings",
    "StatsReport",
    "StoreFormatError",
    "SystemClock",
    "build_backend",
    "make_key",
]
