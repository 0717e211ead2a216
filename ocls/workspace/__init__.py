"""Loaded-file bookkeeping for ocls."""
from .classes_cache import ClassDefinition, ClassesCache

__all__ = ['ClassDefinition', 'ClassesCache']
