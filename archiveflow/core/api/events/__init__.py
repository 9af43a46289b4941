"""Event emitter for progress and workflow notifications."""
from .event_emitter import EventEmitter

__all__ = ['EventEmitter']
