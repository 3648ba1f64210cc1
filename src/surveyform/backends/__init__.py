"""Backends: collection surfaces (scripted) and read-only document generators (DOT)."""

from surveyform.config import register_backend

from .dot_generator import DotMode, generate_dot, save_dot_file
from .scripted import CANCEL, ScriptedBackend

register_backend(ScriptedBackend.name, ScriptedBackend)

__all__ = ["DotMode", "generate_dot", "save_dot_file", "ScriptedBackend", "CANCEL"]
