"""
Persona catalogue and registry
"""

from .registry import PersonaRegistry, validate_personas

__all__ = ["PersonaRegistry", "validate_personas"]
