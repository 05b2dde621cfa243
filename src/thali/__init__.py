"""
Thali household meal-planning service.

The package exposes the suggestion and planning context engine (context assembly, prompt
composition, LLM driving, week planning and shopping list derivation) together with the
storage adapter and HTTP surface that host it.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
