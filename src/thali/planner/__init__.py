"""Suggestion and planning context engine."""
