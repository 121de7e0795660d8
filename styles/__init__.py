"""Rendering styles for the Vitals canvas, loaded by name at startup."""
