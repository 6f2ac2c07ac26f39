"""Fuentes de datos de salud."""
