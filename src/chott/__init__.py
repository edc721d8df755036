"""Chott — a tick-driven NPC world simulation."""

__version__ = "0.1.0"
