"""Realtime room service for the team word-grid game."""
