"""Scripted drivers that play the tile merge environment."""
