"""Narration script generation and transcript import."""
