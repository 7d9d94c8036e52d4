"""Configuration helpers for pgerror."""
