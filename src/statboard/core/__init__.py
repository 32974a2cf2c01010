"""Core business logic for statboard."""
