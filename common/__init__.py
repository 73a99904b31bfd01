"""Shared types, errors, logging and small utilities used by modraw and playback."""
