"""Core configuration, logging and credential helpers."""
