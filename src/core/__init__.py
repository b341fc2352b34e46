"""Core services: configuration, logging and timestamp helpers."""
