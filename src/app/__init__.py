"""Command-line entry point for the Lockdown exporter."""
