"""Presentation and input helpers shared by the CLI and the HTTP API."""
