"""Presentation layer: HTTP routes and server-push delivery."""
