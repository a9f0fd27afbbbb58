"""Presentation layer - HTTP API and Celery workers."""
