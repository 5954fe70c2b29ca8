"""Celery tasks for background artifact refresh."""
