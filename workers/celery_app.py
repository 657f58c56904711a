"""Celery app factory."""

from celery import Celery

celery_app = Celery("teamhub", include=["workers.tasks.invitations"])
celery_app.config_from_object("workers.celery_config")
