"""Workforce module — worker directory, scoreboard and department schemas and services."""

from tasktracker.workforce.schemas import Department, Worker

__all__ = ["Worker", "Department"]
