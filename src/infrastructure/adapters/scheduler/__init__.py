"""Workflow engine adapters."""
