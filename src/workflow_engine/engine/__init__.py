"""Workflow engine: domain core, storage and registry."""
