"""Workflow Engine.

Define finite-state workflows and drive running instances through them:
- definition validation and a transition engine with typed rejections
- an in-memory registry that serializes changes per instance
- a FastAPI adapter and a small CLI
"""

__version__ = "0.1.0"

from workflow_engine.engine.registry import WorkflowRegistry

__all__ = ["__version__", "WorkflowRegistry"]
