"""
hod - Personal task tracker

Stores each task as a flat file and keeps a side-index of inter-task
dependencies and statuses.
"""

__version__ = "1.0.0"

# Re-export core models for convenience
from hod.core.config.models import HodConfig
from hod.core.index.models import IndexEntry
from hod.core.tasks.models import TaskBody

__all__ = ["HodConfig", "IndexEntry", "TaskBody", "__version__"]
