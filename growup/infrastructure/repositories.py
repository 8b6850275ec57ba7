"""
Repositories for the dashboard tables, split one module per entity.

    from growup.infrastructure.repositories import MenteeRepo, PillarRepo, ...
"""

from __future__ import annotations

from .repositories_mentee import MenteeRepo
from .repositories_pillar import PillarRepo
from .repositories_response import ResponseRepo
from .repositories_sprint import SprintRepo, TaskRepo

__all__ = [
    "MenteeRepo",
    "PillarRepo",
    "ResponseRepo",
    "SprintRepo",
    "TaskRepo",
]
