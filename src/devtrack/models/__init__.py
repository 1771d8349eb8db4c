"""Entity dataclasses and their table-level repository functions.

Each submodule owns one table: it decodes rows explicitly (`from_row`) and
offers create / get_with_id / get_all / update / delete. Cross-entity rules
live in `devtrack.datastore`, not here.
"""

from .activity import Activity
from .activitytype import SENTINEL_ID, ActivityType
from .count import Count
from .project import Project
from .repo import Repo

__all__ = [
    "Activity",
    "ActivityType",
    "Count",
    "Project",
    "Repo",
    "SENTINEL_ID",
]
