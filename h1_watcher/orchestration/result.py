"""Watcher run result data structure."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from h1_watcher.models.program import Program


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    LOAD_STATE = "load_state"
    FETCH = "fetch"
    DIFF = "diff"
    BRANCH = "branch"
    NOTIFY = "notify"
    SIDE_DISPATCH = "side_dispatch"
    PERSIST = "persist"
    DONE = "done"


@dataclass
class RunResult:
    """Outcome of one watcher pass.

    ``stages`` lists the stages actually visited, so a run with no new
    programs shows BRANCH followed directly by PERSIST.
    """

    new_programs: List[Program] = field(default_factory=list)
    total_programs: int = 0
    notification_results: Dict[str, bool] = field(default_factory=dict)
    recon_dispatched: bool = False
    tracked_programs: int = 0
    state_recovered_reason: Optional[str] = None
    stages: List[Stage] = field(default_factory=list)

    @property
    def new_count(self) -> int:
        return len(self.new_programs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "new_programs": [p.handle for p in self.new_programs],
            "new_count": self.new_count,
            "total_programs": self.total_programs,
            "notification_results": dict(self.notification_results),
            "recon_dispatched": self.recon_dispatched,
            "tracked_programs": self.tracked_programs,
            "state_recovered_reason": self.state_recovered_reason,
            "stages": [stage.value for stage in self.stages],
        }
