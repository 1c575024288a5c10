"""
Program diffing against persisted state.

Both operations compare ids in canonical string form, so a program
fetched with numeric id 100 matches a persisted key "100".
"""

from typing import Iterable, List, Set

import structlog

from h1_watcher.models.program import Program, WatcherState, utc_now_iso

logger = structlog.get_logger()


def known_ids(state: WatcherState) -> Set[str]:
    """All program ids already recorded in state."""
    return set(state.programs.keys())


def diff_programs(state: WatcherState, current: Iterable[Program]) -> List[Program]:
    """
    Return programs in ``current`` whose id is not yet known.

    Pure: neither argument is modified. Order of ``current`` is preserved.

    Args:
        state: Persisted state
        current: Freshly fetched programs

    Returns:
        New programs, in fetch order
    """
    known = known_ids(state)
    new_programs = [p for p in current if str(p.id) not in known]

    logger.debug("diff_computed", known=len(known), new=len(new_programs))
    return new_programs


def add_programs(state: WatcherState, programs: Iterable[Program]) -> List[Program]:
    """
    Record programs in state, skipping ids that are already known.

    Existing records are never overwritten, so ``first_seen`` stays at the
    time of first persistence. Calling this twice with the same batch
    inserts each program once; the second call returns an empty list.

    Args:
        state: Persisted state (mutated in place)
        programs: Programs to record

    Returns:
        Programs that were actually inserted
    """
    first_seen = utc_now_iso()
    added: List[Program] = []

    for program in programs:
        program_id = str(program.id)
        if program_id in state.programs:
            continue
        state.programs[program_id] = program.to_record(first_seen)
        added.append(program)

    logger.debug("programs_recorded", added=len(added), tracked=state.tracked_count)
    return added
