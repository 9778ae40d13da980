from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from schedcore.schemas.conflict import ConflictReport, ConflictDetail, ResolutionAction
from schedcore.services.timegrid import ScheduledSession


def sessions_overlap(a: ScheduledSession, b: ScheduledSession) -> bool:
    return a.day == b.day and a.interval.overlaps(b.interval)


def shares_room_or_section(a: ScheduledSession, b: ScheduledSession) -> bool:
    return a.room_id == b.room_id or a.section_id == b.section_id


def find_conflict(candidate: ScheduledSession, existing: Iterable[ScheduledSession]) -> Optional[ScheduledSession]:
    """Return the first existing session that double-books the candidate's room or section."""
    for other in existing:
        if sessions_overlap(candidate, other) and shares_room_or_section(candidate, other):
            return other
    return None


def conflicts(candidate: ScheduledSession, existing: Iterable[ScheduledSession]) -> bool:
    return find_conflict(candidate, existing) is not None


def instructor_conflicts(candidate: ScheduledSession, existing: Iterable[ScheduledSession]) -> bool:
    # One instructor, one timeslot: any same-day overlap counts, whatever the room or section.
    return any(sessions_overlap(candidate, other) for other in existing)


class ConflictService:
    def __init__(
        self,
        sessions: Sequence[ScheduledSession],
        room_names: Optional[Dict[int, str]] = None,
        section_names: Optional[Dict[int, str]] = None,
    ):
        self.sessions = list(sessions)
        self.room_names = room_names or {}
        self.section_names = section_names or {}

    def detect_conflicts(self) -> ConflictReport:
        conflicts: List[ConflictDetail] = []

        # Only sessions on the same day can collide, so bucket first
        slots_by_day: Dict[str, List[Tuple[int, ScheduledSession]]] = defaultdict(list)
        for index, session in enumerate(self.sessions):
            slots_by_day[session.day.value].append((index, session))

        for day, day_slots in slots_by_day.items():
            n = len(day_slots)
            for a in range(n):
                i, s1 = day_slots[a]
                for b in range(a + 1, n):
                    j, s2 = day_slots[b]
                    if not s1.interval.overlaps(s2.interval):
                        continue
                    ranges = [str(s1.interval), str(s2.interval)]
                    if s1.room_id == s2.room_id:
                        room_name = self.room_names.get(s1.room_id, str(s1.room_id))
                        conflicts.append(ConflictDetail(
                            id=f"room-{i}-{j}",
                            conflict_type="room_conflict",
                            description=(
                                f"Room overlap in {room_name} on {day}: "
                                f"schedule {i} ({ranges[0]}) and schedule {j} ({ranges[1]})"
                            ),
                            severity="hard",
                            day=day,
                            affected_slots=[i, j],
                            time_ranges=ranges,
                        ))
                    if s1.section_id == s2.section_id:
                        section_name = self.section_names.get(s1.section_id, str(s1.section_id))
                        conflicts.append(ConflictDetail(
                            id=f"sec-{i}-{j}",
                            conflict_type="section_conflict",
                            description=(
                                f"Section overlap for {section_name} on {day}: "
                                f"schedule {i} ({ranges[0]}) and schedule {j} ({ranges[1]})"
                            ),
                            severity="hard",
                            day=day,
                            affected_slots=[i, j],
                            time_ranges=ranges,
                        ))

        conflicts.sort(key=lambda item: item.affected_slots)
        resolutions = [action for conflict in conflicts for action in self.generate_resolutions(conflict)]
        return ConflictReport(conflicts=conflicts, suggested_resolutions=resolutions)

    def first_conflict(self) -> Optional[ConflictDetail]:
        report = self.detect_conflicts()
        return report.conflicts[0] if report.conflicts else None

    def generate_resolutions(self, conflict: ConflictDetail) -> List[ResolutionAction]:
        resolutions = []
        target = conflict.affected_slots[-1]
        if conflict.conflict_type == "room_conflict":
            resolutions.append(ResolutionAction(
                action_type="change_room",
                description="Find another free room of the same type",
                target_slot=target,
                parameters={},
            ))
        resolutions.append(ResolutionAction(
            action_type="move_slot",
            description="Move to a different time slot",
            target_slot=target,
            parameters={"day": conflict.day},
        ))
        return resolutions
