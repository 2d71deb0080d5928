"""Team contribution scoring.

Members earn the full priority weight for every finished task they are
assigned to and a fraction of it for work in progress. Credit is shared, not
split: a task done by three people awards each of them the whole weight.
Scores are then normalised into percentages that always total 100 and every
member is ranked and given a badge.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

UNNAMED_MEMBER = "Без имени"
IN_PROGRESS_CREDIT = 0.3
ACTIVE_COMPLETION_RATE = 60
DEFAULT_WEIGHT = 1.0


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> Priority:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class TaskStatus(str, Enum):
    DONE = "done"
    IN_PROGRESS = "in_progress"
    TODO = "todo"

    @classmethod
    def parse(cls, value: Any) -> TaskStatus:
        # anything that is not done/in_progress counts as not started
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.TODO


class Badge(str, Enum):
    LEADER = "leader"
    ACTIVE = "active"
    MODERATE = "moderate"
    INACTIVE = "inactive"


DEFAULT_PRIORITY_WEIGHTS: Mapping[Priority, float] = {
    Priority.HIGH: 3.0,
    Priority.MEDIUM: 2.0,
    Priority.LOW: 1.0,
    Priority.UNKNOWN: DEFAULT_WEIGHT,
}


@dataclass(frozen=True)
class TeamMember:
    id: str
    name: str = ""
    role: str = ""

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> TeamMember:
        return cls(
            id=str(row.get("id")),
            name=str(row.get("name") or ""),
            role=str(row.get("role") or ""),
        )


@dataclass(frozen=True)
class Task:
    id: str
    priority: Priority | str = Priority.UNKNOWN
    status: TaskStatus | str = TaskStatus.TODO
    assignees: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> Task:
        return cls(
            id=str(row.get("id")),
            priority=Priority.parse(row.get("priority")),
            status=TaskStatus.parse(row.get("status")),
            assignees=tuple(str(a) for a in (row.get("assigneeIds") or [])),
        )


@dataclass(frozen=True)
class ContributionRecord:
    member_id: str
    name: str
    role: str
    tasks_done: int
    tasks_in_progress: int
    tasks_todo: int
    tasks_total: int
    weighted_score: float
    contribution_percent: int
    completion_rate: int
    badge: Badge

    def to_dict(self) -> dict[str, Any]:
        return {
            "memberId": self.member_id,
            "name": self.name,
            "role": self.role,
            "tasksDone": self.tasks_done,
            "tasksInProgress": self.tasks_in_progress,
            "tasksTodo": self.tasks_todo,
            "tasksTotal": self.tasks_total,
            "weightedScore": self.weighted_score,
            "contributionPercent": self.contribution_percent,
            "completionRate": self.completion_rate,
            "badge": self.badge.value,
        }


@dataclass(frozen=True)
class ContributionSummary:
    total_members: int
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    overall_completion_rate: int

    def to_dict(self) -> dict[str, int]:
        return {
            "totalMembers": self.total_members,
            "totalTasks": self.total_tasks,
            "completedTasks": self.completed_tasks,
            "inProgressTasks": self.in_progress_tasks,
            "overallCompletionRate": self.overall_completion_rate,
        }


@dataclass(frozen=True)
class ContributionReport:
    contributions: tuple[ContributionRecord, ...]
    summary: ContributionSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "contributions": [c.to_dict() for c in self.contributions],
            "summary": self.summary.to_dict(),
        }


@dataclass
class _Tally:
    member: TeamMember
    done: int = 0
    in_progress: int = 0
    todo: int = 0
    total: int = 0
    score: float = 0.0
    percent: int = 0
    completion: int = 0
    badge: Badge = Badge.INACTIVE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _pct(part: float, whole: float) -> int:
    return _round_half_up(part / whole * 100) if whole > 0 else 0


def _badge_for(rank: int, tally: _Tally) -> Badge:
    if tally.total == 0:
        return Badge.INACTIVE
    if rank == 0 and tally.score > 0:
        return Badge.LEADER
    if tally.completion >= ACTIVE_COMPLETION_RATE:
        return Badge.ACTIVE
    return Badge.MODERATE


def compute_contributions(
    members: Iterable[TeamMember],
    tasks: Iterable[Task],
    *,
    weights: Mapping[Priority, float] | None = None,
    in_progress_credit: float = IN_PROGRESS_CREDIT,
) -> ContributionReport:
    """Score every roster member against a snapshot of tasks.

    The returned contributions are ordered by weighted score, highest first.
    Members with equal scores keep their roster order, both in the output and
    when deciding who gets the leader badge. Assignee ids that are not on the
    roster are ignored.
    """
    weights = DEFAULT_PRIORITY_WEIGHTS if weights is None else weights
    members = list(members)
    tasks = list(tasks)

    ledger: dict[str, _Tally] = {}
    for member in members:
        ledger[member.id] = _Tally(member=member)

    for task in tasks:
        weight = float(weights.get(Priority.parse(task.priority), DEFAULT_WEIGHT))
        status = TaskStatus.parse(task.status)
        for assignee in task.assignees:
            tally = ledger.get(assignee)
            if tally is None:
                continue
            tally.total += 1
            if status is TaskStatus.DONE:
                tally.done += 1
                tally.score += weight
            elif status is TaskStatus.IN_PROGRESS:
                tally.in_progress += 1
                tally.score += weight * in_progress_credit
            else:
                tally.todo += 1

    tallies = list(ledger.values())
    total_score = sum(t.score for t in tallies)
    for tally in tallies:
        tally.percent = _pct(tally.score, total_score)
        tally.completion = _pct(tally.done, tally.total)

    ranked = sorted(tallies, key=lambda t: t.score, reverse=True)
    for rank, tally in enumerate(ranked):
        tally.badge = _badge_for(rank, tally)

    # push rounding drift onto the largest share so the percents total 100
    percent_sum = sum(t.percent for t in tallies)
    if percent_sum and percent_sum != 100:
        top = max(tallies, key=lambda t: t.percent)
        top.percent += 100 - percent_sum

    statuses = [TaskStatus.parse(task.status) for task in tasks]
    completed = statuses.count(TaskStatus.DONE)
    summary = ContributionSummary(
        total_members=len(members),
        total_tasks=len(tasks),
        completed_tasks=completed,
        in_progress_tasks=statuses.count(TaskStatus.IN_PROGRESS),
        overall_completion_rate=_pct(completed, len(tasks)),
    )

    records = tuple(
        ContributionRecord(
            member_id=t.member.id,
            name=t.member.name or UNNAMED_MEMBER,
            role=t.member.role,
            tasks_done=t.done,
            tasks_in_progress=t.in_progress,
            tasks_todo=t.todo,
            tasks_total=t.total,
            weighted_score=t.score,
            contribution_percent=t.percent,
            completion_rate=t.completion,
            badge=t.badge,
        )
        for t in ranked
    )
    return ContributionReport(contributions=records, summary=summary)
