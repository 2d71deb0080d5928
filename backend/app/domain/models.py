from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TaskStatusValue = Literal["todo", "in_progress", "done"]
TaskPriorityValue = Literal["low", "medium", "high"]
BadgeValue = Literal["leader", "active", "moderate", "inactive"]


class StartupCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    idea: str | None = None


class TeamMemberCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    email: str | None = None
    role: str = Field(min_length=1)
    skills: str | None = None


class TeamMemberUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = None
    email: str | None = None
    role: str | None = Field(default=None, min_length=1)
    skills: str | None = None


class TaskCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: str | None = None
    status: TaskStatusValue = "todo"
    priority: TaskPriorityValue = "medium"
    dueDate: str | None = None
    assigneeIds: list[str] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    status: TaskStatusValue | None = None
    priority: TaskPriorityValue | None = None
    dueDate: str | None = None
    assigneeIds: list[str] | None = None


class ContributionRecordResponse(BaseModel):
    memberId: str
    name: str
    role: str
    tasksDone: int
    tasksInProgress: int
    tasksTodo: int
    tasksTotal: int
    weightedScore: float
    contributionPercent: int
    completionRate: int
    badge: BadgeValue


class ContributionSummaryResponse(BaseModel):
    totalMembers: int
    totalTasks: int
    completedTasks: int
    inProgressTasks: int
    overallCompletionRate: int


class ContributionsResponse(BaseModel):
    contributions: list[ContributionRecordResponse]
    summary: ContributionSummaryResponse
