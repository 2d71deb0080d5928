import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from app.domain.contributions import (  # noqa: E402
    UNNAMED_MEMBER,
    Badge,
    Priority,
    Task,
    TaskStatus,
    TeamMember,
    compute_contributions,
)


def _by_id(report):
    return {c.member_id: c for c in report.contributions}


class ContributionScoringTests(unittest.TestCase):
    def setUp(self) -> None:
        self.alice = TeamMember(id="m1", name="Alice", role="CEO")
        self.bob = TeamMember(id="m2", name="Bob", role="CTO")
        self.carol = TeamMember(id="m3", name="Carol", role="Designer")

    def test_done_and_todo_split_between_two_members(self) -> None:
        report = compute_contributions(
            [self.alice, self.bob],
            [
                Task(id="t1", priority="high", status="done", assignees=("m1",)),
                Task(id="t2", priority="low", status="todo", assignees=("m2",)),
            ],
        )
        alice, bob = report.contributions

        self.assertEqual(alice.member_id, "m1")
        self.assertEqual(alice.weighted_score, 3)
        self.assertEqual((alice.tasks_done, alice.tasks_total), (1, 1))
        self.assertEqual(alice.completion_rate, 100)
        self.assertEqual(alice.contribution_percent, 100)
        self.assertEqual(alice.badge, Badge.LEADER)

        self.assertEqual(bob.weighted_score, 0)
        self.assertEqual((bob.tasks_todo, bob.tasks_total), (1, 1))
        self.assertEqual(bob.completion_rate, 0)
        self.assertEqual(bob.contribution_percent, 0)
        self.assertEqual(bob.badge, Badge.MODERATE)

        self.assertEqual(report.summary.total_tasks, 2)
        self.assertEqual(report.summary.completed_tasks, 1)
        self.assertEqual(report.summary.overall_completion_rate, 50)

    def test_in_progress_earns_partial_credit(self) -> None:
        report = compute_contributions(
            [self.alice, self.bob],
            [Task(id="t1", priority="medium", status="in_progress", assignees=("m1",))],
        )
        records = _by_id(report)

        self.assertAlmostEqual(records["m1"].weighted_score, 0.6)
        self.assertEqual(records["m1"].tasks_in_progress, 1)
        self.assertEqual(records["m1"].contribution_percent, 100)
        self.assertEqual(records["m1"].badge, Badge.LEADER)
        self.assertEqual(records["m2"].badge, Badge.INACTIVE)
        self.assertEqual(records["m2"].tasks_total, 0)
        self.assertEqual(report.summary.in_progress_tasks, 1)
        self.assertEqual(report.summary.overall_completion_rate, 0)

    def test_empty_roster_and_tasks(self) -> None:
        report = compute_contributions([], [])

        self.assertEqual(report.contributions, ())
        self.assertEqual(
            report.summary.to_dict(),
            {
                "totalMembers": 0,
                "totalTasks": 0,
                "completedTasks": 0,
                "inProgressTasks": 0,
                "overallCompletionRate": 0,
            },
        )

    def test_rounding_drift_goes_to_first_largest_share(self) -> None:
        tasks = [
            Task(id=f"t{i}", priority="high", status="done", assignees=(member,))
            for i, member in enumerate(("m1", "m2", "m3"))
        ]
        report = compute_contributions([self.alice, self.bob, self.carol], tasks)
        percents = {c.member_id: c.contribution_percent for c in report.contributions}

        self.assertEqual(percents, {"m1": 34, "m2": 33, "m3": 33})
        self.assertEqual(sum(percents.values()), 100)

    def test_rounding_overshoot_is_taken_from_largest_share(self) -> None:
        # raw shares 12.5 / 37.5 / 50 round half up to 13 / 38 / 50
        report = compute_contributions(
            [self.alice, self.bob, self.carol],
            [
                Task(id="t1", priority="low", status="done", assignees=("m1",)),
                Task(id="t2", priority="high", status="done", assignees=("m2",)),
                Task(id="t3", priority="high", status="done", assignees=("m3",)),
                Task(id="t4", priority="low", status="done", assignees=("m3",)),
            ],
        )
        percents = {c.member_id: c.contribution_percent for c in report.contributions}

        self.assertEqual(percents, {"m1": 13, "m2": 38, "m3": 49})

    def test_shared_task_awards_full_weight_to_every_assignee(self) -> None:
        report = compute_contributions(
            [self.alice, self.bob, self.carol],
            [Task(id="t1", priority="high", status="done", assignees=("m1", "m2", "m3"))],
        )

        for record in report.contributions:
            self.assertEqual(record.weighted_score, 3)
            self.assertEqual(record.tasks_done, 1)
        self.assertEqual(report.summary.total_tasks, 1)
        self.assertEqual(report.summary.completed_tasks, 1)

    def test_unknown_assignee_is_ignored(self) -> None:
        report = compute_contributions(
            [self.alice],
            [Task(id="t1", priority="low", status="done", assignees=("ghost", "m1"))],
        )

        self.assertEqual([c.member_id for c in report.contributions], ["m1"])
        self.assertEqual(report.contributions[0].weighted_score, 1)

    def test_unknown_priority_and_status_fall_back(self) -> None:
        report = compute_contributions(
            [self.alice],
            [
                Task(id="t1", priority="urgent", status="done", assignees=("m1",)),
                Task(id="t2", priority=None, status="blocked", assignees=("m1",)),
            ],
        )
        alice = report.contributions[0]

        self.assertEqual(alice.weighted_score, 1)
        self.assertEqual((alice.tasks_done, alice.tasks_todo, alice.tasks_total), (1, 1, 2))
        self.assertEqual(alice.completion_rate, 50)

    def test_ties_keep_roster_order(self) -> None:
        report = compute_contributions(
            [self.alice, self.bob, self.carol],
            [
                Task(id="t1", priority="medium", status="done", assignees=("m2",)),
                Task(id="t2", priority="medium", status="done", assignees=("m3",)),
            ],
        )

        self.assertEqual([c.member_id for c in report.contributions], ["m2", "m3", "m1"])
        self.assertEqual(
            [c.badge for c in report.contributions],
            [Badge.LEADER, Badge.ACTIVE, Badge.INACTIVE],
        )

    def test_no_leader_when_top_score_is_zero(self) -> None:
        report = compute_contributions(
            [self.alice, self.bob],
            [Task(id="t1", priority="high", status="todo", assignees=("m1",))],
        )
        records = _by_id(report)

        self.assertEqual(report.contributions[0].member_id, "m1")
        self.assertEqual(records["m1"].badge, Badge.MODERATE)
        self.assertEqual(records["m2"].badge, Badge.INACTIVE)
        self.assertEqual([c.contribution_percent for c in report.contributions], [0, 0])

    def test_zero_weight_completed_work_is_active_not_leader(self) -> None:
        weights = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 0, Priority.UNKNOWN: 1}
        report = compute_contributions(
            [self.alice],
            [Task(id="t1", priority="low", status="done", assignees=("m1",))],
            weights=weights,
        )

        self.assertEqual(report.contributions[0].weighted_score, 0)
        self.assertEqual(report.contributions[0].badge, Badge.ACTIVE)

    def test_leader_badge_ignores_completion_rate(self) -> None:
        tasks = [Task(id="t0", priority="high", status="done", assignees=("m1",))]
        tasks += [Task(id=f"t{i}", priority="low", status="todo", assignees=("m1",)) for i in range(1, 4)]
        report = compute_contributions([self.alice], tasks)

        self.assertEqual(report.contributions[0].completion_rate, 25)
        self.assertEqual(report.contributions[0].badge, Badge.LEADER)

    def test_custom_weights_change_scores(self) -> None:
        weights = {Priority.HIGH: 10, Priority.MEDIUM: 5, Priority.LOW: 1}
        report = compute_contributions(
            [self.alice, self.bob],
            [
                Task(id="t1", priority=Priority.HIGH, status=TaskStatus.DONE, assignees=("m1",)),
                Task(id="t2", priority="mystery", status="in_progress", assignees=("m2",)),
            ],
            weights=weights,
        )
        records = _by_id(report)

        self.assertEqual(records["m1"].weighted_score, 10)
        self.assertAlmostEqual(records["m2"].weighted_score, 0.3)
        self.assertEqual(records["m1"].contribution_percent + records["m2"].contribution_percent, 100)

    def test_empty_name_gets_placeholder(self) -> None:
        report = compute_contributions([TeamMember(id="m9", name="", role="Intern")], [])

        self.assertEqual(report.contributions[0].name, UNNAMED_MEMBER)
        self.assertEqual(report.contributions[0].role, "Intern")

    def test_invariants_hold_for_mixed_team(self) -> None:
        members = [TeamMember(id=f"m{i}", name=f"Member {i}") for i in range(6)]
        statuses = ["done", "in_progress", "todo", "done", "review"]
        priorities = ["high", "medium", "low", "critical"]
        tasks = [
            Task(
                id=f"t{i}",
                priority=priorities[i % len(priorities)],
                status=statuses[i % len(statuses)],
                assignees=tuple(f"m{j}" for j in range(i % 4) if (i + j) % 3),
            )
            for i in range(17)
        ]
        report = compute_contributions(members, tasks)

        ids = [c.member_id for c in report.contributions]
        self.assertEqual(sorted(ids), sorted(m.id for m in members))
        self.assertEqual(sum(c.contribution_percent for c in report.contributions), 100)
        scores = [c.weighted_score for c in report.contributions]
        self.assertEqual(scores, sorted(scores, reverse=True))
        for record in report.contributions:
            self.assertEqual(
                record.tasks_done + record.tasks_in_progress + record.tasks_todo,
                record.tasks_total,
            )
            self.assertEqual(record.badge is Badge.INACTIVE, record.tasks_total == 0)
        self.assertEqual(report.summary.total_members, 6)
        self.assertEqual(report.summary.total_tasks, 17)

    def test_same_input_gives_same_report(self) -> None:
        members = [self.alice, self.bob]
        tasks = [
            Task(id="t1", priority="high", status="in_progress", assignees=("m1", "m2")),
            Task(id="t2", priority="low", status="done", assignees=("m2",)),
        ]

        self.assertEqual(compute_contributions(members, tasks), compute_contributions(members, tasks))

    def test_from_mapping_reads_repository_rows(self) -> None:
        member = TeamMember.from_mapping({"id": "m1", "name": None, "role": "CTO"})
        task = Task.from_mapping(
            {"id": "t1", "priority": "high", "status": "in_progress", "assigneeIds": ["m1"]}
        )

        self.assertEqual(member, TeamMember(id="m1", name="", role="CTO"))
        self.assertIs(task.priority, Priority.HIGH)
        self.assertIs(task.status, TaskStatus.IN_PROGRESS)
        self.assertEqual(task.assignees, ("m1",))

    def test_to_dict_uses_wire_names(self) -> None:
        report = compute_contributions(
            [self.alice],
            [Task(id="t1", priority="high", status="done", assignees=("m1",))],
        )
        payload = report.to_dict()

        self.assertEqual(
            payload["contributions"][0],
            {
                "memberId": "m1",
                "name": "Alice",
                "role": "CEO",
                "tasksDone": 1,
                "tasksInProgress": 0,
                "tasksTodo": 0,
                "tasksTotal": 1,
                "weightedScore": 3.0,
                "contributionPercent": 100,
                "completionRate": 100,
                "badge": "leader",
            },
        )


if __name__ == "__main__":
    unittest.main()
