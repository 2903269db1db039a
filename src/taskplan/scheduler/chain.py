"""Task grouping and predecessor-chain ordering."""

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from taskplan.logger import get_logger
from taskplan.models import TaskGroup, WorkItem

from .core import ScheduleWarning

logger = get_logger()


class ChainIssueKind(str, Enum):
    """Ways a predecessor chain can be ambiguous or incomplete."""

    MULTIPLE_HEADS = "multiple_heads"
    MULTIPLE_SUCCESSORS = "multiple_successors"
    MISSING_PREDECESSOR = "missing_predecessor"
    DUPLICATE_NAME = "duplicate_name"
    CYCLE = "cycle"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class ChainIssue:
    """A chain problem resolved by a first-found policy, reported to the caller."""

    kind: ChainIssueKind
    task_ids: tuple[str, ...]
    message: str

    def to_warning(self) -> ScheduleWarning:
        subject = self.task_ids[0] if len(self.task_ids) == 1 else None
        return ScheduleWarning(subject, self.message)


@dataclass
class TaskChain:
    """Task groups with predecessor links resolved to an id-keyed edge list."""

    groups: dict[str, TaskGroup]
    successors: dict[str, list[str]]  # task_id -> ids of groups naming it as predecessor
    heads: list[str]  # ids of groups without a predecessor
    order: list[str] = field(default_factory=list)
    issues: list[ChainIssue] = field(default_factory=list)

    def ordered_groups(self) -> list[TaskGroup]:
        return [self.groups[task_id] for task_id in self.order]


HeadPolicy = Callable[[list[str]], str | None]
SuccessorPolicy = Callable[[list[str]], str | None]


def first_head(heads: list[str]) -> str | None:
    """Pick the first group without a predecessor, in input order."""
    return heads[0] if heads else None


def first_successor(successors: list[str]) -> str | None:
    """Pick the first group naming the current task as predecessor, in input order."""
    return successors[0] if successors else None


def group_items(items: list[WorkItem]) -> list[TaskGroup]:
    """Group work items into one TaskGroup per task id, in first-appearance order.

    A task with operation rows becomes a group of those operations; a task
    without operations becomes a single-item group of the task itself.
    """
    groups: dict[str, TaskGroup] = {}
    task_rows: dict[str, list[WorkItem]] = defaultdict(list)

    for item in items:
        task_rows[item.task_id].append(item)
        if item.task_id not in groups:
            groups[item.task_id] = TaskGroup(
                task_id=item.task_id,
                task_name=item.task_name,
                previous_task=item.previous_task or None,
            )

    for task_id, group in groups.items():
        rows = task_rows[task_id]
        operations = [row for row in rows if row.is_operation]
        group.items = operations if operations else rows[:1]
        group.start_date = next((r.start_date for r in rows if r.start_date), None)

    return list(groups.values())


class TaskChainResolver:
    """Orders task groups by following predecessor names from the chain head."""

    def __init__(
        self,
        *,
        head_policy: HeadPolicy = first_head,
        successor_policy: SuccessorPolicy = first_successor,
    ):
        self.head_policy = head_policy
        self.successor_policy = successor_policy

    def build(self, items: list[WorkItem]) -> TaskChain:
        """Group items and resolve predecessor names into edges."""
        group_list = group_items(items)
        groups = {g.task_id: g for g in group_list}
        issues: list[ChainIssue] = []

        ids_by_name: dict[str, list[str]] = defaultdict(list)
        for group in group_list:
            ids_by_name[group.task_name].append(group.task_id)
        for name, ids in ids_by_name.items():
            if len(ids) > 1:
                issues.append(
                    ChainIssue(
                        ChainIssueKind.DUPLICATE_NAME,
                        tuple(ids),
                        f"Task name '{name}' is shared by tasks {', '.join(ids)}",
                    )
                )

        heads: list[str] = []
        successors: dict[str, list[str]] = defaultdict(list)
        for group in group_list:
            if not group.previous_task:
                heads.append(group.task_id)
                continue
            predecessor_ids = ids_by_name.get(group.previous_task)
            if not predecessor_ids:
                issues.append(
                    ChainIssue(
                        ChainIssueKind.MISSING_PREDECESSOR,
                        (group.task_id,),
                        f"Predecessor '{group.previous_task}' of task '{group.task_name}' "
                        "does not exist",
                    )
                )
                continue
            for predecessor_id in predecessor_ids:
                successors[predecessor_id].append(group.task_id)

        if len(heads) > 1:
            issues.append(
                ChainIssue(
                    ChainIssueKind.MULTIPLE_HEADS,
                    tuple(heads),
                    f"Several tasks have no predecessor: {', '.join(heads)}",
                )
            )
        for task_id, next_ids in successors.items():
            if len(next_ids) > 1:
                issues.append(
                    ChainIssue(
                        ChainIssueKind.MULTIPLE_SUCCESSORS,
                        tuple(next_ids),
                        f"Several tasks follow '{groups[task_id].task_name}': "
                        f"{', '.join(next_ids)}",
                    )
                )

        return TaskChain(groups=groups, successors=dict(successors), heads=heads, issues=issues)

    def resolve(self, items: list[WorkItem]) -> TaskChain:
        """Build the chain and compute its execution order.

        Groups unreachable from the head are left out of the order and
        reported as issues.
        """
        chain = self.build(items)
        order: list[str] = []
        visited: set[str] = set()

        current = self.head_policy(chain.heads)
        while current is not None:
            if current in visited:
                chain.issues.append(
                    ChainIssue(
                        ChainIssueKind.CYCLE,
                        (current,),
                        f"Predecessor chain loops back to task '{chain.groups[current].task_name}'",
                    )
                )
                break
            visited.add(current)
            order.append(current)
            current = self.successor_policy(chain.successors.get(current, []))

        unreachable = tuple(task_id for task_id in chain.groups if task_id not in visited)
        if unreachable:
            chain.issues.append(
                ChainIssue(
                    ChainIssueKind.UNREACHABLE,
                    unreachable,
                    f"Tasks not reachable from the chain head are not scheduled: "
                    f"{', '.join(unreachable)}",
                )
            )

        chain.order = order
        for issue in chain.issues:
            logger.warning(f"Chain: {issue.message}")
        logger.checks(f"Ordered {len(order)} of {len(chain.groups)} task groups")
        return chain
