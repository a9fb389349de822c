"""
Read-only queries over a built classification tree.

Structured results (pydantic models) are what the HTTP layer returns; the
``*_report`` functions render the same results as plain text.
"""
from collections import deque
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Union

from pydantic import BaseModel

from classification import ClassificationVariable
from errors import EmptyPopulation, InvalidSelection
from tree import TreeNode

Answer = Optional[Union[int, str]]


class LevelEntry(BaseModel):
    depth: int
    descriptor: str
    count: int


class LeafSummary(BaseModel):
    path: str
    count: int
    percentage: float


class PromptOption(BaseModel):
    option: int
    label: str
    count: int


class SelectionPrompt(BaseModel):
    depth: int
    variable: ClassificationVariable
    options: List[PromptOption]


class PathStep(BaseModel):
    variable: ClassificationVariable
    label: str
    count: int


class PathResult(BaseModel):
    steps: List[PathStep]
    count: int
    total: int
    percentage_of_total: float
    conditional_percentage: float


# A selector receives the options of the current level and answers with a
# 1-based option, or None / "" to stop at the current node.
Selector = Callable[[SelectionPrompt], Answer]


def level_order(root: TreeNode) -> List[List[LevelEntry]]:
    levels: List[List[LevelEntry]] = []
    queue = deque([root])
    while queue:
        level = []
        for _ in range(len(queue)):
            node = queue.popleft()
            level.append(LevelEntry(depth=node.depth, descriptor=node.descriptor, count=node.count))
            queue.extend(node.children)
        levels.append(level)
    return levels


def level_order_report(root: TreeNode) -> str:
    lines = []
    for depth, level in enumerate(level_order(root)):
        lines.append(f"Level {depth}:")
        for entry in level:
            lines.append(f"  - {entry.descriptor} ({entry.count} students)")
    return "\n".join(lines)


def collect_leaves(root: TreeNode) -> List[TreeNode]:
    return [node for node in root.walk() if node.is_leaf]


def path_to_root(node: TreeNode) -> List[TreeNode]:
    """Nodes from the root down to ``node``, both included."""
    path = []
    current: Optional[TreeNode] = node
    while current is not None:
        path.append(current)
        current = current.parent
    path.reverse()
    return path


def render_path(node: TreeNode) -> str:
    steps = path_to_root(node)[1:]
    if not steps:
        return node.label
    return " -> ".join(f"{step.variable.display_name}={step.label}" for step in steps)


def _require_population(root: TreeNode) -> int:
    if root.count == 0:
        raise EmptyPopulation("There are no students in the tree.")
    return root.count


def leaf_summaries(root: TreeNode) -> List[LeafSummary]:
    total = _require_population(root)
    return [
        LeafSummary(path=render_path(leaf), count=leaf.count, percentage=100.0 * leaf.count / total)
        for leaf in collect_leaves(root)
    ]


def leaf_report(root: TreeNode) -> str:
    lines = ["Leaf report:"]
    for summary in leaf_summaries(root):
        lines.append(f" - {summary.path} | Total: {summary.count} | %: {summary.percentage:.2f}")
    return "\n".join(lines)


def _prompt_for(node: TreeNode) -> SelectionPrompt:
    return SelectionPrompt(
        depth=node.depth,
        variable=node.children[0].variable,
        options=[
            PromptOption(option=position, label=child.label, count=child.count)
            for position, child in enumerate(node.children, start=1)
        ],
    )


def _parse_answer(answer: Answer, option_count: int) -> Optional[int]:
    if answer is None:
        return None
    if isinstance(answer, bool):
        raise InvalidSelection("Invalid selection. Query cancelled.")
    if isinstance(answer, str):
        answer = answer.strip()
        if answer == "":
            return None
        try:
            answer = int(answer)
        except ValueError:
            raise InvalidSelection(f"Invalid selection '{answer}'. Query cancelled.")
    if not 1 <= answer <= option_count:
        raise InvalidSelection(f"Selection {answer} is out of range 1-{option_count}. Query cancelled.")
    return answer


def path_query(root: TreeNode, ordering: Sequence[ClassificationVariable], selector: Selector) -> PathResult:
    """Walk down from the root, one selector answer per level.

    Stops when the selector answers None or an empty string, when the node
    has no children or when every level of ``ordering`` has been visited.
    Any malformed or out-of-range answer raises InvalidSelection and no
    result is produced.
    """
    node = root
    parent: Optional[TreeNode] = None
    while node.depth < len(ordering) and node.children:
        choice = _parse_answer(selector(_prompt_for(node)), len(node.children))
        if choice is None:
            break
        parent = node
        node = node.children[choice - 1]

    total = _require_population(root)
    if parent is None:
        conditional = 100.0
    else:
        conditional = 100.0 * node.count / parent.count
    return PathResult(
        steps=[PathStep(variable=step.variable, label=step.label, count=step.count) for step in path_to_root(node)[1:]],
        count=node.count,
        total=total,
        percentage_of_total=100.0 * node.count / total,
        conditional_percentage=conditional,
    )


def path_report(result: PathResult) -> str:
    lines = ["Selected path:"]
    if not result.steps:
        lines.append(" - (total population)")
    for step in result.steps:
        lines.append(f" - {step.variable.display_name}: {step.label}")
    lines.append("")
    lines.append(f"Share of total: {result.percentage_of_total:.2f}%")
    lines.append(f"Share of previous level: {result.conditional_percentage:.2f}%")
    return "\n".join(lines)


def scripted_selector(answers: Iterable[Answer]) -> Selector:
    """Selector that replays ``answers`` in order and stops once they run out."""
    remaining: Iterator[Answer] = iter(answers)

    def select(prompt: SelectionPrompt) -> Answer:
        return next(remaining, None)

    return select
