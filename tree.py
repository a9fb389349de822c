"""
Classification tree over a profile population.

The root holds every profile index. Each level splits its parent's indices
by the label of one classification variable, so the children of a node
partition the node's indices exactly. Children are ordered by label.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence

from classification import ClassificationVariable, label
from config import MAX_LEVELS
from errors import EmptyPopulation, InvalidSelection
from schemas import Profile

ROOT_LABEL = "Total population"


@dataclass(eq=False)
class TreeNode:
    label: str
    variable: Optional[ClassificationVariable] = None
    indices: List[int] = field(default_factory=list)
    children: List["TreeNode"] = field(default_factory=list)
    depth: int = 0
    # upward link for path reconstruction only
    parent: Optional["TreeNode"] = field(default=None, repr=False)

    @property
    def count(self) -> int:
        return len(self.indices)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def descriptor(self) -> str:
        if self.variable is None:
            return self.label
        return f"{self.variable.display_name} = {self.label}"

    def walk(self) -> Iterator["TreeNode"]:
        """Yield this node and every descendant, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def signature(self) -> tuple:
        """Labels, counts and child order of the subtree, for structural comparison."""
        variable = self.variable.value if self.variable is not None else None
        return (self.label, variable, self.count, tuple(child.signature() for child in self.children))


def validate_ordering(
    variables: Sequence[ClassificationVariable], max_levels: int = MAX_LEVELS
) -> List[ClassificationVariable]:
    ordering = list(variables)
    if len(ordering) > max_levels:
        raise InvalidSelection(f"At most {max_levels} classification levels are allowed, got {len(ordering)}.")
    seen = set()
    for variable in ordering:
        if variable in seen:
            raise InvalidSelection(f"Variable '{variable.display_name}' was selected more than once.")
        seen.add(variable)
    return ordering


def _expand(node: TreeNode, profiles: Sequence[Profile], ordering: Sequence[ClassificationVariable]) -> None:
    if node.depth >= len(ordering) or not node.indices:
        return

    variable = ordering[node.depth]
    groups: Dict[str, List[int]] = {}
    for index in node.indices:
        groups.setdefault(label(variable, profiles[index]), []).append(index)

    for group_label in sorted(groups):
        child = TreeNode(
            label=group_label,
            variable=variable,
            indices=groups[group_label],
            depth=node.depth + 1,
            parent=node,
        )
        _expand(child, profiles, ordering)
        node.children.append(child)


def build_tree(
    profiles: Sequence[Profile],
    variables: Sequence[ClassificationVariable],
    max_levels: int = MAX_LEVELS,
) -> TreeNode:
    if not profiles:
        raise EmptyPopulation("There are no students registered. Register students before building the tree.")
    ordering = validate_ordering(variables, max_levels)
    root = TreeNode(label=ROOT_LABEL, indices=list(range(len(profiles))))
    _expand(root, profiles, ordering)
    return root
