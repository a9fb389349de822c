import logging
import threading
from enum import Enum
from typing import List, Optional, Sequence

from classification import ClassificationVariable
from config import AUTO_REBUILD, MAX_LEVELS, PASS_THRESHOLD
from database import RecordStore
from errors import EmptyPopulation, NoTreeBuilt, StaleTree, UnknownStudent
from profiles import build_profiles, describe_profile
from queries import (
    LeafSummary,
    LevelEntry,
    PathResult,
    Selector,
    leaf_report,
    leaf_summaries,
    level_order,
    level_order_report,
    path_query,
    path_report,
)
from schemas import GradeEntry, Profile, Student
from tree import TreeNode, build_tree, validate_ordering

logger = logging.getLogger(__name__)


class TreeState(str, Enum):
    ABSENT = "absent"
    BUILT = "built"
    STALE = "stale"


class ClassificationService:
    """
    Owns the profile population, the active variable ordering and the tree.

    Any mutation of the population reloads the profiles from the record
    store. The tree is then either marked stale (default) or rebuilt with the
    retained ordering when ``auto_rebuild`` is set. Queries only run against
    a tree in the ``built`` state.
    """

    def __init__(
        self,
        store: RecordStore,
        pass_threshold: float = PASS_THRESHOLD,
        max_levels: int = MAX_LEVELS,
        auto_rebuild: bool = AUTO_REBUILD,
    ):
        self.store = store
        self.pass_threshold = pass_threshold
        self.max_levels = max_levels
        self.auto_rebuild = auto_rebuild
        self.ordering: List[ClassificationVariable] = []
        self.tree: Optional[TreeNode] = None
        # population, ordering, tree and state change together under this lock
        self._lock = threading.RLock()
        self.state = TreeState.ABSENT
        self.profiles: List[Profile] = []
        self.refresh_profiles()

    def refresh_profiles(self) -> List[Profile]:
        with self._lock:
            self.profiles = build_profiles(self.store.list_students(), self.store.list_grades(), self.pass_threshold)
        logger.info("Loaded %d student profiles", len(self.profiles))
        return self.profiles

    def _population_changed(self) -> None:
        self.refresh_profiles()
        if self.state is TreeState.ABSENT:
            return
        if self.auto_rebuild:
            self.rebuild_tree()
        else:
            self.state = TreeState.STALE
            logger.info("Classification tree marked stale")

    # Records

    def add_student(self, student: Student) -> None:
        with self._lock:
            self.store.add_student(student)
            self._population_changed()

    def add_grade(self, entry: GradeEntry) -> None:
        with self._lock:
            if not self.store.student_exists(entry.student_id):
                raise UnknownStudent(entry.student_id)
            self.store.add_grade(entry)
            self._population_changed()

    def profiles_report(self) -> str:
        profiles = self.profiles
        if not profiles:
            return "No students stored."
        separator = "-" * 40
        return "\n".join(f"{separator}\n{describe_profile(profile)}" for profile in profiles)

    # Tree lifecycle

    def build_tree(self, variables: Sequence[ClassificationVariable]) -> TreeNode:
        with self._lock:
            if not self.profiles:
                raise EmptyPopulation("There are no students registered. Register students before building the tree.")
            ordering = validate_ordering(variables, self.max_levels)
            self.tree = build_tree(self.profiles, ordering, self.max_levels)
            self.ordering = ordering
            self.state = TreeState.BUILT
            logger.info(
                "Built classification tree with %d levels over %d students",
                len(ordering),
                self.tree.count,
            )
            return self.tree

    def rebuild_tree(self) -> TreeNode:
        with self._lock:
            if self.state is TreeState.ABSENT:
                raise NoTreeBuilt()
            return self.build_tree(self.ordering)

    def require_tree(self) -> TreeNode:
        """The current tree; a built tree is never mutated, only replaced."""
        with self._lock:
            if self.state is TreeState.ABSENT or self.tree is None:
                raise NoTreeBuilt()
            if self.state is TreeState.STALE:
                raise StaleTree()
            return self.tree

    # Queries

    def levels(self) -> List[List[LevelEntry]]:
        return level_order(self.require_tree())

    def level_order_report(self) -> str:
        return level_order_report(self.require_tree())

    def leaves(self) -> List[LeafSummary]:
        return leaf_summaries(self.require_tree())

    def leaf_report(self) -> str:
        return leaf_report(self.require_tree())

    def path_query(self, selector: Selector) -> PathResult:
        with self._lock:
            tree, ordering = self.require_tree(), list(self.ordering)
        # the selector may block on user input, so walk outside the lock
        return path_query(tree, ordering, selector)

    def path_report(self, selector: Selector) -> str:
        return path_report(self.path_query(selector))
