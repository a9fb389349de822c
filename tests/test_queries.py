import pytest

from classification import ClassificationVariable as V
from errors import EmptyPopulation, InvalidSelection
from profiles import build_profiles
from queries import (
    collect_leaves,
    leaf_report,
    leaf_summaries,
    level_order,
    level_order_report,
    path_query,
    path_report,
    path_to_root,
    render_path,
    scripted_selector,
)
from tests.conftest import make_grades, make_student
from tree import ROOT_LABEL, TreeNode, build_tree


@pytest.fixture
def three_student_tree():
    students = [
        make_student("A", gender="F"),
        make_student("B", gender="F"),
        make_student("C", gender="M"),
    ]
    ordering = [V.GENDER, V.GRADE_RANGE]
    profiles = build_profiles(students, make_grades("A", 65))
    return build_tree(profiles, ordering), ordering


def test_level_order_report(two_student_profiles):
    root = build_tree(two_student_profiles, [V.GRADE_RANGE])
    assert level_order_report(root) == (
        "Level 0:\n"
        "  - Total population (2 students)\n"
        "Level 1:\n"
        "  - Average grade = 60-79 (1 students)\n"
        "  - Average grade = no history (1 students)"
    )


def test_level_order_groups_by_depth(three_student_tree):
    root, _ = three_student_tree
    levels = level_order(root)
    assert [len(level) for level in levels] == [1, 2, 3]
    assert [entry.descriptor for entry in levels[2]] == [
        "Average grade = 60-79",
        "Average grade = no history",
        "Average grade = no history",
    ]


def test_leaf_percentages(two_student_profiles):
    root = build_tree(two_student_profiles, [V.GRADE_RANGE])
    summaries = leaf_summaries(root)
    assert [(s.path, s.count, s.percentage) for s in summaries] == [
        ("Average grade=60-79", 1, 50.0),
        ("Average grade=no history", 1, 50.0),
    ]
    assert leaf_report(root) == (
        "Leaf report:\n"
        " - Average grade=60-79 | Total: 1 | %: 50.00\n"
        " - Average grade=no history | Total: 1 | %: 50.00"
    )


def test_leaf_paths_follow_parents(three_student_tree):
    root, _ = three_student_tree
    leaves = collect_leaves(root)
    assert [render_path(leaf) for leaf in leaves] == [
        "Gender=F -> Average grade=60-79",
        "Gender=F -> Average grade=no history",
        "Gender=M -> Average grade=no history",
    ]
    assert path_to_root(leaves[0])[0] is root
    assert sum(leaf.count for leaf in leaves) == root.count


def test_root_only_tree_leaf(two_student_profiles):
    root = build_tree(two_student_profiles, [])
    summaries = leaf_summaries(root)
    assert [(s.path, s.percentage) for s in summaries] == [(ROOT_LABEL, 100.0)]


def test_empty_root_reports_no_students():
    root = TreeNode(label=ROOT_LABEL)
    with pytest.raises(EmptyPopulation):
        leaf_summaries(root)
    with pytest.raises(EmptyPopulation):
        path_query(root, [], scripted_selector([]))


def test_path_query_select_then_stop(two_student_profiles):
    ordering = [V.GRADE_RANGE]
    root = build_tree(two_student_profiles, ordering)
    result = path_query(root, ordering, scripted_selector(["1"]))
    assert [step.label for step in result.steps] == ["60-79"]
    assert result.count == 1
    assert result.total == 2
    assert result.percentage_of_total == 50.0
    # parent is the root holding both students
    assert result.conditional_percentage == 50.0
    report = path_report(result)
    assert " - Average grade: 60-79" in report
    assert "Share of total: 50.00%" in report
    assert "Share of previous level: 50.00%" in report


def test_path_query_stop_at_root(two_student_profiles):
    ordering = [V.GRADE_RANGE]
    root = build_tree(two_student_profiles, ordering)
    result = path_query(root, ordering, scripted_selector([""]))
    assert result.steps == []
    assert result.percentage_of_total == 100.0
    assert result.conditional_percentage == 100.0


def test_path_query_two_levels(three_student_tree):
    root, ordering = three_student_tree
    prompts = []

    def selector(prompt):
        prompts.append(prompt)
        return 1

    result = path_query(root, ordering, selector)
    assert [step.label for step in result.steps] == ["F", "60-79"]
    assert result.percentage_of_total == pytest.approx(100.0 / 3)
    assert result.conditional_percentage == 50.0
    assert [p.variable for p in prompts] == [V.GENDER, V.GRADE_RANGE]
    assert [(o.option, o.label, o.count) for o in prompts[0].options] == [(1, "F", 2), (2, "M", 1)]


def test_path_query_stops_at_leaf(three_student_tree):
    root, ordering = three_student_tree
    result = path_query(root, ordering, scripted_selector([2, 1, 1, 1]))
    assert [step.label for step in result.steps] == ["M", "no history"]
    assert result.conditional_percentage == 100.0


@pytest.mark.parametrize("answer", ["abc", "3", 0, -1, True])
def test_path_query_invalid_selection(three_student_tree, answer):
    root, ordering = three_student_tree
    with pytest.raises(InvalidSelection):
        path_query(root, ordering, scripted_selector([answer]))
