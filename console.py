"""
Interactive console for the student classification service.

Same operations as the HTTP API, driven by a numbered menu. Errors raised by
the service are printed and the menu comes back.
"""
import logging
from typing import List, Optional

from classification import ClassificationVariable, variable_from_option
from config import LOG_LEVEL, MAX_LEVELS, SEED_DEMO
from database import RecordStore
from errors import ClassificationError
from queries import Answer, SelectionPrompt
from schemas import GradeEntry, Student
from seed import seed_demo_data
from service import ClassificationService

logger = logging.getLogger(__name__)

MENU = """
=== Student Classification ===
1. Build a new classification tree
2. Print tree by levels
3. Compute conditional percentages
4. Print totals and percentages per leaf
5. List students and their history
6. Register new student
7. Register new grade
8. Rebuild tree with the current variables
0. Exit"""


# Input helpers
def ask(prompt: str) -> str:
    return input(f"{prompt}: ").strip()


def ask_non_empty(prompt: str) -> str:
    while True:
        value = ask(prompt)
        if value:
            return value
        print("   The value cannot be empty. Try again.")


def ask_int(prompt: str, min_val: int, max_val: int) -> int:
    """Validated integer input, rejects out-of-range and non-numeric."""
    while True:
        raw = ask(prompt)
        try:
            val = int(raw)
        except ValueError:
            print(f"   Invalid input '{raw}'. Enter a whole number between {min_val} and {max_val}.")
            continue
        if val < min_val or val > max_val:
            print(f"   Must be between {min_val} and {max_val}. Got {val}.")
        else:
            return val


def ask_float(prompt: str, min_val: float, max_val: float) -> float:
    """Validated float input, rejects out-of-range and non-numeric."""
    while True:
        raw = ask(prompt)
        try:
            val = float(raw)
        except ValueError:
            print(f"   Invalid input '{raw}'. Enter a number between {min_val:.2f} and {max_val:.2f}.")
            continue
        if val < min_val or val > max_val:
            print(f"   Must be between {min_val:.2f} and {max_val:.2f}. Got {val}.")
        else:
            return val


def ask_yes_no(prompt: str) -> bool:
    return ask_non_empty(prompt).upper() in ("YES", "Y", "SI", "S")


def ask_ordering(max_levels: int = MAX_LEVELS) -> List[ClassificationVariable]:
    ordering: List[ClassificationVariable] = []
    while len(ordering) < max_levels:
        print("Available variables:")
        for variable in ClassificationVariable:
            print(f" {variable.option}. {variable.display_name}")
        raw = input(f"Variable number for level {len(ordering) + 1} (Enter to finish): ").strip()
        if raw == "":
            break
        try:
            variable = variable_from_option(int(raw))
        except ValueError:
            variable = None
        if variable is None:
            print("   Invalid input. Try again.")
        elif variable in ordering:
            print("   That variable was already selected. Choose another.")
        else:
            ordering.append(variable)
    return ordering


def console_selector(prompt: SelectionPrompt) -> Answer:
    print(f"\n{prompt.variable.display_name} available:")
    for option in prompt.options:
        print(f" {option.option}. {option.label} ({option.count})")
    return input("Select an option or press Enter to stop at this level: ")


# Menu actions
def build_tree(service: ClassificationService) -> None:
    if not service.profiles:
        print("No students registered. Register students before building the tree.")
        return
    ordering = ask_ordering(service.max_levels)
    if not ordering:
        print("No variables selected. Operation cancelled.")
        return
    service.build_tree(ordering)
    print(f"Tree built with {len(ordering)} classification levels.")


def rebuild_tree(service: ClassificationService) -> None:
    service.rebuild_tree()
    print(f"Tree rebuilt with {len(service.ordering)} classification levels.")


def register_student(service: ClassificationService) -> None:
    print("\n=== Student registration ===")
    student_id = ask_non_empty("Student id")
    if service.store.student_exists(student_id):
        print("A student with that id already exists.")
        return
    student = Student(
        student_id=student_id,
        gender=ask_non_empty("Gender"),
        residence=ask_non_empty("Residence"),
        age=ask_int("Age", 1, 110),
        school_of_origin=ask_non_empty("School of origin"),
        school_type=ask_non_empty("School type"),
        employed=ask_yes_no("Employed (Yes/No)"),
        marital_status=ask_non_empty("Marital status"),
    )
    service.add_student(student)
    print("Student registered.")


def register_grade(service: ClassificationService) -> None:
    print("\n=== Grade registration ===")
    student_id = ask_non_empty("Student id")
    if not service.store.student_exists(student_id):
        print("No student with that id exists.")
        return
    entry = GradeEntry(
        student_id=student_id,
        term=ask_int("Term (e.g. 1, 2)", 1, 20),
        subject=ask_non_empty("Subject"),
        grade=ask_float("Grade (0-100)", 0.0, 100.0),
    )
    service.add_grade(entry)
    print("Grade registered.")


def run(service: ClassificationService) -> None:
    actions = {
        "1": build_tree,
        "2": lambda s: print(s.level_order_report()),
        "3": lambda s: print(s.path_report(console_selector)),
        "4": lambda s: print(s.leaf_report()),
        "5": lambda s: print(s.profiles_report()),
        "6": register_student,
        "7": register_grade,
        "8": rebuild_tree,
    }
    while True:
        print(MENU)
        choice = ask("Choose an option")
        if choice == "0":
            break
        action = actions.get(choice)
        if action is None:
            print("Invalid option. Try again.")
            continue
        try:
            action(service)
        except ClassificationError as exc:
            print(exc.message)
    print("Goodbye.")


def main(store: Optional[RecordStore] = None) -> None:
    logging.basicConfig(level=LOG_LEVEL)
    store = store or RecordStore()
    store.ensure_indexes()
    if SEED_DEMO:
        seed_demo_data(store)
    logger.info("Starting console session")
    run(ClassificationService(store))


if __name__ == "__main__":
    main()
