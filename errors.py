"""
Error kinds raised by the record store and the classification service.

Every error carries a human readable message that presentation layers
show as-is (HTTP body or console line).
"""


class ClassificationError(Exception):
    kind = "classification_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateIdentity(ClassificationError):
    kind = "duplicate_identity"

    def __init__(self, student_id: str):
        super().__init__(f"A student with id '{student_id}' is already registered.")
        self.student_id = student_id


class UnknownStudent(ClassificationError):
    kind = "unknown_student"

    def __init__(self, student_id: str):
        super().__init__(f"No student with id '{student_id}' exists.")
        self.student_id = student_id


class EmptyPopulation(ClassificationError):
    kind = "empty_population"

    def __init__(self, message: str = "There are no students registered."):
        super().__init__(message)


class InvalidSelection(ClassificationError):
    kind = "invalid_selection"


class NoTreeBuilt(ClassificationError):
    kind = "no_tree_built"

    def __init__(self, message: str = "No classification tree has been built yet. Build one first."):
        super().__init__(message)


class StaleTree(ClassificationError):
    kind = "stale_tree"

    def __init__(
        self,
        message: str = "The student population changed since the tree was built. Rebuild the tree first.",
    ):
        super().__init__(message)
