import logging
import threading
from typing import Any, Dict, List, Optional, Union
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from classification import ClassificationVariable, variable_catalog
from config import LOG_LEVEL, PORT, SEED_DEMO
from database import RecordStore, db
from errors import (
    ClassificationError,
    DuplicateIdentity,
    EmptyPopulation,
    InvalidSelection,
    NoTreeBuilt,
    StaleTree,
    UnknownStudent,
)
from queries import path_report, scripted_selector
from schemas import GradeEntry, Student
from seed import seed_demo_data
from service import ClassificationService

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Student Classification API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    DuplicateIdentity: 409,
    NoTreeBuilt: 409,
    StaleTree: 409,
    UnknownStudent: 404,
    EmptyPopulation: 422,
    InvalidSelection: 400,
}


@app.exception_handler(ClassificationError)
async def handle_classification_error(request: Request, exc: ClassificationError):
    status = ERROR_STATUS.get(type(exc), 400)
    return JSONResponse(status_code=status, content={"error": exc.kind, "message": exc.message})


_service: Optional[ClassificationService] = None
_service_lock = threading.Lock()


def get_service() -> ClassificationService:
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                store = RecordStore()
                store.ensure_indexes()
                if SEED_DEMO:
                    seed_demo_data(store)
                _service = ClassificationService(store)
                logger.info("Classification service ready with %d students", len(_service.profiles))
    return _service


class TreeIn(BaseModel):
    variables: List[ClassificationVariable] = Field(default_factory=list)


class PathIn(BaseModel):
    # 1-based option per level; stops early when the list runs out
    selections: List[Union[int, str]] = Field(default_factory=list)


def _tree_summary(service: ClassificationService) -> Dict[str, Any]:
    return {
        "state": service.state.value,
        "variables": [variable.value for variable in service.ordering],
        "population": len(service.profiles),
    }


@app.get("/")
def root():
    return {"message": "Student Classification API"}


@app.get("/test")
def test_database():
    resp = {
        "backend": "✅ Running",
        "database": "❌ Not Connected",
        "collections": []
    }
    try:
        if db is not None:
            resp["database"] = "✅ Connected"
            resp["collections"] = db.list_collection_names()
    except Exception as e:
        resp["error"] = str(e)
    return resp


# Records
@app.post("/students")
def create_student(payload: Student, service: ClassificationService = Depends(get_service)):
    service.add_student(payload)
    return {**payload.model_dump(), "tree_state": service.state.value}


@app.get("/students")
def list_students(service: ClassificationService = Depends(get_service)) -> List[Dict[str, Any]]:
    return [profile.student.model_dump() for profile in service.profiles]


@app.post("/grades")
def add_grade(payload: GradeEntry, service: ClassificationService = Depends(get_service)):
    service.add_grade(payload)
    return {**payload.model_dump(), "tree_state": service.state.value}


@app.get("/grades")
def list_grades(student_id: Optional[str] = None, service: ClassificationService = Depends(get_service)):
    grades = service.store.list_grades()
    if student_id:
        grades = [entry for entry in grades if entry.student_id == student_id]
    return [entry.model_dump() for entry in grades]


@app.get("/profiles")
def list_profiles(service: ClassificationService = Depends(get_service)):
    return {
        "profiles": [profile.model_dump() for profile in service.profiles],
        "report": service.profiles_report(),
    }


# Classification tree
@app.get("/variables")
def list_variables():
    return variable_catalog()


@app.post("/tree")
def build_tree(payload: TreeIn, service: ClassificationService = Depends(get_service)):
    service.build_tree(payload.variables)
    return _tree_summary(service)


@app.post("/tree/rebuild")
def rebuild_tree(service: ClassificationService = Depends(get_service)):
    service.rebuild_tree()
    return _tree_summary(service)


@app.get("/tree/state")
def tree_state(service: ClassificationService = Depends(get_service)):
    return _tree_summary(service)


@app.get("/tree/levels")
def tree_levels(service: ClassificationService = Depends(get_service)):
    levels = service.levels()
    return {
        "levels": [[entry.model_dump() for entry in level] for level in levels],
        "report": service.level_order_report(),
    }


@app.get("/tree/leaves")
def tree_leaves(service: ClassificationService = Depends(get_service)):
    leaves = service.leaves()
    return {
        "leaves": [leaf.model_dump() for leaf in leaves],
        "report": service.leaf_report(),
    }


@app.post("/tree/path")
def tree_path(payload: PathIn, service: ClassificationService = Depends(get_service)):
    result = service.path_query(scripted_selector(payload.selections))
    return {
        "result": result.model_dump(mode="json"),
        "report": path_report(result),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
