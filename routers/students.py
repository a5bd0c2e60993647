from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from database.db import get_db
from dependencies.security import require_permission
from models.students import Student as StudentModel
from schemas.students import StudentCreate, Student as StudentSchema

router = APIRouter(prefix="/students", tags=["students"])


def _not_found():
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": {"code": 404, "message": "Élève introuvable"}},
    )


# ==========================================================
# [1단계] CRUD 기본 라우터
# ==========================================================

# ✅ [CREATE] 학생 정보 추가
@router.post("/", dependencies=[Depends(require_permission("STUDENTS.enroll"))])
def create_student(student: StudentCreate, db: Session = Depends(get_db)):
    db_student = StudentModel(**student.model_dump())
    db.add(db_student)
    db.commit()
    db.refresh(db_student)
    return {
        "success": True,
        "data": StudentSchema.model_validate(db_student).model_dump(),
        "message": "Élève inscrit avec succès",
    }


# ✅ [READ] 학생 목록 (학교/학급 필터)
@router.get("/", dependencies=[Depends(require_permission("STUDENTS.read"))])
def read_students(
    school_id: Optional[int] = None,
    class_grade: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(StudentModel)
    if school_id is not None:
        query = query.filter(StudentModel.school_id == school_id)
    if class_grade:
        query = query.filter(StudentModel.class_grade == class_grade)
    records = query.order_by(StudentModel.id).all()
    return {
        "success": True,
        "data": [StudentSchema.model_validate(r).model_dump() for r in records],
    }


# ✅ [READ] 학급 라벨 목록
@router.get("/classes", dependencies=[Depends(require_permission("STUDENTS.read"))])
def read_class_labels(school_id: Optional[int] = None, db: Session = Depends(get_db)):
    query = db.query(StudentModel.class_grade).distinct()
    if school_id is not None:
        query = query.filter(StudentModel.school_id == school_id)
    return {"success": True, "data": sorted(r[0] for r in query.all())}


# ==========================================================
# [2단계] 동적 라우터
# ==========================================================

# ✅ [READ] 특정 학생 조회
@router.get("/{student_id}", dependencies=[Depends(require_permission("STUDENTS.read"))])
def read_student(student_id: int, db: Session = Depends(get_db)):
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        return _not_found()
    return {"success": True, "data": StudentSchema.model_validate(student).model_dump()}


# ✅ [UPDATE] 학생 정보 수정
@router.put("/{student_id}", dependencies=[Depends(require_permission("STUDENTS.enroll"))])
def update_student(student_id: int, updated: StudentCreate, db: Session = Depends(get_db)):
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        return _not_found()

    for key, value in updated.model_dump().items():
        setattr(student, key, value)

    db.commit()
    db.refresh(student)
    return {
        "success": True,
        "data": StudentSchema.model_validate(student).model_dump(),
        "message": "Élève mis à jour",
    }


# ✅ [DELETE] 학생 삭제 (성적/보너스 함께 삭제)
@router.delete("/{student_id}", dependencies=[Depends(require_permission("STUDENTS.enroll"))])
def delete_student(student_id: int, db: Session = Depends(get_db)):
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        return _not_found()

    db.delete(student)
    db.commit()
    return {"success": True, "data": {"student_id": student_id}, "message": "Élève supprimé"}
