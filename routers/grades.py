from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from config.settings import settings
from database.db import get_db
from dependencies.security import require_permission
from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from schemas.grades import GradeCreate, GradeOut, GradeUpdate, RoundingMode
from services.grade_engine import overall_average, student_subject_average, subject_totals
from services.grade_loader import load_grading_context, to_student_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grades", tags=["grades"])

can_read = Depends(require_permission("GRADES.read"))
can_write = Depends(require_permission("GRADES.write"))


def _not_found(message: str):
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": {"code": 404, "message": message}},
    )


def _grade_data(grade: GradeModel) -> dict:
    return GradeOut.model_validate(grade).model_dump()


# ==========================================================
# [1단계] 학생 단위 조회
# ==========================================================

# ✅ [READ] 특정 학생의 성적 목록 (입력 순서)
@router.get("/student/{student_id}", dependencies=[can_read])
def read_student_grades(student_id: int, subject: Optional[str] = None, db: Session = Depends(get_db)):
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        return _not_found("Élève introuvable")

    grades = [g for g in student.grades if subject is None or g.subject == subject]
    return {"success": True, "data": [_grade_data(g) for g in grades]}


# ✅ [READ] 특정 학생의 과목별/종합 평균 (저장하지 않고 매번 계산)
@router.get("/student/{student_id}/averages", dependencies=[can_read])
def read_student_averages(
    student_id: int,
    rounding: Optional[RoundingMode] = None,
    db: Session = Depends(get_db),
):
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        return _not_found("Élève introuvable")

    rounding = rounding or RoundingMode(settings.DEFAULT_ROUNDING_MODE)
    context = load_grading_context(db, student.school_id)
    record = to_student_record(student)

    subjects = []
    for subject in context.subjects:
        points, total_coef, count = subject_totals(record.grades, subject)
        subjects.append({
            "subject": subject,
            "count": count,
            "average": points / total_coef if total_coef > 0 else 0.0,
            "adjusted_average": student_subject_average(record, subject, rounding),
        })

    return {
        "success": True,
        "data": {
            "student_id": student_id,
            "rounding": rounding.value,
            "subjects": subjects,
            "overall_average": overall_average(record, context.subjects, context.subject_weights),
        },
    }


# ==========================================================
# [2단계] CRUD 기본 라우터
# ==========================================================

# ✅ [CREATE] 성적 추가 (범위 검증은 GradeCreate 스키마에서)
@router.post("/", dependencies=[can_write])
def create_grade(grade: GradeCreate, db: Session = Depends(get_db)):
    student = db.query(StudentModel).filter(StudentModel.id == grade.student_id).first()
    if student is None:
        return _not_found("Élève introuvable")

    payload = grade.model_dump()
    payload["date"] = payload["date"] or datetime.now()
    db_grade = GradeModel(**payload)
    db.add(db_grade)
    db.commit()
    db.refresh(db_grade)

    logger.info(
        "Saisie Note: student=%s subject=%s value=%s/20 coef=%s",
        student.id, db_grade.subject, db_grade.value, db_grade.coefficient,
    )
    return {"success": True, "data": _grade_data(db_grade), "message": "Note enregistrée"}


# ✅ [READ] 특정 성적 조회
@router.get("/{grade_id}", dependencies=[can_read])
def read_grade(grade_id: int, db: Session = Depends(get_db)):
    grade = db.query(GradeModel).filter(GradeModel.id == grade_id).first()
    if grade is None:
        return _not_found("Note introuvable")
    return {"success": True, "data": _grade_data(grade)}


# ✅ [UPDATE] 성적 수정
@router.put("/{grade_id}", dependencies=[can_write])
def update_grade(grade_id: int, updated: GradeUpdate, db: Session = Depends(get_db)):
    grade = db.query(GradeModel).filter(GradeModel.id == grade_id).first()
    if grade is None:
        return _not_found("Note introuvable")

    for key, value in updated.model_dump(exclude_none=True).items():
        setattr(grade, key, value)

    db.commit()
    db.refresh(grade)
    logger.info(
        "Modification Note: student=%s subject=%s value=%s/20",
        grade.student_id, grade.subject, grade.value,
    )
    return {"success": True, "data": _grade_data(grade), "message": "Note modifiée"}


# ✅ [DELETE] 성적 삭제
@router.delete("/{grade_id}", dependencies=[can_write])
def delete_grade(grade_id: int, db: Session = Depends(get_db)):
    grade = db.query(GradeModel).filter(GradeModel.id == grade_id).first()
    if grade is None:
        return _not_found("Note introuvable")

    student_id = grade.student_id
    db.delete(grade)
    db.commit()
    logger.warning("Suppression Note: student=%s grade=%s", student_id, grade_id)
    return {"success": True, "data": {"grade_id": grade_id}, "message": "Note supprimée"}
