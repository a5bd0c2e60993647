from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from dependencies.security import require_permission
from schemas.grades import RoundingMode
from services.grade_engine import (
    compute_class_statistics,
    french_ordinal,
    rank_students_in_subject,
    rank_students_overall,
    subject_stats,
    unclassified_students,
)
from services.grade_loader import load_class_students, load_grading_context

router = APIRouter(
    prefix="/rankings",
    tags=["rankings"],
    dependencies=[Depends(require_permission("GRADES.read"))],
)


def _no_students():
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": {"code": 404, "message": "Aucun élève trouvé pour cette classe"}},
    )


def _rounding(rounding: Optional[RoundingMode]) -> RoundingMode:
    # 반올림 정책은 요청 단위로만 적용 (저장하지 않음)
    return rounding or RoundingMode(settings.DEFAULT_ROUNDING_MODE)


# ==========================================================
# [1단계] 과목별 순위
# ==========================================================

# ✅ [RANKING] 과목 내 보정 평균 기준 순위
@router.get("/subject")
def get_subject_ranking(
    class_grade: str,
    subject: str,
    school_id: int,
    rounding: Optional[RoundingMode] = None,
    db: Session = Depends(get_db),
):
    students = load_class_students(db, class_grade, school_id)
    if not students:
        return _no_students()

    mode = _rounding(rounding)
    names = {s.id: s.full_name for s in students}
    ranking = rank_students_in_subject(students, subject, mode)
    return {
        "success": True,
        "data": {
            "class_grade": class_grade,
            "subject": subject,
            "rounding": mode.value,
            "rankings": [
                {**e.model_dump(), "name": names[e.student_id], "rank_label": french_ordinal(e.rank)}
                for e in ranking
            ],
            "stats": subject_stats(ranking).model_dump(),
        },
    }


# ✅ [NON CLASSÉ] 기준 점수 미만 학생
@router.get("/unclassified")
def get_unclassified(
    class_grade: str,
    subject: str,
    school_id: int,
    rounding: Optional[RoundingMode] = None,
    pass_mark: Optional[float] = None,
    db: Session = Depends(get_db),
):
    students = load_class_students(db, class_grade, school_id)
    if not students:
        return _no_students()

    threshold = settings.PASS_MARK if pass_mark is None else pass_mark
    names = {s.id: s.full_name for s in students}
    below = unclassified_students(rank_students_in_subject(students, subject, _rounding(rounding)), threshold)
    return {
        "success": True,
        "data": {
            "class_grade": class_grade,
            "subject": subject,
            "pass_mark": threshold,
            "count": len(below),
            "students": [{**e.model_dump(), "name": names[e.student_id]} for e in below],
        },
    }


# ==========================================================
# [2단계] 종합 순위 / 학급 통계
# ==========================================================

# ✅ [RANKING] 종합 평균 기준 순위 + 최저/최고/평균
@router.get("/overall")
def get_overall_ranking(class_grade: str, school_id: int, db: Session = Depends(get_db)):
    students = load_class_students(db, class_grade, school_id)
    if not students:
        return _no_students()

    context = load_grading_context(db, school_id)
    names = {s.id: s.full_name for s in students}
    overall = rank_students_overall(students, context.subjects, context.subject_weights)
    return {
        "success": True,
        "data": {
            "class_grade": class_grade,
            "global_rankings": [
                {**e.model_dump(), "name": names[e.student_id], "rank_label": french_ordinal(e.rank)}
                for e in overall.global_rankings
            ],
            "class_stats": overall.class_stats.model_dump(),
        },
    }


# ✅ [STATISTICS] 과목별 순위/통계 + 종합 순위 전체
@router.get("/statistics")
def get_class_statistics(
    class_grade: str,
    school_id: int,
    rounding: Optional[RoundingMode] = None,
    db: Session = Depends(get_db),
):
    students = load_class_students(db, class_grade, school_id)
    if not students:
        return _no_students()

    context = load_grading_context(db, school_id)
    stats = compute_class_statistics(students, context.subjects, _rounding(rounding), context.subject_weights)
    return {"success": True, "data": stats.model_dump()}
