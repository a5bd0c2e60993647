
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import logging

from database.db import get_db
from dependencies.security import require_permission
from models.students import Student as StudentModel
from models.subject_bonuses import SubjectBonus as SubjectBonusModel
from schemas.bonuses import BonusBulkSave

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bonuses", tags=["bonuses"])


# ✅ [READ] 학급 × 과목 보너스 조회 (없는 학생은 0)
@router.get("/", dependencies=[Depends(require_permission("GRADES.read"))])
def read_class_bonuses(
    class_grade: str,
    subject: str,
    school_id: int,
    db: Session = Depends(get_db),
):
    query = db.query(StudentModel).filter(
        StudentModel.class_grade == class_grade,
        StudentModel.school_id == school_id,
    )

    data = []
    for student in query.order_by(StudentModel.id).all():
        bonus = next((b for b in student.bonuses if b.subject == subject), None)
        data.append({
            "student_id": student.id,
            "name": f"{student.first_name} {student.last_name}",
            "subject": subject,
            "average_bonus": bonus.average_bonus if bonus else 0.0,
            "point_bonus": bonus.point_bonus if bonus else 0.0,
        })
    return {"success": True, "data": data}


# ✅ [SAVE ALL] 보너스 일괄 저장 (학생+과목 단위 upsert)
@router.put("/bulk", dependencies=[Depends(require_permission("GRADES.write"))])
def save_bonuses(payload: BonusBulkSave, db: Session = Depends(get_db)):
    student_ids = {e.student_id for e in payload.entries}
    found = {
        s.id for s in db.query(StudentModel.id).filter(StudentModel.id.in_(student_ids)).all()
    }
    missing = sorted(student_ids - found)
    if missing:
        return JSONResponse(
            status_code=404,
            content={"success": False, "error": {"code": 404, "message": f"Élèves introuvables: {missing}"}},
        )

    # 같은 학생+과목이 여러 번 오면 마지막 값 사용
    latest = {(e.student_id, e.subject): e for e in payload.entries}
    for entry in latest.values():
        bonus = (
            db.query(SubjectBonusModel)
            .filter(SubjectBonusModel.student_id == entry.student_id, SubjectBonusModel.subject == entry.subject)
            .first()
        )
        if bonus is None:
            bonus = SubjectBonusModel(student_id=entry.student_id, subject=entry.subject)
            db.add(bonus)
        bonus.average_bonus = entry.average_bonus
        bonus.point_bonus = entry.point_bonus

    db.commit()
    logger.info("Bonus enregistrés: %d entrée(s) pour %d élève(s)", len(latest), len(student_ids))
    return {
        "success": True,
        "data": {"saved": len(latest)},
        "message": "Bonus et modifications enregistrés avec succès",
    }
