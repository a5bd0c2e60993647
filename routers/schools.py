from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from database.db import get_db
from dependencies.security import require_permission
from models.schools import School as SchoolModel
from schemas.schools import SchoolCreate, School as SchoolSchema
from services.grade_engine import DEFAULT_SUBJECTS
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schools", tags=["schools"])


def _not_found():
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": {"code": 404, "message": "École introuvable"}},
    )


# ==========================================================
# [1단계] CRUD 기본 라우터
# ==========================================================

# ✅ [CREATE] 학교(테넌트) 설정 추가
@router.post("/", dependencies=[Depends(require_permission("SETTINGS.write"))])
def create_school(school: SchoolCreate, db: Session = Depends(get_db)):
    db_school = SchoolModel(**school.model_dump())
    db.add(db_school)
    db.commit()
    db.refresh(db_school)
    logger.info("school created: id=%s name=%s", db_school.id, db_school.name)
    return {
        "success": True,
        "data": SchoolSchema.model_validate(db_school).model_dump(),
        "message": "École créée avec succès",
    }


# ✅ [READ] 특정 학교 설정 조회
@router.get("/{school_id}")
def read_school(school_id: int, db: Session = Depends(get_db)):
    school = db.query(SchoolModel).filter(SchoolModel.id == school_id).first()
    if school is None:
        return _not_found()
    return {"success": True, "data": SchoolSchema.model_validate(school).model_dump()}


# ✅ [READ] 과목 목록 (설정 없으면 기본 13과목)
@router.get("/{school_id}/subjects")
def read_school_subjects(school_id: int, db: Session = Depends(get_db)):
    school = db.query(SchoolModel).filter(SchoolModel.id == school_id).first()
    if school is None:
        return _not_found()
    return {
        "success": True,
        "data": {
            "school_id": school_id,
            "subjects": school.subjects or list(DEFAULT_SUBJECTS),
            "is_default": not school.subjects,
        },
    }


# ✅ [UPDATE] 학교 설정 수정
@router.put("/{school_id}", dependencies=[Depends(require_permission("SETTINGS.write"))])
def update_school(school_id: int, updated: SchoolCreate, db: Session = Depends(get_db)):
    school = db.query(SchoolModel).filter(SchoolModel.id == school_id).first()
    if school is None:
        return _not_found()

    for key, value in updated.model_dump().items():
        setattr(school, key, value)

    db.commit()
    db.refresh(school)
    logger.info("school updated: id=%s", school_id)
    return {
        "success": True,
        "data": SchoolSchema.model_validate(school).model_dump(),
        "message": "Paramètres de l'école mis à jour",
    }
