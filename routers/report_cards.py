from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse, Response
from sqlalchemy.orm import Session
import logging
import re

from config.settings import settings
from database.db import get_db
from dependencies.security import require_permission
from schemas.grades import RoundingMode
from services.grade_engine import compute_class_statistics
from services.grade_loader import load_class_students, load_grading_context, load_student
from services.pdf_service import PDFService
from services.report_card import build_class_report_cards, build_report_card

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/report-cards",
    tags=["bulletins"],
    dependencies=[Depends(require_permission("GRADES.read"))],
)

pdf_service = PDFService()


def _not_found(message: str):
    return JSONResponse(
        status_code=404,
        content={"success": False, "error": {"code": 404, "message": message}},
    )


def _student_card(db: Session, student_id: int, rounding: Optional[RoundingMode]):
    """학생 1명 성적표: 같은 학급 전체로 순위/통계를 계산한 뒤 해당 학생 행만 조립"""
    student = load_student(db, student_id)
    if student is None:
        return None, None

    mode = rounding or RoundingMode(settings.DEFAULT_ROUNDING_MODE)
    context = load_grading_context(db, student.school_id)
    classmates = load_class_students(db, student.class_grade, student.school_id)
    stats = compute_class_statistics(classmates, context.subjects, mode, context.subject_weights)
    record = next(s for s in classmates if s.id == student_id)

    card = build_report_card(
        record, context.subjects, stats,
        subject_groups=context.subject_groups,
        teachers=context.subject_teachers,
        subject_weights=context.subject_weights,
        rounding_mode=mode,
    )
    return card, context


def _class_cards(db: Session, class_grade: str, school_id: int, rounding: Optional[RoundingMode]):
    students = load_class_students(db, class_grade, school_id)
    if not students:
        return [], None

    mode = rounding or RoundingMode(settings.DEFAULT_ROUNDING_MODE)
    context = load_grading_context(db, school_id)
    # 통계는 한 번만 계산
    stats = compute_class_statistics(students, context.subjects, mode, context.subject_weights)
    cards = build_class_report_cards(
        students, context.subjects, stats,
        subject_groups=context.subject_groups,
        teachers=context.subject_teachers,
        subject_weights=context.subject_weights,
        rounding_mode=mode,
    )
    return cards, context


def _pdf_response(content: bytes, filename: str) -> Response:
    # 헤더는 latin-1 만 허용
    filename = re.sub(r"[^\w.-]+", "_", filename, flags=re.ASCII)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ==========================================================
# [1단계] 학생 단위 성적표
# ==========================================================

# ✅ [JSON] 학생 성적표 데이터
@router.get("/student/{student_id}")
def get_student_report_card(
    student_id: int,
    rounding: Optional[RoundingMode] = None,
    db: Session = Depends(get_db),
):
    card, _ = _student_card(db, student_id, rounding)
    if card is None:
        return _not_found("Élève introuvable")
    return {"success": True, "data": card.model_dump()}


# ✅ [HTML] 인쇄용 성적표
@router.get("/student/{student_id}/html", response_class=HTMLResponse)
def get_student_report_card_html(
    student_id: int,
    rounding: Optional[RoundingMode] = None,
    period: str = "1er Trimestre",
    db: Session = Depends(get_db),
):
    card, context = _student_card(db, student_id, rounding)
    if card is None:
        return _not_found("Élève introuvable")
    return HTMLResponse(pdf_service.render_bulletins_html([card], context.school, period))


# ✅ [PDF] 성적표 PDF
@router.get("/student/{student_id}/pdf")
def get_student_report_card_pdf(
    student_id: int,
    rounding: Optional[RoundingMode] = None,
    period: str = "1er Trimestre",
    db: Session = Depends(get_db),
):
    card, context = _student_card(db, student_id, rounding)
    if card is None:
        return _not_found("Élève introuvable")
    content = pdf_service.generate_bulletin_pdf([card], context.school, period)
    return _pdf_response(content, f"bulletin_{card.matricule or student_id}.pdf")


# ==========================================================
# [2단계] 학급 일괄 성적표
# ==========================================================

# ✅ [JSON] 학급 전체 성적표
@router.get("/class")
def get_class_report_cards(
    class_grade: str,
    school_id: int,
    rounding: Optional[RoundingMode] = None,
    db: Session = Depends(get_db),
):
    cards, _ = _class_cards(db, class_grade, school_id, rounding)
    if not cards:
        return _not_found("Aucun élève trouvé pour cette classe")
    return {"success": True, "data": [c.model_dump() for c in cards]}


# ✅ [HTML] 학급 일괄 인쇄
@router.get("/class/html", response_class=HTMLResponse)
def get_class_report_cards_html(
    class_grade: str,
    school_id: int,
    rounding: Optional[RoundingMode] = None,
    period: str = "1er Trimestre",
    db: Session = Depends(get_db),
):
    cards, context = _class_cards(db, class_grade, school_id, rounding)
    if not cards:
        return _not_found("Aucun élève trouvé pour cette classe")
    return HTMLResponse(pdf_service.render_bulletins_html(cards, context.school, period))


# ✅ [PDF] 학급 일괄 PDF
@router.get("/class/pdf")
def get_class_report_cards_pdf(
    class_grade: str,
    school_id: int,
    rounding: Optional[RoundingMode] = None,
    period: str = "1er Trimestre",
    db: Session = Depends(get_db),
):
    cards, context = _class_cards(db, class_grade, school_id, rounding)
    if not cards:
        return _not_found("Aucun élève trouvé pour cette classe")
    logger.info("bulk bulletin PDF: class=%s school=%s students=%d", class_grade, school_id, len(cards))
    content = pdf_service.generate_bulletin_pdf(cards, context.school, period)
    return _pdf_response(content, f"bulletins_{class_grade}.pdf")
