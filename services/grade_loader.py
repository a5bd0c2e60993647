"""
services/grade_loader.py

DB(ORM) → 계산 엔진 입력(StudentRecord) 변환
- 성적은 저장 순서(id 오름차순)를 유지 → 과목 가중치(첫 성적 계수) 규칙이 재현 가능
- 학생 목록 순서도 id 오름차순 → 동점 순위가 실행마다 같음
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from models.schools import School as SchoolModel
from models.students import Student as StudentModel
from schemas.bonuses import SubjectBonus
from schemas.grades import Grade
from schemas.students import StudentRecord
from services.grade_engine import DEFAULT_SUBJECTS


def to_student_record(student: StudentModel) -> StudentRecord:
    return StudentRecord(
        id=student.id,
        matricule=student.matricule,
        first_name=student.first_name,
        last_name=student.last_name,
        class_grade=student.class_grade,
        photo_url=student.photo_url,
        grades=[Grade.model_validate(g) for g in student.grades],
        subject_bonuses={
            b.subject: SubjectBonus(average_bonus=b.average_bonus, point_bonus=b.point_bonus)
            for b in student.bonuses
        },
    )


def load_class_students(db: Session, class_grade: str, school_id: int) -> List[StudentRecord]:
    # 같은 학급명이라도 학교가 다르면 다른 학급
    query = db.query(StudentModel).filter(
        StudentModel.class_grade == class_grade,
        StudentModel.school_id == school_id,
    )
    return [to_student_record(s) for s in query.order_by(StudentModel.id).all()]


def load_student(db: Session, student_id: int) -> Optional[StudentModel]:
    return db.query(StudentModel).filter(StudentModel.id == student_id).first()


class GradingContext(BaseModel):
    """학교별 계산 설정 (과목 목록/가중치/그룹표/담당 교사) + 성적표 머리말 정보"""
    subjects: List[str] = Field(default_factory=lambda: list(DEFAULT_SUBJECTS))
    subject_weights: Optional[Dict[str, int]] = None
    subject_groups: Optional[Dict[str, List[str]]] = None
    subject_teachers: Dict[str, str] = {}
    school: Dict[str, Any] = {}


def load_grading_context(db: Session, school_id: Optional[int]) -> GradingContext:
    # 학교 설정에 과목 목록이 없으면 기본 13과목
    school = None
    if school_id is not None:
        school = db.query(SchoolModel).filter(SchoolModel.id == school_id).first()
    if school is None:
        return GradingContext()

    return GradingContext(
        subjects=list(school.subjects or DEFAULT_SUBJECTS),
        subject_weights=school.subject_weights or None,
        subject_groups=school.subject_groups or None,
        subject_teachers=school.subject_teachers or {},
        school={
            "name": school.name,
            "address": school.address,
            "academic_year": school.academic_year,
            "director_name": school.director_name,
        },
    )
