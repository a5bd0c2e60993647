"""
services/report_card.py

성적표(bulletin) 행 조립
- 과목 → 그룹(LETTRES / SCIENCES / AUTRES) 분류, 그룹 소계(BILAN), 총계(TOTAUX GÉNÉRAUX)
- 과목 그룹표/평어(appreciation) 표는 기본값을 두되 인자로 교체 가능 (학교별 설정)
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from schemas.grades import RoundingMode
from schemas.report_card import (
    ClassStatistics,
    GroupSummary,
    ReportCard,
    ReportCardGroup,
    ReportCardTotals,
    SubjectRow,
)
from schemas.students import StudentRecord
from services.grade_engine import (
    DEFAULT_SUBJECTS,
    french_ordinal,
    grades_for_subject,
    overall_totals,
    student_subject_average,
    subject_average,
    subject_weight,
)

OTHER_GROUP = "AUTRES"

# ✅ 기본 과목 그룹표 (없는 과목은 AUTRES)
DEFAULT_SUBJECT_GROUPS: Dict[str, List[str]] = {
    "SCIENCES": ["Mathématiques", "Physique-Chimie", "SVT", "Informatique", "Sciences", "Technologie"],
    "LETTRES": ["Français", "Anglais", "Espagnol", "Allemand", "Philosophie", "Histoire-Géo",
                "Littérature", "Arabe", "Latin"],
    "AUTRES": ["EPS", "Conduite", "Arts Plastiques", "Musique", "TICE", "ECM"],
}

# 성적표 출력 순서
DEFAULT_GROUP_ORDER: List[str] = ["LETTRES", "SCIENCES", "AUTRES"]

# ✅ 평어 기준표 (내림차순, 마지막 기준 미만은 "Nul")
DEFAULT_APPRECIATIONS: List[Tuple[float, str]] = [
    (18, "Excellent"),
    (16, "Très Bien"),
    (14, "Bien"),
    (12, "Assez Bien"),
    (10, "Passable"),
    (8, "Faible"),
    (5, "Très Faible"),
]
LOWEST_APPRECIATION = "Nul"


def format_fr(value: float, decimals: int = 2) -> str:
    """15.142857 → "15,14" """
    return f"{value:.{decimals}f}".replace(".", ",")


def format_note(value: float) -> str:
    # 16.0 → "16", 14.5 → "14,5"
    text = str(int(value)) if float(value).is_integer() else repr(float(value))
    return text.replace(".", ",")


def get_appreciation(
    note: float,
    appreciations: Optional[Sequence[Tuple[float, str]]] = None,
) -> str:
    for threshold, label in appreciations or DEFAULT_APPRECIATIONS:
        if note >= threshold:
            return label
    return LOWEST_APPRECIATION


def get_subject_group(
    subject: str,
    subject_groups: Optional[Mapping[str, Sequence[str]]] = None,
) -> str:
    for group, subjects in (subject_groups or DEFAULT_SUBJECT_GROUPS).items():
        if subject in subjects:
            return group
    return OTHER_GROUP


def build_subject_row(
    student: StudentRecord,
    subject: str,
    class_statistics: ClassStatistics,
    rounding_mode: RoundingMode = RoundingMode.NONE,
    subject_weights: Optional[Dict[str, int]] = None,
    appreciations: Optional[Sequence[Tuple[float, str]]] = None,
    teacher: str = "",
) -> SubjectRow:
    grades = grades_for_subject(student.grades, subject)
    weight = subject_weight(student.grades, subject, subject_weights)
    average = subject_average(student.grades, subject)

    return SubjectRow(
        subject=subject,
        notes=" ; ".join(format_note(g.value) for g in grades),
        average=average,
        adjusted_average=student_subject_average(student, subject, rounding_mode),
        weight=weight,
        points=average * weight if weight is not None else 0.0,
        rank=french_ordinal(class_statistics.subject_rank(subject, student.id)),
        appreciation=get_appreciation(average, appreciations),
        teacher=teacher,
        has_grades=bool(grades),
    )


def summarize_rows(rows: Sequence[SubjectRow]) -> GroupSummary:
    graded = [r for r in rows if r.weight is not None]
    weight = sum(r.weight for r in graded)
    points = sum(r.points for r in graded)
    return GroupSummary(
        average=points / weight if weight > 0 else 0.0,
        weight=weight,
        points=points,
    )


def build_report_card(
    student: StudentRecord,
    subjects: Optional[Sequence[str]],
    class_statistics: ClassStatistics,
    *,
    subject_groups: Optional[Mapping[str, Sequence[str]]] = None,
    group_order: Optional[Sequence[str]] = None,
    appreciations: Optional[Sequence[Tuple[float, str]]] = None,
    teachers: Optional[Mapping[str, str]] = None,
    subject_weights: Optional[Dict[str, int]] = None,
    rounding_mode: RoundingMode = RoundingMode.NONE,
) -> ReportCard:
    subjects = list(subjects or DEFAULT_SUBJECTS)
    teachers = teachers or {}

    rows_by_group: Dict[str, List[SubjectRow]] = {}
    for subject in subjects:
        group = get_subject_group(subject, subject_groups)
        row = build_subject_row(
            student, subject, class_statistics,
            rounding_mode=rounding_mode,
            subject_weights=subject_weights,
            appreciations=appreciations,
            teacher=teachers.get(subject, ""),
        )
        rows_by_group.setdefault(group, []).append(row)

    # 지정 순서 그룹 먼저, 그 외 (사용자 정의 그룹) 는 등장 순서대로
    order = list(group_order or DEFAULT_GROUP_ORDER)
    order += [g for g in rows_by_group if g not in order]
    groups = [
        ReportCardGroup(name=name, rows=rows_by_group[name], summary=summarize_rows(rows_by_group[name]))
        for name in order
        if rows_by_group.get(name)
    ]

    # 총계는 종합 순위와 같은 함수로 계산 → 값이 반드시 일치
    total_points, total_weight = overall_totals(student, subjects, subject_weights)
    global_average = total_points / total_weight if total_weight > 0 else 0.0
    global_entry = class_statistics.global_entry(student.id)

    return ReportCard(
        student_id=student.id,
        student_name=student.full_name,
        matricule=student.matricule,
        class_grade=student.class_grade,
        photo_url=student.photo_url,
        groups=groups,
        totals=ReportCardTotals(points=total_points, weight=total_weight, average=global_average),
        global_rank=french_ordinal(global_entry.rank if global_entry else None),
        class_size=class_statistics.class_size,
        appreciation=get_appreciation(global_average, appreciations),
        class_stats=class_statistics.overall.class_stats,
        rounding_mode=RoundingMode(rounding_mode).value,
    )


def build_class_report_cards(
    students: Sequence[StudentRecord],
    subjects: Optional[Sequence[str]],
    class_statistics: ClassStatistics,
    **options,
) -> List[ReportCard]:
    """일괄 출력용: 통계는 한 번 계산한 것을 모든 학생에게 재사용"""
    return [build_report_card(s, subjects, class_statistics, **options) for s in students]
