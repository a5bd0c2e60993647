"""
services/grade_engine.py

성적 집계 엔진 (순수 함수 모음)
- 과목별 가중 평균 → 보너스/반올림 → 과목별 순위 → 종합 순위/학급 통계
- DB/입출력 없음: 이미 로드된 StudentRecord 목록만 받아서 계산
- 분모가 0이면 예외 대신 0을 돌려줌 (화면에서는 "-"로 표시)
"""

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from schemas.bonuses import SubjectBonus
from schemas.grades import Grade, RoundingMode
from schemas.report_card import (
    ClassStatistics,
    OverallRanking,
    OverallRankingEntry,
    Stats,
    SubjectRankingEntry,
)
from schemas.students import StudentRecord

logger = logging.getLogger(__name__)

# ✅ 학교 설정에 과목 목록이 없을 때 사용하는 기본 13과목
DEFAULT_SUBJECTS: List[str] = [
    "Mathématiques", "Français", "Anglais", "Physique-Chimie",
    "Histoire-Géo", "SVT", "Philosophie", "EPS",
    "Espagnol", "Allemand", "Arts Plastiques", "Musique", "Informatique",
]

ZERO_BONUS = SubjectBonus()


# ==========================================================
# [1] 과목별 가중 평균
# ==========================================================

def grades_for_subject(grades: Iterable[Grade], subject: str) -> List[Grade]:
    return [g for g in grades if g.subject == subject]


def subject_totals(grades: Iterable[Grade], subject: str) -> Tuple[float, int, int]:
    """(Σ점수×계수, Σ계수, 성적 개수)"""
    points, total_coef, count = 0.0, 0, 0
    for g in grades_for_subject(grades, subject):
        points += g.value * g.coefficient
        total_coef += g.coefficient
        count += 1
    return points, total_coef, count


def subject_average(grades: Iterable[Grade], subject: str) -> float:
    """Σ(value×coef)/Σcoef, 계수 합이 0이면 0. 범위 보정(clamp)은 하지 않음."""
    points, total_coef, _ = subject_totals(grades, subject)
    return points / total_coef if total_coef > 0 else 0.0


# ==========================================================
# [2] 보너스 + 반올림 (항상 올림)
# ==========================================================

def apply_rounding(value: float, rounding_mode: RoundingMode) -> float:
    mode = RoundingMode(rounding_mode)
    if mode is RoundingMode.QUARTER:
        return math.ceil(value * 4) / 4
    if mode is RoundingMode.HALF:
        return math.ceil(value * 2) / 2
    if mode is RoundingMode.INTEGER:
        return float(math.ceil(value))
    return value


def adjusted_average(
    raw_average: float,
    total_coefficient: int,
    bonus: Optional[SubjectBonus],
    rounding_mode: RoundingMode = RoundingMode.NONE,
) -> float:
    """
    raw + average_bonus + point_bonus/Σcoef (Σcoef > 0 일 때만) 후 반올림 정책 적용.
    성적이 없어도 average_bonus 만으로 0보다 커질 수 있음.
    """
    bonus = bonus or ZERO_BONUS
    with_bonus = raw_average + bonus.average_bonus
    if total_coefficient > 0:
        with_bonus += bonus.point_bonus / total_coefficient
    return apply_rounding(with_bonus, rounding_mode)


def student_subject_average(
    student: StudentRecord,
    subject: str,
    rounding_mode: RoundingMode = RoundingMode.NONE,
) -> float:
    points, total_coef, _ = subject_totals(student.grades, subject)
    raw = points / total_coef if total_coef > 0 else 0.0
    return adjusted_average(raw, total_coef, student.subject_bonuses.get(subject), rounding_mode)


# ==========================================================
# [3] 과목별 순위
# ==========================================================

def rank_students_in_subject(
    students: Sequence[StudentRecord],
    subject: str,
    rounding_mode: RoundingMode = RoundingMode.NONE,
) -> List[SubjectRankingEntry]:
    """
    보정 평균 내림차순. 동점은 입력 순서를 그대로 유지 (sorted는 안정 정렬).
    """
    scored = [
        (s, student_subject_average(s, subject, rounding_mode),
         bool(grades_for_subject(s.grades, subject)))
        for s in students
    ]
    ordered = sorted(scored, key=lambda item: item[1], reverse=True)
    return [
        SubjectRankingEntry(student_id=s.id, rank=idx, average=avg, has_grades=has_grades)
        for idx, (s, avg, has_grades) in enumerate(ordered, start=1)
    ]


def compute_stats(values: Sequence[float]) -> Stats:
    if not values:
        return Stats()
    return Stats(min=min(values), max=max(values), avg=sum(values) / len(values))


def subject_stats(ranking: Sequence[SubjectRankingEntry]) -> Stats:
    # 성적이 하나라도 있는 학생만 통계에 포함
    return compute_stats([e.average for e in ranking if e.has_grades])


def unclassified_students(
    ranking: Sequence[SubjectRankingEntry],
    pass_mark: float = 10.0,
) -> List[SubjectRankingEntry]:
    """NON CLASSÉ: 보정 평균이 기준 점수 미만인 학생"""
    return [e for e in ranking if e.average < pass_mark]


def french_ordinal(rank: Optional[int]) -> str:
    if not rank or rank < 1:
        return "-"
    return f"{rank}er" if rank == 1 else f"{rank}ème"


# ==========================================================
# [4] 종합 순위 + 학급 통계
# ==========================================================

def subject_weight(
    grades: Sequence[Grade],
    subject: str,
    subject_weights: Optional[Dict[str, int]] = None,
) -> Optional[int]:
    """
    종합 평균에서 과목이 갖는 가중치.
    - 성적이 없으면 None (종합 평균에서 완전히 제외)
    - 과목 가중치 표가 있으면 그 값, 없으면 첫 성적의 계수
    """
    subject_grades = grades_for_subject(grades, subject)
    if not subject_grades:
        return None
    if subject_weights and subject in subject_weights:
        return subject_weights[subject]
    return subject_grades[0].coefficient


def overall_totals(
    student: StudentRecord,
    subjects: Sequence[str],
    subject_weights: Optional[Dict[str, int]] = None,
) -> Tuple[float, int]:
    """(Σ과목평균×가중치, Σ가중치) - 성적이 있는 과목만"""
    total_points, total_weight = 0.0, 0
    for subject in subjects:
        weight = subject_weight(student.grades, subject, subject_weights)
        if weight is None:
            continue
        total_points += subject_average(student.grades, subject) * weight
        total_weight += weight
    return total_points, total_weight


def overall_average(
    student: StudentRecord,
    subjects: Sequence[str],
    subject_weights: Optional[Dict[str, int]] = None,
) -> float:
    total_points, total_weight = overall_totals(student, subjects, subject_weights)
    return total_points / total_weight if total_weight > 0 else 0.0


def rank_students_overall(
    students: Sequence[StudentRecord],
    subjects: Sequence[str],
    subject_weights: Optional[Dict[str, int]] = None,
) -> OverallRanking:
    scored = [(s.id, overall_average(s, subjects, subject_weights)) for s in students]
    ordered = sorted(scored, key=lambda item: item[1], reverse=True)
    rankings = [
        OverallRankingEntry(student_id=student_id, rank=idx, average=avg)
        for idx, (student_id, avg) in enumerate(ordered, start=1)
    ]

    averages = [e.average for e in rankings]
    class_stats = Stats(
        min=averages[-1] if averages else 0.0,
        max=averages[0] if averages else 0.0,
        avg=sum(averages) / (len(averages) or 1),
    )
    return OverallRanking(global_rankings=rankings, class_stats=class_stats)


def compute_class_statistics(
    students: Sequence[StudentRecord],
    subjects: Optional[Sequence[str]] = None,
    rounding_mode: RoundingMode = RoundingMode.NONE,
    subject_weights: Optional[Dict[str, int]] = None,
) -> ClassStatistics:
    """과목별 순위/통계 + 종합 순위를 한 번에 계산 (성적표 일괄 출력 시 1회만 호출)"""
    subjects = list(subjects or DEFAULT_SUBJECTS)

    subject_rankings: Dict[str, List[SubjectRankingEntry]] = {}
    stats: Dict[str, Stats] = {}
    for subject in subjects:
        ranking = rank_students_in_subject(students, subject, rounding_mode)
        subject_rankings[subject] = ranking
        stats[subject] = subject_stats(ranking)

    overall = rank_students_overall(students, subjects, subject_weights)
    logger.debug(
        "class statistics computed: %d students, %d subjects, rounding=%s",
        len(students), len(subjects), RoundingMode(rounding_mode).value,
    )
    return ClassStatistics(
        subject_rankings=subject_rankings,
        subject_stats=stats,
        overall=overall,
        class_size=len(students),
    )
