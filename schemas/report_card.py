"""
schemas/report_card.py

- 순위/통계/성적표(bulletin) 계산 결과 스키마 모음
- services/grade_engine.py, services/report_card.py 에서 생성하고 라우터에서 그대로 응답
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# =========================================================
# 1) 순위 / 통계
# =========================================================

class Stats(BaseModel):
    """최저/최고/평균"""
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0


class SubjectRankingEntry(BaseModel):
    """과목별 순위 한 줄 (보너스 + 반올림 적용 평균 기준)"""
    student_id: int
    rank: int
    average: float
    has_grades: bool


class OverallRankingEntry(BaseModel):
    """종합 순위 한 줄 (성적이 있는 과목만 가중 평균)"""
    student_id: int
    rank: int
    average: float


class OverallRanking(BaseModel):
    global_rankings: List[OverallRankingEntry] = []
    class_stats: Stats = Field(default_factory=Stats)


class ClassStatistics(BaseModel):
    """한 반의 과목별 순위/통계 + 종합 순위를 한 번에 계산한 결과"""
    subject_rankings: Dict[str, List[SubjectRankingEntry]] = {}
    subject_stats: Dict[str, Stats] = {}
    overall: OverallRanking = Field(default_factory=OverallRanking)
    class_size: int = 0

    def subject_rank(self, subject: str, student_id: int) -> Optional[int]:
        for entry in self.subject_rankings.get(subject, []):
            if entry.student_id == student_id:
                return entry.rank
        return None

    def global_entry(self, student_id: int) -> Optional[OverallRankingEntry]:
        for entry in self.overall.global_rankings:
            if entry.student_id == student_id:
                return entry
        return None


# =========================================================
# 2) 성적표(bulletin)
# =========================================================

class SubjectRow(BaseModel):
    subject: str
    notes: str                               # "16 ; 14,5" (쉼표 소수점)
    average: float                           # 가중 평균 (보너스/반올림 없음)
    adjusted_average: float                  # 보너스 + 반올림 적용 평균 (순위 기준)
    weight: Optional[int] = None             # 과목 가중치 (성적 없으면 None)
    points: float = 0.0                      # average × weight
    rank: str = "-"                          # "1er", "2ème", ...
    appreciation: str = ""
    teacher: str = ""
    has_grades: bool = False


class GroupSummary(BaseModel):
    """그룹 소계 (BILAN)"""
    average: float = 0.0
    weight: int = 0
    points: float = 0.0


class ReportCardGroup(BaseModel):
    name: str
    rows: List[SubjectRow]
    summary: GroupSummary


class ReportCardTotals(BaseModel):
    """총계 (TOTAUX GÉNÉRAUX) - 종합 순위의 평균과 같아야 함"""
    points: float = 0.0
    weight: int = 0
    average: float = 0.0


class ReportCard(BaseModel):
    student_id: int
    student_name: str
    matricule: str = ""
    class_grade: str = ""
    photo_url: Optional[str] = None
    groups: List[ReportCardGroup]
    totals: ReportCardTotals
    global_rank: str = "-"
    class_size: int = 0
    appreciation: str = ""
    class_stats: Stats = Field(default_factory=Stats)
    rounding_mode: str = "NON"
