from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ✅ 반올림 정책 (항상 올림 방향)
# 값은 화면에서 쓰던 라벨 그대로 유지 ("NON" | "0.25" | "0.50" | "ENTIER")
class RoundingMode(str, Enum):
    NONE = "NON"
    QUARTER = "0.25"
    HALF = "0.50"
    INTEGER = "ENTIER"


# ✅ 계산 엔진 입력용 (범위 검증 없음 → 입력 폼/API 스키마에서 검증)
class Grade(BaseModel):
    id: Optional[int] = None                 # 성적 고유 ID
    subject: str                             # 과목 이름
    value: float                             # 점수 (보통 0~20)
    coefficient: int = 1                     # 계수
    type: str = "Devoir"                     # 평가 종류
    date: Optional[datetime] = None          # 평가 일시

    model_config = ConfigDict(from_attributes=True)


# ✅ 입력용 (POST)
class GradeCreate(BaseModel):
    student_id: int                                      # 학생 ID
    subject: str = Field(..., min_length=1)              # 과목 이름
    value: float = Field(..., ge=0, le=20)               # 점수 (0~20)
    coefficient: int = Field(1, ge=1)                    # 계수 (1 이상)
    type: str = "Devoir"                                 # 평가 종류 (Devoir, Examen, DM)
    date: Optional[datetime] = None                      # 미지정 시 저장 시각


# ✅ 수정용 (PUT) - 학생은 바꿀 수 없음
class GradeUpdate(BaseModel):
    subject: str = Field(..., min_length=1)
    value: float = Field(..., ge=0, le=20)
    coefficient: int = Field(1, ge=1)
    type: str = "Devoir"
    date: Optional[datetime] = None


# ✅ 출력용
class GradeOut(Grade):
    id: int
    student_id: int
