from typing import List

from pydantic import BaseModel, ConfigDict, Field


# ✅ 과목별 보너스 (계산 엔진 입력용, 기본값 0)
class SubjectBonus(BaseModel):
    average_bonus: float = 0.0               # 평균에 직접 더함
    point_bonus: float = 0.0                 # 가중 점수 합계에 더한 뒤 계수 합으로 나눔

    model_config = ConfigDict(from_attributes=True)


# ✅ 일괄 저장 요청의 한 줄
class BonusEntry(SubjectBonus):
    student_id: int
    subject: str = Field(..., min_length=1)


# ✅ "전체 저장" 요청 바디
class BonusBulkSave(BaseModel):
    entries: List[BonusEntry]
