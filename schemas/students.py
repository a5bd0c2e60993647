from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.bonuses import SubjectBonus
from schemas.grades import Grade


# ✅ 입력용 (POST/PUT 등)
class StudentCreate(BaseModel):
    school_id: int                           # 소속 학교 ID
    matricule: str = Field(..., min_length=1)  # 학적 번호
    first_name: str                          # 이름
    last_name: str                           # 성
    class_grade: str                         # 학급 라벨
    email: Optional[str] = None              # 이메일
    photo_url: Optional[str] = None          # 증명사진 URL


# ✅ 전체 출력용 (GET, 상세조회 등)
class Student(StudentCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)


# ✅ 계산 엔진 입력용 학생 레코드
# - grades: 입력 순서 유지 (과목 가중치 = 첫 성적의 계수)
# - subject_bonuses: 과목 이름 → 보너스
class StudentRecord(BaseModel):
    id: int
    matricule: str = ""
    first_name: str = ""
    last_name: str = ""
    class_grade: str = ""
    photo_url: Optional[str] = None
    grades: List[Grade] = []
    subject_bonuses: Dict[str, SubjectBonus] = {}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
