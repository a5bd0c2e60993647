from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# 종합 평균 가중치는 성적 계수와 같은 기준 (1 이상)
SubjectWeight = Annotated[int, Field(ge=1)]


# ✅ 입력용: 학교 설정 생성/수정
class SchoolCreate(BaseModel):
    name: str                                            # 학교 이름
    address: Optional[str] = None                        # 주소
    academic_year: Optional[str] = None                  # 학년도
    director_name: Optional[str] = None                  # 교장 이름
    subjects: Optional[List[str]] = None                 # 과목 목록 (없으면 기본값)
    subject_weights: Optional[Dict[str, SubjectWeight]] = None  # 과목별 종합 가중치
    subject_groups: Optional[Dict[str, List[str]]] = None  # 성적표 그룹표
    subject_teachers: Optional[Dict[str, str]] = None     # 과목별 담당 교사 (성적표 Professeur 칸)
    role_permissions: Optional[Dict[str, List[str]]] = None  # 역할별 권한 (없으면 기본값)


# ✅ 출력용
class School(SchoolCreate):
    id: int

    model_config = ConfigDict(from_attributes=True)
