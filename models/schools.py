from sqlalchemy import Column, Integer, String, JSON
from sqlalchemy.orm import relationship
from database.db import Base

class School(Base):
    __tablename__ = "schools"  # 학교(테넌트) 설정 테이블

    id = Column(Integer, primary_key=True, index=True)      # 학교 고유 ID (PK)
    name = Column(String(150), nullable=False)              # 학교 이름
    address = Column(String(200))                           # 주소
    academic_year = Column(String(20))                      # 학년도 (예: 2023-2024)
    director_name = Column(String(100))                     # 교장 이름
    subjects = Column(JSON)                                 # 과목 목록 (NULL이면 기본 13과목)
    subject_weights = Column(JSON)                          # 과목별 종합 가중치 (NULL이면 첫 성적 계수)
    subject_groups = Column(JSON)                           # 성적표 과목 그룹표 (NULL이면 기본 그룹)
    subject_teachers = Column(JSON)                         # 과목 → 담당 교사 이름 (NULL이면 빈 칸)
    role_permissions = Column(JSON)                         # 역할별 권한 (NULL이면 기본 권한표)

    # ✅ 소속 학생 (1:N)
    students = relationship("Student", back_populates="school")
