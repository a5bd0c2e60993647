from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # 학생 기본 정보 테이블

    id = Column(Integer, primary_key=True, index=True)                    # 고유 학생 ID (Primary Key)
    school_id = Column(Integer, ForeignKey("schools.id"), nullable=False)  # 소속 학교 ID
    matricule = Column(String(30), nullable=False, unique=True)           # 학적 번호
    first_name = Column(String(100), nullable=False)                      # 이름
    last_name = Column(String(100), nullable=False)                       # 성
    class_grade = Column(String(30), nullable=False, index=True)          # 학급 라벨 (예: 3ème A)
    email = Column(String(150))                                           # 이메일
    photo_url = Column(String(300))                                       # 증명사진 URL

    # ==========================================================
    # [관계 설정]
    # ==========================================================
    # ✅ 평균 캐시 컬럼은 두지 않음 → 성적/보너스에서 매번 계산
    school = relationship("School", back_populates="students")
    grades = relationship(
        "Grade",
        back_populates="student",
        order_by="Grade.id",
        cascade="all, delete-orphan",
    )
    bonuses = relationship(
        "SubjectBonus",
        back_populates="student",
        cascade="all, delete-orphan",
    )
