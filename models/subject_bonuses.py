from sqlalchemy import Column, Integer, Float, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base

class SubjectBonus(Base):
    __tablename__ = "subject_bonuses"  # 과목별 보너스 테이블
    __table_args__ = (UniqueConstraint("student_id", "subject", name="uq_bonus_student_subject"),)

    id = Column(Integer, primary_key=True, index=True)                      # 보너스 고유 ID
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)  # 학생 ID
    subject = Column(String(100), nullable=False)                           # 과목 이름
    average_bonus = Column(Float, nullable=False, default=0.0)              # 평균에 직접 더하는 보너스
    point_bonus = Column(Float, nullable=False, default=0.0)                # 가중 점수 합계에 더하는 보너스

    student = relationship("Student", back_populates="bonuses")
