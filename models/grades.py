from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base

class Grade(Base):
    __tablename__ = "grades"  # 개별 성적(평가) 테이블

    id = Column(Integer, primary_key=True, index=True)                      # 성적 고유 ID (Primary Key)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)  # 학생 ID
    subject = Column(String(100), nullable=False, index=True)               # 과목 이름
    value = Column(Float, nullable=False)                                   # 점수 (0~20)
    coefficient = Column(Integer, nullable=False, default=1)                # 가중치(계수)
    type = Column(String(50), nullable=False, default="Devoir")             # 평가 종류 (Devoir, Examen, DM)
    date = Column(DateTime, nullable=False)                                 # 평가 일시

    student = relationship("Student", back_populates="grades")
