# ✅ 관계(relationship) 문자열 참조 해석을 위해 모든 모델을 한 번에 등록
from models.schools import School
from models.students import Student
from models.grades import Grade
from models.subject_bonuses import SubjectBonus

__all__ = ["School", "Student", "Grade", "SubjectBonus"]
