import argparse
import csv
from sqlalchemy.orm import Session
from database.db import Base, SessionLocal, engine
import models  # noqa: F401
from models.students import Student as StudentModel  # ✅ 모델 import

CSV_PATH = "data/students.csv"  # ✅ 기본 파일 경로
# 컬럼: id, school_id, matricule, first_name, last_name, class_grade[, email]


def migrate_students(csv_path: str = CSV_PATH) -> int:
    Base.metadata.create_all(bind=engine)
    db: Session = SessionLocal()
    count = 0

    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                student = StudentModel(
                    id=int(row["id"]),                          # 고유 학생 ID
                    school_id=int(row["school_id"]),            # 소속 학교 ID
                    matricule=row["matricule"].strip(),         # 학적 번호
                    first_name=row["first_name"].strip(),       # 이름
                    last_name=row["last_name"].strip(),         # 성
                    class_grade=row["class_grade"].strip(),     # 학급 라벨
                    email=(row.get("email") or "").strip() or None,
                )
                db.add(student)
                count += 1
        db.commit()
    finally:
        db.close()

    print(f"✅ 학생 정보 CSV → DB 마이그레이션 완료 ({count}명)")
    return count


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import students from CSV")
    parser.add_argument("csv_path", nargs="?", default=CSV_PATH)
    migrate_students(parser.parse_args().csv_path)
