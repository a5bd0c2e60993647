import argparse
import csv
from datetime import datetime
from pydantic import ValidationError
from sqlalchemy.orm import Session
from database.db import Base, SessionLocal, engine
import models  # noqa: F401
from models.grades import Grade as GradeModel  # ✅ 모델 import
from schemas.grades import GradeCreate

CSV_PATH = "data/grades.csv"  # ✅ 기본 파일 경로
# 컬럼: student_id, subject, value, coefficient, type, date(YYYY-MM-DD)
# 파일 순서대로 저장 → 과목 가중치(첫 성적 계수)가 파일 순서를 따름


def parse_row(row: dict) -> GradeCreate:
    # 점수는 "14,5" 처럼 쉼표 소수점도 허용
    return GradeCreate(
        student_id=int(row["student_id"]),
        subject=row["subject"].strip(),
        value=float(row["value"].replace(",", ".")),
        coefficient=int(row.get("coefficient") or 1),
        type=(row.get("type") or "Devoir").strip(),
        date=datetime.fromisoformat(row["date"]) if row.get("date") else None,
    )


def migrate_grades(csv_path: str = CSV_PATH) -> int:
    Base.metadata.create_all(bind=engine)
    db: Session = SessionLocal()
    count, skipped = 0, 0

    try:
        with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
            reader = csv.DictReader(csvfile)
            for line_no, row in enumerate(reader, start=2):
                try:
                    grade = parse_row(row)
                except (ValidationError, ValueError) as e:
                    # 범위 밖 점수/계수는 저장하지 않음
                    print(f"⚠️ {line_no}행 건너뜀: {e}")
                    skipped += 1
                    continue
                payload = grade.model_dump()
                payload["date"] = payload["date"] or datetime.now()
                db.add(GradeModel(**payload))
                count += 1
        db.commit()
    finally:
        db.close()

    print(f"✅ 성적 CSV → DB 마이그레이션 완료 ({count}건, 건너뜀 {skipped}건)")
    return count


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import grades from CSV")
    parser.add_argument("csv_path", nargs="?", default=CSV_PATH)
    migrate_grades(parser.parse_args().csv_path)
