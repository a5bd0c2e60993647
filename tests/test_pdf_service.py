from services.grade_engine import compute_class_statistics
from services.pdf_service import PDFService
from services.report_card import build_class_report_cards

MATH = "Mathématiques"
FR = "Français"


def test_bulletin_html_contains_grouped_rows_and_totals(student_factory):
    students = [
        student_factory(1, [(MATH, 16, 4), (MATH, 14, 3), (FR, 12.5, 2)]),
        student_factory(2, [(FR, 9, 2)]),
    ]
    stats = compute_class_statistics(students, [MATH, FR])
    cards = build_class_report_cards(students, [MATH, FR], stats)

    html = PDFService().render_bulletins_html(
        cards, {"name": "Lycée Moderne", "academic_year": "2023-2024"}, "2ème Trimestre",
    )

    assert html.count('class="bulletin-page"') == 2
    assert "Lycée Moderne" in html
    assert "2ème Trimestre" in html
    assert "BILAN LETTRES" in html
    assert "BILAN SCIENCES" in html
    assert "TOTAUX GÉNÉRAUX" in html
    assert "16 ; 14" in html
    assert "15,14" in html


def test_bulletin_html_escapes_student_names(student_factory):
    student = student_factory(1, [(MATH, 10, 1)])
    student.first_name = "<b>Ana</b>"
    stats = compute_class_statistics([student], [MATH])
    cards = build_class_report_cards([student], [MATH], stats)

    html = PDFService().render_bulletins_html(cards)
    assert "&lt;b&gt;Ana&lt;/b&gt;" in html
