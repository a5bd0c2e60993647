import pytest

ADMIN = {"X-User-Role": "ADMIN"}
TEACHER = {"X-User-Role": "TEACHER"}
PARENT = {"X-User-Role": "PARENT"}

MATH = "Mathématiques"
FR = "Français"


@pytest.fixture()
def school(client):
    resp = client.post("/v1/schools/", headers=ADMIN, json={
        "name": "Lycée Moderne",
        "academic_year": "2023-2024",
        "subjects": [MATH, FR, "Anglais", "SVT", "EPS"],
    })
    assert resp.status_code == 200
    return resp.json()["data"]


@pytest.fixture()
def pupils(client, school):
    ids = []
    for i, (first, last) in enumerate([("Awa", "Kone"), ("Yao", "Kouassi"), ("Ines", "Traore")], start=1):
        resp = client.post("/v1/students/", headers=ADMIN, json={
            "school_id": school["id"],
            "matricule": f"MAT-{i:03d}",
            "first_name": first,
            "last_name": last,
            "class_grade": "3ème A",
        })
        assert resp.status_code == 200
        ids.append(resp.json()["data"]["id"])
    return ids


def add_grade(client, student_id, subject, value, coefficient=1, headers=TEACHER):
    return client.post("/v1/grades/", headers=headers, json={
        "student_id": student_id,
        "subject": subject,
        "value": value,
        "coefficient": coefficient,
    })


@pytest.fixture()
def graded(client, pupils):
    a, b, c = pupils
    for student_id, subject, value, coef in [
        (a, MATH, 16, 4), (a, MATH, 14, 3), (a, FR, 12, 2),
        (b, MATH, 11, 4), (b, FR, 17, 2), (b, "Anglais", 13, 3),
        (c, FR, 9, 2),
    ]:
        assert add_grade(client, student_id, subject, value, coef).status_code == 200
    return pupils


# ---------------------------------------------------------------------------
# misc
# ---------------------------------------------------------------------------

def test_health_and_latency_header(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert "x-latency-ms" in resp.headers


def test_school_subjects_default_when_unconfigured(client):
    school_id = client.post("/v1/schools/", headers=ADMIN, json={"name": "École B"}).json()["data"]["id"]
    data = client.get(f"/v1/schools/{school_id}/subjects").json()["data"]
    assert data["is_default"] is True
    assert len(data["subjects"]) == 13


def test_unknown_school_is_404(client):
    assert client.get("/v1/schools/999").status_code == 404


# ---------------------------------------------------------------------------
# permissions
# ---------------------------------------------------------------------------

def test_missing_role_header_is_401(client, pupils):
    assert add_grade(client, pupils[0], MATH, 12, headers={}).status_code == 401


def test_parent_cannot_write_grades(client, pupils):
    assert add_grade(client, pupils[0], MATH, 12, headers=PARENT).status_code == 403


def test_parent_can_read_rankings(client, school, graded):
    resp = client.get("/v1/rankings/overall", headers=PARENT, params={"class_grade": "3ème A", "school_id": school["id"]})
    assert resp.status_code == 200


def test_school_role_matrix_is_applied(client, school, pupils):
    resp = client.put(f"/v1/schools/{school['id']}", headers=ADMIN, json={
        "name": school["name"],
        "subjects": school["subjects"],
        "role_permissions": {"TEACHER": ["GRADES.read"], "ADMIN": ["SETTINGS.write"]},
    })
    assert resp.status_code == 200
    headers = {**TEACHER, "X-School-Id": str(school["id"])}
    assert add_grade(client, pupils[0], MATH, 12, headers=headers).status_code == 403
    assert add_grade(client, pupils[0], MATH, 12).status_code == 200


# ---------------------------------------------------------------------------
# grades
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value, coefficient", [(21, 1), (-1, 1), (12, 0)])
def test_grade_input_is_validated(client, pupils, value, coefficient):
    assert add_grade(client, pupils[0], MATH, value, coefficient).status_code == 422


def test_grade_for_unknown_student_is_404(client, pupils):
    assert add_grade(client, 999, MATH, 12).status_code == 404


def test_grade_crud(client, pupils):
    created = add_grade(client, pupils[0], MATH, 12, 2).json()["data"]
    assert created["value"] == 12
    assert created["type"] == "Devoir"

    resp = client.put(f"/v1/grades/{created['id']}", headers=TEACHER, json={
        "subject": MATH, "value": 15.5, "coefficient": 2, "type": "Examen",
    })
    assert resp.json()["data"]["value"] == 15.5

    listed = client.get(f"/v1/grades/student/{pupils[0]}", headers=TEACHER).json()["data"]
    assert [g["type"] for g in listed] == ["Examen"]

    assert client.delete(f"/v1/grades/{created['id']}", headers=TEACHER).status_code == 200
    assert client.get(f"/v1/grades/{created['id']}", headers=TEACHER).status_code == 404


def test_averages_are_recomputed_after_each_write(client, pupils):
    a = pupils[0]
    add_grade(client, a, MATH, 16, 4)
    first = client.get(f"/v1/grades/student/{a}/averages", headers=TEACHER).json()["data"]
    assert first["overall_average"] == 16

    grade_id = add_grade(client, a, MATH, 14, 3).json()["data"]["id"]
    second = client.get(f"/v1/grades/student/{a}/averages", headers=TEACHER).json()["data"]
    assert second["overall_average"] == pytest.approx(106 / 7)

    client.delete(f"/v1/grades/{grade_id}", headers=TEACHER)
    third = client.get(f"/v1/grades/student/{a}/averages", headers=TEACHER).json()["data"]
    assert third["overall_average"] == 16


# ---------------------------------------------------------------------------
# bonuses and rankings
# ---------------------------------------------------------------------------

def test_subject_ranking_with_rounding(client, school, graded):
    a, b, c = graded
    resp = client.get("/v1/rankings/subject", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"], "subject": MATH, "rounding": "0.25",
    })
    data = resp.json()["data"]
    assert data["rounding"] == "0.25"
    assert [r["student_id"] for r in data["rankings"]] == [a, b, c]
    assert data["rankings"][0]["average"] == 15.25
    assert data["rankings"][0]["rank_label"] == "1er"
    assert data["rankings"][1]["rank_label"] == "2ème"
    assert data["stats"]["max"] == 15.25


def test_bulk_bonus_save_changes_subject_ranking(client, school, graded):
    a, b, c = graded
    resp = client.put("/v1/bonuses/bulk", headers=TEACHER, json={"entries": [
        {"student_id": c, "subject": FR, "average_bonus": 9, "point_bonus": 0},
        {"student_id": a, "subject": FR, "average_bonus": 0, "point_bonus": 2},
    ]})
    assert resp.json()["data"]["saved"] == 2

    bonuses = client.get("/v1/bonuses/", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"], "subject": FR,
    }).json()
    assert [x["average_bonus"] for x in bonuses["data"]] == [0, 0, 9]

    ranking = client.get("/v1/rankings/subject", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"], "subject": FR,
    }).json()["data"]["rankings"]
    assert [r["student_id"] for r in ranking] == [c, b, a]
    assert ranking[2]["average"] == 13


def test_bonus_for_unknown_student_is_rejected(client, graded):
    resp = client.put("/v1/bonuses/bulk", headers=TEACHER, json={"entries": [
        {"student_id": 999, "subject": FR, "average_bonus": 1},
    ]})
    assert resp.status_code == 404


def test_unclassified_list(client, school, graded):
    data = client.get("/v1/rankings/unclassified", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"], "subject": FR,
    }).json()["data"]
    assert data["count"] == 1
    assert data["students"][0]["student_id"] == graded[2]


def test_overall_ranking_excludes_missing_subjects(client, school, graded):
    a, b, c = graded
    data = client.get("/v1/rankings/overall", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"],
    }).json()["data"]
    averages = {r["student_id"]: r["average"] for r in data["global_rankings"]}

    assert averages[c] == 9
    assert averages[a] == pytest.approx(((106 / 7) * 4 + 12 * 2) / 6)
    assert averages[b] == pytest.approx((11 * 4 + 17 * 2 + 13 * 3) / 9)
    assert data["class_stats"]["min"] == 9


def test_rankings_for_empty_class_is_404(client, school, graded):
    resp = client.get("/v1/rankings/overall", headers=TEACHER, params={
        "class_grade": "Terminale C", "school_id": school["id"],
    })
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# report cards
# ---------------------------------------------------------------------------

def test_report_card_total_matches_overall_ranking(client, school, graded):
    overall = client.get("/v1/rankings/overall", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"],
    }).json()["data"]
    for entry in overall["global_rankings"]:
        card = client.get(f"/v1/report-cards/student/{entry['student_id']}", headers=TEACHER).json()["data"]
        assert card["totals"]["average"] == entry["average"]
        assert card["class_size"] == 3


def test_report_card_rows(client, graded):
    a = graded[0]
    card = client.get(f"/v1/report-cards/student/{a}", headers=TEACHER, params={"rounding": "ENTIER"}).json()["data"]
    assert [g["name"] for g in card["groups"]] == ["LETTRES", "SCIENCES", "AUTRES"]

    rows = {r["subject"]: r for g in card["groups"] for r in g["rows"]}
    assert rows[MATH]["notes"] == "16 ; 14"
    assert rows[MATH]["adjusted_average"] == 16
    assert rows[MATH]["weight"] == 4
    assert rows[MATH]["rank"] == "1er"
    assert rows["SVT"]["has_grades"] is False
    assert card["global_rank"] == "1er"
    assert card["rounding_mode"] == "ENTIER"


def test_report_card_for_unknown_student_is_404(client, graded):
    assert client.get("/v1/report-cards/student/999", headers=TEACHER).status_code == 404


def test_class_report_cards_html(client, school, graded):
    resp = client.get("/v1/report-cards/class/html", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"], "period": "1er Trimestre",
    })
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    assert resp.text.count('class="bulletin-page"') == 3
    assert "Lycée Moderne" in resp.text
    assert "Awa Kone" in resp.text


def test_class_report_cards_json(client, school, graded):
    cards = client.get("/v1/report-cards/class", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"],
    }).json()["data"]
    assert [c["student_id"] for c in cards] == graded


# ---------------------------------------------------------------------------
# school settings
# ---------------------------------------------------------------------------

def test_update_school_settings(client, school):
    resp = client.put(f"/v1/schools/{school['id']}", headers=ADMIN, json={
        "name": "Lycée Moderne de Cocody",
        "subjects": [MATH, FR],
        "subject_weights": {MATH: 5, FR: 3},
    })
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "Lycée Moderne de Cocody"
    assert data["subject_weights"] == {MATH: 5, FR: 3}

    subjects = client.get(f"/v1/schools/{school['id']}/subjects").json()["data"]
    assert subjects["subjects"] == [MATH, FR]
    assert subjects["is_default"] is False


@pytest.mark.parametrize("weights", [{MATH: -4, FR: 4}, {MATH: 0}])
def test_subject_weights_must_be_positive(client, weights):
    resp = client.post("/v1/schools/", headers=ADMIN, json={"name": "École C", "subject_weights": weights})
    assert resp.status_code == 422


def test_report_card_shows_subject_teacher(client, school, graded):
    client.put(f"/v1/schools/{school['id']}", headers=ADMIN, json={
        "name": school["name"],
        "subjects": school["subjects"],
        "subject_teachers": {MATH: "M. Bamba"},
    })
    card = client.get(f"/v1/report-cards/student/{graded[0]}", headers=TEACHER).json()["data"]
    rows = {r["subject"]: r for g in card["groups"] for r in g["rows"]}
    assert rows[MATH]["teacher"] == "M. Bamba"
    assert rows[FR]["teacher"] == ""


# ---------------------------------------------------------------------------
# classes sharing a label across schools
# ---------------------------------------------------------------------------

def test_rankings_are_scoped_to_one_school(client, school):
    other_id = client.post("/v1/schools/", headers=ADMIN, json={"name": "Collège Voisin"}).json()["data"]["id"]
    ids = []
    for school_id, matricule, value in [(school["id"], "A-001", 11), (other_id, "B-001", 12)]:
        resp = client.post("/v1/students/", headers=ADMIN, json={
            "school_id": school_id,
            "matricule": matricule,
            "first_name": "Eleve",
            "last_name": matricule,
            "class_grade": "3ème A",
        })
        student_id = resp.json()["data"]["id"]
        add_grade(client, student_id, MATH, value)
        ids.append(student_id)

    data = client.get("/v1/rankings/overall", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": school["id"],
    }).json()["data"]
    assert [r["student_id"] for r in data["global_rankings"]] == [ids[0]]
    assert data["global_rankings"][0]["rank_label"] == "1er"

    card = client.get(f"/v1/report-cards/student/{ids[0]}", headers=TEACHER).json()["data"]
    assert card["global_rank"] == "1er"
    assert card["class_size"] == 1

    bonuses = client.get("/v1/bonuses/", headers=TEACHER, params={
        "class_grade": "3ème A", "school_id": other_id, "subject": MATH,
    }).json()["data"]
    assert [b["student_id"] for b in bonuses] == [ids[1]]


@pytest.mark.parametrize("path", ["/v1/rankings/overall", "/v1/rankings/statistics"])
def test_rankings_require_school(client, graded, path):
    resp = client.get(path, headers=TEACHER, params={"class_grade": "3ème A"})
    assert resp.status_code == 422
