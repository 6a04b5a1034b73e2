from conftest import API, auth


COURSE = {
    "title": "Python for Data Science",
    "description": "Python for data analysis and machine learning",
    "duration": 90,
    "modules": [
        {
            "title": "Python Basics",
            "lessons": [
                {"title": "Syntax", "resource_url": "https://example.com/syntax"},
                {"title": "Functions"},
            ],
        },
        {"title": "Data Analysis with Pandas", "lessons": [{"title": "DataFrames"}]},
        {"title": "Machine Learning"},
    ],
}


def test_course_catalogue(client, admin_token):
    response = client.post(f"{API}/courses", headers=auth(admin_token), json=COURSE)
    assert response.status_code == 201, response.text
    created = response.json()
    assert created["difficulty"] == "Beginner"
    assert [m["order_index"] for m in created["modules"]] == [1, 2, 3]
    assert [lesson["title"] for lesson in created["modules"][0]["lessons"]] == ["Syntax", "Functions"]

    [listed] = client.get(f"{API}/courses").json()
    assert listed["id"] == created["id"]
    assert listed["module_count"] == 3
    assert listed["lesson_count"] == 3
    assert listed["creator_name"] == "admin"

    detail = client.get(f"{API}/courses/{created['id']}").json()
    assert detail["modules"][2]["lessons"] == []
    assert detail["modules"][0]["lessons"][0]["resource_url"] == "https://example.com/syntax"


def test_unknown_course_is_404(client):
    response = client.get(f"{API}/courses/999")
    assert response.status_code == 404
    assert response.json()["code"] == "COURSE_NOT_FOUND"


def test_course_writes_are_admin_only(client, user_token):
    assert client.post(f"{API}/courses", headers=auth(user_token), json=COURSE).status_code == 403
    assert client.post(f"{API}/courses", json=COURSE).status_code == 401


def test_deleting_course_removes_its_modules(client, admin_token):
    created = client.post(f"{API}/courses", headers=auth(admin_token), json=COURSE).json()
    response = client.delete(f"{API}/courses/{created['id']}", headers=auth(admin_token))
    assert response.status_code == 200
    assert client.get(f"{API}/courses").json() == []
    assert client.get(f"{API}/courses/{created['id']}").status_code == 404
