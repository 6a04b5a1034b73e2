import pytest

from conftest import API, auth, task_ids


def complete_all(client, token, roadmap):
    for task_id in task_ids(roadmap):
        response = client.post(f"{API}/progress/task", headers=auth(token),
                               json={"taskId": task_id, "completed": True})
        assert response.status_code == 200


@pytest.mark.parametrize("kind", ["badges", "certificates"])
def test_request_before_completion_fails(client, user_token, roadmap, kind):
    ids = task_ids(roadmap)
    client.post(f"{API}/progress/task", headers=auth(user_token), json={"taskId": ids[0], "completed": True})

    response = client.post(f"{API}/{kind}/request", headers=auth(user_token),
                           json={"roadmapId": roadmap["id"]})
    assert response.status_code == 400
    assert response.json()["code"] == "INCOMPLETE_ROADMAP"


@pytest.mark.parametrize("kind", ["badges", "certificates"])
def test_request_after_completion_is_idempotent(client, user_token, admin_token, roadmap, kind):
    complete_all(client, user_token, roadmap)

    first = client.post(f"{API}/{kind}/request", headers=auth(user_token),
                        json={"roadmapId": roadmap["id"]})
    assert first.status_code == 200, first.text
    first = first.json()
    assert first["created"] is True
    assert first["award"]["recipient_name"] == "Alice"
    assert first["award"]["roadmap_name"] == roadmap["title"]
    assert first["award"]["url"] == f"/{kind}/{first['award']['id']}"

    second = client.post(f"{API}/{kind}/request", headers=auth(user_token), json={
        "roadmapId": roadmap["id"], "recipientName": "Alice Liddell",
    }).json()
    assert second["created"] is False
    assert second["award"]["id"] == first["award"]["id"]
    assert second["award"]["recipient_name"] == "Alice Liddell"

    mine = client.get(f"{API}/{kind}", headers=auth(user_token)).json()
    assert len(mine) == 1
    everyone = client.get(f"{API}/admin/{kind}", headers=auth(admin_token)).json()
    assert len(everyone) == 1


def test_roadmap_without_tasks_cannot_be_awarded(client, user_token, admin_token):
    empty = client.post(f"{API}/roadmaps", headers=auth(admin_token), json={
        "title": "Coming soon", "description": "No content yet",
    }).json()
    response = client.post(f"{API}/badges/request", headers=auth(user_token),
                           json={"roadmapId": empty["id"]})
    assert response.status_code == 400
    assert response.json()["code"] == "INCOMPLETE_ROADMAP"


def test_unknown_roadmap_award_is_404(client, user_token):
    response = client.post(f"{API}/badges/request", headers=auth(user_token), json={"roadmapId": 999})
    assert response.status_code == 404


def test_awards_show_up_in_stats_and_activity(client, user_token, roadmap):
    complete_all(client, user_token, roadmap)
    client.post(f"{API}/badges/request", headers=auth(user_token), json={"roadmapId": roadmap["id"]})
    client.post(f"{API}/certificates/request", headers=auth(user_token), json={"roadmapId": roadmap["id"]})

    stats = client.get(f"{API}/user/stats", headers=auth(user_token)).json()
    assert stats["roadmaps_completed"] == 1
    assert stats["badges_earned"] == 1
    assert stats["certificates_earned"] == 1

    active = client.get(f"{API}/user/active-roadmaps", headers=auth(user_token)).json()
    assert active == []

    kinds = {item["type"] for item in client.get(f"{API}/user/activity", headers=auth(user_token)).json()}
    assert {"badge_issued", "certificate_issued"} <= kinds


@pytest.mark.parametrize("kind", ["badges", "certificates"])
def test_admin_listing_names_the_requester(client, user_token, admin_token, roadmap, kind):
    complete_all(client, user_token, roadmap)
    client.post(f"{API}/{kind}/request", headers=auth(user_token), json={
        "roadmapId": roadmap["id"], "roadmapName": "Web Dev",
    })

    [row] = client.get(f"{API}/admin/{kind}", headers=auth(admin_token)).json()
    assert row["username"] == "Alice"
    assert row["email"] == "alice@example.com"
    assert row["roadmap_title"] == roadmap["title"]
    assert row["roadmap_name"] == "Web Dev"

    mine = client.get(f"{API}/{kind}", headers=auth(user_token)).json()
    assert "email" not in mine[0]
