import pytest

from connect_vida.core.config import settings

from conftest import auth_headers

QUIZ = [
    {"order": 1, "question": "Quem escreveu Atos?", "options": ["Lucas", "Paulo"], "correct_option": 0},
    {"order": 2, "question": "Quantos apóstolos?", "options": ["10", "12"], "correct_option": 1},
]


@pytest.fixture
async def journey(client, admin):
    """Trilha com duas etapas: leitura + quiz na primeira, ação na segunda"""
    headers = auth_headers(admin)
    track = (await client.post("/api/journey/admin/tracks", json={"title": "Trilha Principal"}, headers=headers)).json()
    first = (await client.post(f"/api/journey/admin/tracks/{track['id']}/stages", json={"title": "Novo Convertido"}, headers=headers)).json()
    second = (await client.post(f"/api/journey/admin/tracks/{track['id']}/stages", json={"title": "Batismo"}, headers=headers)).json()

    reading = (await client.post(
        f"/api/journey/admin/stages/{first['id']}/steps",
        json={"title": "Leia João 3", "step_type": "leitura"},
        headers=headers,
    )).json()
    quiz = (await client.post(
        f"/api/journey/admin/stages/{first['id']}/steps",
        json={"title": "Quiz", "step_type": "quiz", "quiz_questions": QUIZ, "quiz_passing_score": 100},
        headers=headers,
    )).json()
    action = (await client.post(
        f"/api/journey/admin/stages/{second['id']}/steps",
        json={"title": "Entrevista", "step_type": "acao"},
        headers=headers,
    )).json()

    return {"track": track, "stages": [first, second], "reading": reading, "quiz": quiz, "action": action}


async def test_stage_order_is_assigned(journey):
    first, second = journey["stages"]
    assert (first["order"], second["order"]) == (1, 2)
    assert (journey["reading"]["order"], journey["quiz"]["order"]) == (1, 2)


async def test_member_view_and_locked_stage(client, church, journey, create_member):
    member = await create_member(church)
    headers = auth_headers(member)

    view = (await client.get("/api/journey", headers=headers)).json()
    assert view["track"]["title"] == "Trilha Principal"
    assert view["total_steps"] == 3
    assert view["stages"][1]["is_locked"] is True
    assert "correct_option" not in view["stages"][0]["steps"][1]["quiz_questions"][0]

    locked = await client.post(f"/api/journey/steps/{journey['action']['id']}/complete", headers=headers)
    assert locked.status_code == 409

    quiz_via_complete = await client.post(f"/api/journey/steps/{journey['quiz']['id']}/complete", headers=headers)
    assert quiz_via_complete.status_code == 400

    done = await client.post(f"/api/journey/steps/{journey['reading']['id']}/complete", headers=headers)
    assert done.json()["status"] == "concluido"

    passed = (await client.post(
        f"/api/journey/steps/{journey['quiz']['id']}/quiz",
        json={"answers": {"1": 0, "2": 1}},
        headers=headers,
    )).json()
    assert passed["passed"] is True
    assert passed["score"] == 100

    view = (await client.get("/api/journey", headers=headers)).json()
    assert view["stages"][0]["all_steps_completed"] is True
    assert view["stages"][1]["is_locked"] is False
    assert view["overall_progress"] == 67
    assert view["current_level"] == 1

    assert (await client.post(f"/api/journey/steps/{journey['action']['id']}/complete", headers=headers)).status_code == 200


async def test_quiz_blocks_and_leader_unblocks(client, church, admin, journey, create_member):
    member = await create_member(church)
    headers = auth_headers(member)
    url = f"/api/journey/steps/{journey['quiz']['id']}/quiz"

    for attempt in range(1, settings.QUIZ_MAX_ATTEMPTS + 1):
        result = (await client.post(url, json={"answers": {"1": 1, "2": 1}}, headers=headers)).json()
        assert result["passed"] is False
        assert result["score"] == 50
        assert result["attempts"] == attempt

    assert result["blocked"] is True
    assert (await client.post(url, json={"answers": {"1": 0, "2": 1}}, headers=headers)).status_code == 409

    unblocked = await client.post(
        f"/api/journey/admin/progress/{member.id}/steps/{journey['quiz']['id']}/unblock",
        headers=auth_headers(admin),
    )
    assert unblocked.json()["quiz_blocked"] is False
    assert unblocked.json()["quiz_attempts"] == 0

    retry = (await client.post(url, json={"answers": {"1": 0, "2": 1}}, headers=headers)).json()
    assert retry["passed"] is True


async def test_leader_completes_step_for_member(client, church, admin, journey, create_member):
    member = await create_member(church)
    response = await client.post(
        f"/api/journey/admin/progress/{member.id}/steps/{journey['action']['id']}/complete",
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "concluido"

    missing = await client.post(
        f"/api/journey/admin/progress/{member.id}/steps/{journey['reading']['id']}/unblock",
        headers=auth_headers(admin),
    )
    assert missing.status_code == 404


async def test_activating_track_deactivates_others(client, admin, journey):
    headers = auth_headers(admin)
    await client.post("/api/journey/admin/tracks", json={"title": "Nova Trilha"}, headers=headers)

    tracks = (await client.get("/api/journey/admin/tracks", headers=headers)).json()
    active = [t["title"] for t in tracks if t["is_active"]]
    assert active == ["Nova Trilha"]


async def test_reorder_stages(client, admin, journey):
    first, second = journey["stages"]
    response = await client.put(
        f"/api/journey/admin/tracks/{journey['track']['id']}/stage-order",
        json={"ids": [second["id"], first["id"]]},
        headers=auth_headers(admin),
    )
    assert [s["order"] for s in response.json()] == [1, 2]
    assert response.json()[0]["id"] == second["id"]

    partial = await client.put(
        f"/api/journey/admin/tracks/{journey['track']['id']}/stage-order",
        json={"ids": [first["id"]]},
        headers=auth_headers(admin),
    )
    assert partial.status_code == 400


async def test_quiz_step_needs_valid_questions(client, admin, journey):
    stage_id = journey["stages"][0]["id"]
    headers = auth_headers(admin)

    empty = await client.post(
        f"/api/journey/admin/stages/{stage_id}/steps",
        json={"title": "Quiz vazio", "step_type": "quiz"},
        headers=headers,
    )
    assert empty.status_code == 400

    bad_option = await client.post(
        f"/api/journey/admin/stages/{stage_id}/steps",
        json={"title": "Quiz", "step_type": "quiz", "quiz_questions": [
            {"order": 1, "question": "?", "options": ["a", "b"], "correct_option": 5}
        ]},
        headers=headers,
    )
    assert bad_option.status_code == 400

    repeated_order = await client.post(
        f"/api/journey/admin/stages/{stage_id}/steps",
        json={"title": "Quiz", "step_type": "quiz", "quiz_questions": [
            {"order": 1, "question": "A?", "options": ["a", "b"], "correct_option": 0},
            {"order": 1, "question": "B?", "options": ["a", "b"], "correct_option": 1},
        ]},
        headers=headers,
    )
    assert repeated_order.status_code == 400

    repeated_on_update = await client.put(
        f"/api/journey/admin/steps/{journey['quiz']['id']}",
        json={"quiz_questions": [QUIZ[0], {**QUIZ[1], "order": 1}]},
        headers=headers,
    )
    assert repeated_on_update.status_code == 400


async def test_member_cannot_configure_journey(client, church, create_member):
    member = await create_member(church)
    response = await client.post("/api/journey/admin/tracks", json={"title": "Trilha"}, headers=auth_headers(member))
    assert response.status_code == 403


async def test_inactive_track_steps_are_read_only_for_members(client, church, admin, journey, create_member):
    member = await create_member(church)
    await client.put(
        f"/api/journey/admin/tracks/{journey['track']['id']}",
        json={"is_active": False},
        headers=auth_headers(admin),
    )

    complete = await client.post(f"/api/journey/steps/{journey['reading']['id']}/complete", headers=auth_headers(member))
    assert complete.status_code == 409

    quiz = await client.post(
        f"/api/journey/steps/{journey['quiz']['id']}/quiz",
        json={"answers": {"1": 0, "2": 1}},
        headers=auth_headers(member),
    )
    assert quiz.status_code == 409

    # liderança continua podendo registrar conclusão
    leader = await client.post(
        f"/api/journey/admin/progress/{member.id}/steps/{journey['reading']['id']}/complete",
        headers=auth_headers(admin),
    )
    assert leader.status_code == 200
