from connect_vida.services.vocational_service import QUESTIONS

from conftest import auth_headers


def answers_for(**by_ministry):
    return {str(q["id"]): by_ministry.get(q["ministry"], 2) for q in QUESTIONS}


async def test_questions_catalogue(client):
    body = (await client.get("/api/vocational-test/questions")).json()
    assert len(body["questions"]) == 40
    assert [m["ministry"] for m in body["ministries"]][:2] == ["midia", "louvor"]
    assert body["scale"] == {"min": 1, "max": 5}


async def test_submit_and_fetch_latest(client, church, create_member):
    member = await create_member(church)
    headers = auth_headers(member)

    assert (await client.get("/api/vocational-test/latest", headers=headers)).status_code == 404

    first = await client.post("/api/vocational-test", json={"answers": answers_for(ensino=5)}, headers=headers)
    assert first.status_code == 201
    assert first.json()["recommended_ministry"] == "Ensino e Discipulado"
    assert first.json()["sums"]["ensino"] == 25
    assert first.json()["sums"]["midia"] == 10

    second = await client.post("/api/vocational-test", json={"answers": answers_for(acao_social=5)}, headers=headers)
    assert second.json()["recommended"]["ministry"] == "acao_social"

    latest = (await client.get("/api/vocational-test/latest", headers=headers)).json()
    assert latest["id"] == second.json()["id"]
    assert latest["results"][0]["ministry"] == "acao_social"
    assert latest["results"][0]["percentage"] == 100
    assert latest["results"][1]["percentage"] == 40


async def test_incomplete_answers_are_400(client, church, create_member):
    member = await create_member(church)
    answers = answers_for()
    answers.pop("40")

    response = await client.post("/api/vocational-test", json={"answers": answers}, headers=auth_headers(member))
    assert response.status_code == 400
