from connect_vida.services.vocational_service import QUESTIONS

from conftest import auth_headers


async def create_ministry(client, manager, **overrides):
    body = {"name": "Louvor", "description": "Banda e coral"}
    body.update(overrides)
    response = await client.post("/api/ministries", json=body, headers=auth_headers(manager))
    assert response.status_code == 201
    return response.json()


async def test_ministry_crud_requires_permission(client, church, admin, create_member):
    member = await create_member(church)
    denied = await client.post("/api/ministries", json={"name": "Mídia"}, headers=auth_headers(member))
    assert denied.status_code == 403

    ministry = await create_ministry(client, admin, leader_id=admin.id)
    assert ministry["leader_name"] == "Pastor Admin"
    assert ministry["volunteer_count"] == 0

    duplicate = await client.post("/api/ministries", json={"name": "Louvor"}, headers=auth_headers(admin))
    assert duplicate.status_code == 409

    renamed = await client.put(f"/api/ministries/{ministry['id']}", json={"name": "Louvor e Adoração"}, headers=auth_headers(admin))
    assert renamed.json()["name"] == "Louvor e Adoração"

    nulled = await client.put(f"/api/ministries/{ministry['id']}", json={"name": None}, headers=auth_headers(admin))
    assert nulled.status_code == 400

    listed = (await client.get("/api/ministries", headers=auth_headers(member))).json()
    assert [m["name"] for m in listed] == ["Louvor e Adoração"]

    deleted = await client.delete(f"/api/ministries/{ministry['id']}", headers=auth_headers(admin))
    assert deleted.status_code == 200
    assert (await client.get(f"/api/ministries/{ministry['id']}", headers=auth_headers(member))).status_code == 404


async def test_leader_must_belong_to_church(client, admin, create_church, create_member):
    other = await create_member(await create_church(name="Outra"))
    response = await client.post("/api/ministries", json={"name": "Kids", "leader_id": other.id}, headers=auth_headers(admin))
    assert response.status_code == 400


async def test_volunteer_assignment(client, church, admin, create_member):
    leader = await create_member(church, full_name="Líder Ana")
    volunteer = await create_member(church, full_name="Bruno")
    pending = await create_member(church, status="pendente")
    ministry = await create_ministry(client, admin, leader_id=leader.id)
    url = f"/api/ministries/{ministry['id']}/volunteers"

    # líder sem a permissão geral ainda escala o próprio ministério
    added = await client.post(url, json={"member_id": volunteer.id, "function": "Baixo"}, headers=auth_headers(leader))
    assert added.status_code == 201
    assert added.json()["member_name"] == "Bruno"

    again = await client.post(url, json={"member_id": volunteer.id}, headers=auth_headers(leader))
    assert again.status_code == 409

    inactive = await client.post(url, json={"member_id": pending.id}, headers=auth_headers(admin))
    assert inactive.status_code == 409

    outsider = await client.post(url, json={"member_id": leader.id}, headers=auth_headers(volunteer))
    assert outsider.status_code == 403

    volunteers = (await client.get(url, headers=auth_headers(volunteer))).json()
    assert [(v["member_name"], v["function"]) for v in volunteers] == [("Bruno", "Baixo")]

    mine = (await client.get("/api/ministries/mine", headers=auth_headers(volunteer))).json()
    assert mine[0]["is_volunteer"] is True
    assert mine[0]["volunteer_count"] == 1

    removed = await client.delete(f"{url}/{volunteer.id}", headers=auth_headers(leader))
    assert removed.status_code == 200
    assert (await client.delete(f"{url}/{volunteer.id}", headers=auth_headers(leader))).status_code == 404


async def test_suggested_ministries_follow_vocational_ranking(client, church, admin, create_member):
    member = await create_member(church)
    headers = auth_headers(member)
    await create_ministry(client, admin, name="Mídia", vocational_profile="midia")
    await create_ministry(client, admin, name="Escola Bíblica", vocational_profile="ensino")
    await create_ministry(client, admin, name="Recepção")

    assert (await client.get("/api/ministries/suggested", headers=headers)).status_code == 404

    answers = {str(q["id"]): 5 if q["ministry"] == "ensino" else 2 for q in QUESTIONS}
    await client.post("/api/vocational-test", json={"answers": answers}, headers=headers)

    suggested = (await client.get("/api/ministries/suggested", headers=headers)).json()
    assert [m["name"] for m in suggested] == ["Escola Bíblica", "Mídia"]
    assert suggested[0]["match_percentage"] == 100
