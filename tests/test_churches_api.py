import uuid

from connect_vida.api.payments import ensure_plans_exist

from conftest import auth_headers


def registration(**overrides):
    body = {
        "name": "Igreja Vida Nova",
        "contact_email": "contato@vidanova.org",
        "admin_full_name": "Pr. Marcos",
        "admin_email": "marcos@vidanova.org",
    }
    body.update(overrides)
    return body


async def test_register_church_creates_trial_with_admin(client, session_factory):
    async with session_factory() as session:
        await ensure_plans_exist(session)

    user_id = str(uuid.uuid4())
    response = await client.post("/api/churches/register", json=registration(), headers=auth_headers(user_id))

    assert response.status_code == 201
    body = response.json()
    assert body["church"]["status"] == "trial"
    assert body["church"]["member_limit"] == 100
    assert body["church"]["monthly_fee"] == 49.9
    assert body["church"]["current_members"] == 1
    assert body["member"]["id"] == user_id
    assert body["member"]["role"] == "admin"
    assert body["member"]["status"] == "ativo"

    me = (await client.get("/api/auth/me", headers=auth_headers(user_id))).json()
    assert me["church_name"] == "Igreja Vida Nova"
    assert "system-settings" in me["effective_permissions"]

    again = await client.post("/api/churches/register", json=registration(name="Outra"), headers=auth_headers(user_id))
    assert again.status_code == 400


async def test_register_church_requires_token(client):
    response = await client.post("/api/churches/register", json=registration(user_id=str(uuid.uuid4())))
    assert response.status_code == 401


async def test_registered_id_comes_from_token_not_body(client, session_factory):
    owner = str(uuid.uuid4())
    response = await client.post(
        "/api/churches/register",
        json=registration(user_id="outro-usuario"),
        headers=auth_headers(owner),
    )
    assert response.json()["member"]["id"] == owner

    joined = await client.post(
        "/api/members/join",
        json={"church_id": response.json()["church"]["id"], "full_name": "Outro Usuário"},
        headers=auth_headers("outro-usuario"),
    )
    assert joined.status_code == 201


async def test_public_church_info(client, create_church):
    active = await create_church(name="Igreja Aberta", cnpj="12345678000199")
    inactive = await create_church(name="Fechada", status="inactive")

    public = (await client.get(f"/api/churches/{active.id}/public")).json()
    assert public["name"] == "Igreja Aberta"
    assert "cnpj" not in public

    assert (await client.get(f"/api/churches/{inactive.id}/public")).status_code == 404


async def test_child_church_inherits_plan(client, create_church, create_member, create_plan):
    plan = await create_plan(member_limit=300)
    parent = await create_church(plan_id=plan.id, member_limit=300, status="active")
    admin = await create_member(parent, role="admin")

    response = await client.post("/api/churches/current/children", json={"name": "Congregação Norte"}, headers=auth_headers(admin))
    assert response.status_code == 201
    child = response.json()
    assert child["parent_church_id"] == parent.id
    assert child["plan_id"] == plan.id
    assert child["member_limit"] == 300

    children = (await client.get("/api/churches/current/children", headers=auth_headers(admin))).json()
    assert [c["name"] for c in children] == ["Congregação Norte"]


async def test_update_current_church_requires_settings_permission(client, church, admin, create_member):
    treasurer = await create_member(church, role="financeiro")

    denied = await client.put("/api/churches/current", json={"name": "Novo Nome"}, headers=auth_headers(treasurer))
    assert denied.status_code == 403

    updated = await client.put("/api/churches/current", json={"name": "Novo Nome"}, headers=auth_headers(admin))
    assert updated.json()["name"] == "Novo Nome"
