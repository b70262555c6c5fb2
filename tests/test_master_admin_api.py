from datetime import date, timedelta

import pytest

from connect_vida.models import Member

from conftest import auth_headers


@pytest.fixture
async def master(church, create_member):
    return await create_member(church, role="super_admin", email="master@connectvida.com.br")


async def test_church_admin_is_not_master(client, admin):
    assert (await client.get("/api/master-admin/churches", headers=auth_headers(admin))).status_code == 403


async def test_list_churches_with_counts(client, master, create_church, create_member):
    other = await create_church(name="Igreja Atrasada", next_payment_date=date.today() - timedelta(days=3))
    await create_member(other)
    await create_member(other, status="pendente")

    churches = (await client.get("/api/master-admin/churches", headers=auth_headers(master))).json()
    by_name = {c["name"]: c for c in churches}
    assert by_name["Igreja Atrasada"]["member_count"] == 1
    assert by_name["Igreja Atrasada"]["is_overdue"] is True
    assert by_name["Igreja Teste"]["is_overdue"] is False


async def test_payment_records_update_billing(client, master, create_church):
    target = await create_church(name="Cliente")
    url = f"/api/master-admin/churches/{target.id}/payments"
    headers = auth_headers(master)

    created = await client.post(url, json={"date": "2024-03-31", "amount": 99.9, "status": "Pago", "method": "PIX"}, headers=headers)
    assert created.status_code == 201
    record = created.json()["record"]
    assert record["recorded_by"] == master.email
    assert created.json()["church"]["next_payment_date"] == "2024-04-30"

    invalid = await client.post(url, json={"date": "2024-03-31", "status": "Pago", "method": "PIX"}, headers=headers)
    assert invalid.status_code == 400

    edited = await client.put(f"{url}/{record['id']}", json={"status": "Atrasado"}, headers=headers)
    assert edited.json()["church"]["last_payment_status"] == "Atrasado"

    deleted = await client.delete(f"{url}/{record['id']}", headers=headers)
    assert deleted.json()["church"]["payment_history"] == []
    assert deleted.json()["church"]["last_payment_status"] == "N/A"

    missing = await client.delete(f"{url}/{record['id']}", headers=headers)
    assert missing.status_code == 404


async def test_cannot_delete_own_church(client, master):
    response = await client.delete(f"/api/master-admin/churches/{master.church_id}", headers=auth_headers(master))
    assert response.status_code == 400


async def test_delete_church_removes_members(client, master, create_church, create_member, session_factory):
    target = await create_church(name="Encerrada")
    member = await create_member(target)

    response = await client.delete(f"/api/master-admin/churches/{target.id}", headers=auth_headers(master))
    assert response.status_code == 200

    async with session_factory() as session:
        assert await session.get(Member, member.id) is None


async def test_plans_and_overview(client, master, create_church):
    headers = auth_headers(master)
    await create_church(name="Paga", status="active", monthly_fee=99.9)

    plan = await client.post("/api/master-admin/plans", json={"name": "Especial", "monthly_price": 10}, headers=headers)
    assert plan.status_code == 201
    duplicate = await client.post("/api/master-admin/plans", json={"name": "Especial", "monthly_price": 20}, headers=headers)
    assert duplicate.status_code == 409

    await client.delete(f"/api/master-admin/plans/{plan.json()['id']}", headers=headers)
    assert (await client.get("/api/payments/plans")).json() == []

    overview = (await client.get("/api/master-admin/overview", headers=headers)).json()
    assert overview["churches"]["total"] == 2
    assert overview["churches"]["by_status"]["active"] == 2
    assert overview["active_members"] == 1
    assert overview["monthly_recurring_revenue"] == 99.9
