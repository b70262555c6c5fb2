from datetime import date

from conftest import auth_headers


def transaction(**overrides):
    body = {
        "type": "entrada",
        "category": "Dízimos",
        "amount": 100.0,
        "transaction_date": date.today().isoformat(),
        "description": "Culto de domingo",
    }
    body.update(overrides)
    return body


async def test_transaction_starts_pending_and_confirms_once(client, admin):
    created = await client.post("/api/finance/transactions", json=transaction(), headers=auth_headers(admin))
    assert created.status_code == 201
    tx = created.json()
    assert tx["status"] == "pendente"

    confirmed = await client.post(
        f"/api/finance/transactions/{tx['id']}/status",
        json={"status": "confirmado"},
        headers=auth_headers(admin),
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmado"
    assert confirmed.json()["approved_by"] == admin.email

    again = await client.post(
        f"/api/finance/transactions/{tx['id']}/status",
        json={"status": "cancelado"},
        headers=auth_headers(admin),
    )
    assert again.status_code == 409


async def test_status_must_be_confirmado_or_cancelado(client, admin):
    tx = (await client.post("/api/finance/transactions", json=transaction(), headers=auth_headers(admin))).json()
    response = await client.post(
        f"/api/finance/transactions/{tx['id']}/status",
        json={"status": "pendente"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422


async def test_summary_counts_only_confirmed(client, admin):
    headers = auth_headers(admin)
    ids = []
    for body in (
        transaction(amount=300),
        transaction(amount=50, category="Ofertas"),
        transaction(type="saida", category="Energia", amount=120),
        transaction(amount=999),
    ):
        ids.append((await client.post("/api/finance/transactions", json=body, headers=headers)).json()["id"])

    for tx_id in ids[:3]:
        await client.post(f"/api/finance/transactions/{tx_id}/status", json={"status": "confirmado"}, headers=headers)

    summary = (await client.get("/api/finance/summary", headers=headers)).json()
    assert summary["total_inflows"] == 350.0
    assert summary["total_outflows"] == 120.0
    assert summary["balance"] == 230.0
    assert summary["pending_count"] == 1
    assert summary["inflows_by_category"] == {"Dízimos": 300.0, "Ofertas": 50.0}


async def test_transaction_member_must_belong_to_church(client, admin, create_church, create_member):
    outsider = await create_member(await create_church(name="Outra"))
    response = await client.post(
        "/api/finance/transactions",
        json=transaction(member_id=outsider.id),
        headers=auth_headers(admin),
    )
    assert response.status_code == 404


async def test_finance_requires_financial_panel(client, church, create_member):
    leader = await create_member(church, role="lider_ministerio")
    treasurer = await create_member(church, role="financeiro")

    assert (await client.get("/api/finance/transactions", headers=auth_headers(leader))).status_code == 403
    assert (await client.get("/api/finance/transactions", headers=auth_headers(treasurer))).status_code == 200


async def test_budget_crud(client, admin):
    headers = auth_headers(admin)
    created = await client.post(
        "/api/finance/budgets",
        json={"category": "Manutenção", "month": "2024-05", "budgeted_amount": 500},
        headers=headers,
    )
    assert created.status_code == 201
    budget_id = created.json()["id"]

    bad = await client.post(
        "/api/finance/budgets",
        json={"category": "Manutenção", "month": "2024-13", "budgeted_amount": 500},
        headers=headers,
    )
    assert bad.status_code == 422

    updated = await client.put(f"/api/finance/budgets/{budget_id}", json={"spent_amount": 120}, headers=headers)
    assert updated.json()["spent_amount"] == 120

    listed = await client.get("/api/finance/budgets", params={"month": "2024-05"}, headers=headers)
    assert len(listed.json()) == 1

    assert (await client.delete(f"/api/finance/budgets/{budget_id}", headers=headers)).status_code == 200
    assert (await client.get("/api/finance/budgets", headers=headers)).json() == []


async def test_transaction_update_rejects_null_amount(client, admin):
    tx = (await client.post("/api/finance/transactions", json=transaction(), headers=auth_headers(admin))).json()

    response = await client.put(f"/api/finance/transactions/{tx['id']}", json={"amount": None}, headers=auth_headers(admin))
    assert response.status_code == 400

    kept = await client.put(f"/api/finance/transactions/{tx['id']}", json={"description": "Ajustado"}, headers=auth_headers(admin))
    assert kept.json()["amount"] == 100.0
