from conftest import auth_headers


async def test_contribution_receipt_only_after_confirmation(client, church, admin, create_member):
    member = await create_member(church, full_name="João da Silva")
    created = await client.post(
        "/api/contributions",
        json={"amount": 150.5, "category": "Dízimos", "payment_method": "PIX"},
        headers=auth_headers(member),
    )
    assert created.status_code == 201
    contribution = created.json()
    assert contribution["type"] == "entrada"
    assert contribution["status"] == "pendente"
    assert contribution["member_id"] == member.id

    pending = await client.get(f"/api/contributions/{contribution['id']}/receipt", headers=auth_headers(member))
    assert pending.status_code == 409

    await client.post(
        f"/api/finance/transactions/{contribution['id']}/status",
        json={"status": "confirmado"},
        headers=auth_headers(admin),
    )

    receipt = await client.get(f"/api/contributions/{contribution['id']}/receipt", headers=auth_headers(member))
    assert receipt.status_code == 200
    assert receipt.headers["content-type"] == "application/pdf"
    assert receipt.content.startswith(b"%PDF")

    mine = (await client.get("/api/contributions", headers=auth_headers(member))).json()
    assert mine[0]["receipt_issued"] is True


async def test_other_member_cannot_download_receipt(client, church, create_member):
    owner = await create_member(church)
    other = await create_member(church)
    created = (await client.post(
        "/api/contributions",
        json={"amount": 20, "category": "Ofertas", "payment_method": "Dinheiro"},
        headers=auth_headers(owner),
    )).json()

    response = await client.get(f"/api/contributions/{created['id']}/receipt", headers=auth_headers(other))
    assert response.status_code == 404


async def test_contribution_category_is_validated(client, church, create_member):
    member = await create_member(church)
    response = await client.post(
        "/api/contributions",
        json={"amount": 20, "category": "Rifa", "payment_method": "PIX"},
        headers=auth_headers(member),
    )
    assert response.status_code == 422
