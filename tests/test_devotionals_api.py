from conftest import auth_headers


async def publish(client, admin, title="Fé e Obras"):
    created = await client.post(
        "/api/devotionals",
        json={"title": title, "content": "Texto do devocional", "bible_verse": "Tiago 2:17"},
        headers=auth_headers(admin),
    )
    assert created.status_code == 201
    devotional = created.json()
    assert devotional["status"] == "rascunho"

    published = await client.post(
        f"/api/devotionals/{devotional['id']}/status",
        json={"status": "publicado"},
        headers=auth_headers(admin),
    )
    assert published.json()["published_at"] is not None
    return devotional


async def test_drafts_are_hidden_from_members(client, church, admin, create_member):
    member = await create_member(church)
    created = (await client.post(
        "/api/devotionals",
        json={"title": "Rascunho", "content": "..."},
        headers=auth_headers(admin),
    )).json()

    assert (await client.get("/api/devotionals", headers=auth_headers(member))).json() == []
    assert (await client.get(f"/api/devotionals/{created['id']}", headers=auth_headers(member))).status_code == 404

    drafts = await client.get("/api/devotionals", params={"status": "rascunho"}, headers=auth_headers(admin))
    assert [d["title"] for d in drafts.json()] == ["Rascunho"]


async def test_like_toggles(client, church, admin, create_member):
    devotional = await publish(client, admin)
    member = await create_member(church)
    url = f"/api/devotionals/{devotional['id']}/like"

    liked = (await client.post(url, headers=auth_headers(member))).json()
    assert liked == {"liked": True, "like_count": 1}

    await client.post(url, headers=auth_headers(admin))
    unliked = (await client.post(url, headers=auth_headers(member))).json()
    assert unliked == {"liked": False, "like_count": 1}

    listed = (await client.get("/api/devotionals", headers=auth_headers(admin))).json()
    assert listed[0]["like_count"] == 1
    assert listed[0]["liked_by_me"] is True


async def test_comments(client, church, admin, create_member):
    devotional = await publish(client, admin)
    member = await create_member(church, full_name="Paula")

    response = await client.post(
        f"/api/devotionals/{devotional['id']}/comments",
        json={"content": "Amém!"},
        headers=auth_headers(member),
    )
    assert response.status_code == 201

    comments = (await client.get(f"/api/devotionals/{devotional['id']}/comments", headers=auth_headers(admin))).json()
    assert [(c["member_name"], c["content"]) for c in comments] == [("Paula", "Amém!")]

    detail = (await client.get(f"/api/devotionals/{devotional['id']}", headers=auth_headers(member))).json()
    assert detail["comment_count"] == 1


async def test_child_church_sees_parent_devotionals(client, church, admin, create_church, create_member):
    child = await create_church(name="Congregação", parent_church_id=church.id)
    child_member = await create_member(child)
    stranger = await create_member(await create_church(name="Outra"))

    devotional = await publish(client, admin)

    listed = (await client.get("/api/devotionals", headers=auth_headers(child_member))).json()
    assert [d["id"] for d in listed] == [devotional["id"]]
    assert (await client.get("/api/devotionals", headers=auth_headers(stranger))).json() == []


async def test_members_cannot_publish(client, church, admin, create_member):
    member = await create_member(church)
    created = (await client.post(
        "/api/devotionals",
        json={"title": "Rascunho", "content": "..."},
        headers=auth_headers(admin),
    )).json()

    response = await client.post(
        f"/api/devotionals/{created['id']}/status",
        json={"status": "publicado"},
        headers=auth_headers(member),
    )
    assert response.status_code == 403
