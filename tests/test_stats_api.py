from datetime import date, timedelta

from connect_vida.core.clock import utcnow
from connect_vida.models import Event, FinancialTransaction

from conftest import auth_headers


async def test_dashboard_hides_pending_counts_without_permission(client, church, admin, create_member, session_factory):
    member = await create_member(church)
    await create_member(church, status="pendente")

    async with session_factory() as session:
        session.add(Event(church_id=church.id, name="Culto", starts_at=utcnow() + timedelta(days=2)))
        session.add(Event(church_id=church.id, name="Antigo", starts_at=utcnow() - timedelta(days=2)))
        session.add(FinancialTransaction(
            church_id=church.id, type="entrada", category="Dízimos", amount=200,
            transaction_date=date.today(), status="confirmado",
        ))
        session.add(FinancialTransaction(
            church_id=church.id, type="entrada", category="Ofertas", amount=80,
            transaction_date=date.today(), status="pendente",
        ))
        await session.commit()

    as_admin = (await client.get("/api/stats/dashboard", headers=auth_headers(admin))).json()
    assert as_admin == {
        "active_members": 2,
        "upcoming_events": 1,
        "month_inflows": 200.0,
        "pending_members": 1,
        "pending_transactions": 1,
    }

    as_member = (await client.get("/api/stats/dashboard", headers=auth_headers(member))).json()
    assert as_member["pending_members"] is None
    assert as_member["pending_transactions"] is None


async def test_personal_stats_without_activity(client, church, create_member):
    member = await create_member(church)
    stats = (await client.get("/api/stats/personal", headers=auth_headers(member))).json()
    assert stats == {
        "journey_progress": 0,
        "journey_level": 0,
        "event_registrations": 0,
        "contributions_total": 0.0,
        "recommended_ministry": None,
    }
