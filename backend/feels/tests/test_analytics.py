from sqlmodel import Session

from feels.analytics import AnalyticsStore


def test_fresh_store_is_empty(session: Session):
    stats = AnalyticsStore(session).stats()
    assert stats.total_vibes == 0
    assert stats.today_vibes == 0
    assert stats.copy_clicks == 0
    assert stats.top_mood is None
    assert stats.most_used_preset is None


def test_track_vibe_counts_moods_and_presets(session: Session):
    store = AnalyticsStore(session)
    store.track_vibe(preset="excited", mood="Happy")
    store.track_vibe(preset="chill", mood="Happy")
    store.track_vibe(preset="chill", mood="Sad")
    store.track_vibe()
    store.track_copy()

    stats = store.stats()
    assert stats.total_vibes == 4
    assert stats.today_vibes == 4
    assert stats.copy_clicks == 1
    assert stats.top_mood == "Happy"
    assert stats.most_used_preset == "chill"


def test_counters_are_shared_across_sessions(engine):
    with Session(engine) as first:
        AnalyticsStore(first).track_vibe(mood="Happy")
    with Session(engine) as second:
        AnalyticsStore(second).track_vibe(mood="Happy")
    with Session(engine) as third:
        assert AnalyticsStore(third).stats().total_vibes == 2


def test_reset_daily_keeps_totals(session: Session):
    store = AnalyticsStore(session)
    store.track_vibe()
    store.track_vibe()
    store.reset_daily()

    stats = store.stats()
    assert stats.today_vibes == 0
    assert stats.total_vibes == 2


def test_analytics_routes(client, login):
    _, headers = login()
    r = client.post(
        "/api/analytics/track-vibe", json={"preset": "excited", "mood": "Happy"}, headers=headers
    )
    assert r.json() == {"success": True}
    client.post("/api/analytics/track-copy", headers=headers)

    stats = client.get("/api/analytics/stats").json()
    assert stats["total_vibes"] == 1
    assert stats["copy_clicks"] == 1
    assert stats["top_mood"] == "Happy"
    assert stats["most_used_preset"] == "excited"


def test_tracking_requires_auth(client):
    assert client.post("/api/analytics/track-copy").status_code == 401
    assert client.post("/api/analytics/reset-daily").status_code == 401
