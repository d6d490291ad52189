import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from feels.models import AnalyticsCounter, AnalyticsStats

logger = logging.getLogger(__name__)

TOTAL_VIBES = "total_vibes"
TODAY_VIBES = "today_vibes"
COPY_CLICKS = "copy_clicks"
MOOD_PREFIX = "mood:"
PRESET_PREFIX = "preset:"


class AnalyticsStore:
    """
    Named integer counters kept in the database.

    Every increment is a single `UPDATE ... SET count = count + n`, so concurrent
    requests and multiple app instances never lose an update.
    """

    def __init__(self, session: Session):
        self.session = session

    def _increment(self, key: str, amount: int = 1) -> None:
        statement = (
            update(AnalyticsCounter)
            .where(col(AnalyticsCounter.key) == key)
            .values(count=col(AnalyticsCounter.count) + amount)
            .execution_options(synchronize_session=False)
        )
        if self.session.exec(statement).rowcount:
            self.session.commit()
            return
        try:
            self.session.add(AnalyticsCounter(key=key, count=amount))
            self.session.commit()
        except IntegrityError:
            # Another writer created the row first.
            self.session.rollback()
            self.session.exec(statement)
            self.session.commit()

    def _get(self, key: str) -> int:
        counter = self.session.get(AnalyticsCounter, key)
        return counter.count if counter else 0

    def _top(self, prefix: str) -> str | None:
        statement = (
            select(AnalyticsCounter)
            .where(col(AnalyticsCounter.key).startswith(prefix))
            .order_by(col(AnalyticsCounter.count).desc(), col(AnalyticsCounter.key))
            .limit(1)
        )
        counter = self.session.exec(statement).first()
        return counter.key[len(prefix):] if counter else None

    def track_vibe(self, *, preset: str | None = None, mood: str | None = None) -> None:
        self._increment(TOTAL_VIBES)
        self._increment(TODAY_VIBES)
        if preset:
            self._increment(f"{PRESET_PREFIX}{preset}")
        if mood:
            self._increment(f"{MOOD_PREFIX}{mood}")

    def track_copy(self) -> None:
        self._increment(COPY_CLICKS)

    def reset_daily(self) -> None:
        self.session.exec(
            update(AnalyticsCounter)
            .where(col(AnalyticsCounter.key) == TODAY_VIBES)
            .values(count=0)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        logger.info("Daily vibe counter reset")

    def stats(self) -> AnalyticsStats:
        return AnalyticsStats(
            total_vibes=self._get(TOTAL_VIBES),
            today_vibes=self._get(TODAY_VIBES),
            copy_clicks=self._get(COPY_CLICKS),
            top_mood=self._top(MOOD_PREFIX),
            most_used_preset=self._top(PRESET_PREFIX),
        )
