from __future__ import annotations

import json
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ged_booking.schemas.stay import Stay, StaySession

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path("fixtures/stays_sample.json")


class CatalogSource(Protocol):
    def get_stay(self, stay_id: str) -> Optional[Tuple[Stay, List[StaySession]]]:
        """Stay + its future sessions (start date ascending), or None if unknown."""
        ...


class FixtureCatalog:
    """
    Offline catalog read from a JSON export:

        {"stays": [{"id": ..., "ageMin": ..., "sessions": [{...}, ...]}, ...]}

    Sessions that already started (relative to `today`) are dropped and the
    rest is sorted by start date, the way the catalog query returns them.
    De-duplication is NOT done here: that is the booking flow's job.
    """

    def __init__(self, path: Optional[Path] = None, *, today: Optional[date] = None) -> None:
        self.path = Path(path or os.getenv("GED_CATALOG_PATH") or DEFAULT_CATALOG_PATH)
        self.today = today
        self._raw: Optional[Dict[str, Dict[str, Any]]] = None

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if self._raw is None:
            if not self.path.exists():
                raise RuntimeError(f"catalog file not found: {self.path}")
            data = json.loads(self.path.read_text(encoding="utf-8"))
            items = data.get("stays", []) if isinstance(data, dict) else data
            self._raw = {str(x["id"]): x for x in items if isinstance(x, dict) and x.get("id")}
            logger.debug("catalog loaded: %s stays from %s", len(self._raw), self.path)
        return self._raw

    def list_stays(self, *, published_only: bool = True) -> List[Stay]:
        stays = [Stay.model_validate(x) for x in self._load().values()]
        if published_only:
            stays = [s for s in stays if s.published]
        return stays

    def get_stay(self, stay_id: str) -> Optional[Tuple[Stay, List[StaySession]]]:
        raw = self._load().get(str(stay_id))
        if raw is None:
            return None

        stay = Stay.model_validate(raw)
        today = self.today or date.today()

        sessions: List[StaySession] = []
        for s in raw.get("sessions") or []:
            if not isinstance(s, dict):
                continue
            session = StaySession.model_validate({"stay_id": stay.id, **s})
            if session.start_date >= today:
                sessions.append(session)

        sessions.sort(key=lambda s: s.start_date)
        return stay, sessions
