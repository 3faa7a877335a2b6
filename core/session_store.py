"""
Session Store - OAuth session persistence.

Keeps one offline access token per shop in a JSON file so that a build
triggered later (e.g. from the setup page) can reuse the token obtained during
app install.
"""

import os
import json
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, Optional


@dataclass
class Session:
    shop: str
    access_token: str
    is_online: bool = False
    scope: str = ""


class SessionStore:
    """Stores Session records keyed by shop domain.

    Attributes:
        path: JSON file holding {"updated_at": ..., "sessions": {shop: record}}.
    """

    def __init__(self, path: str, debug: bool = False):
        self.path = path
        self.debug = debug

    def _load_all(self) -> Dict[str, Dict]:
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            if self.debug:
                print(f"  Could not load session store: {e}")
            return {}

        return data.get("sessions", {})

    def _save_all(self, sessions: Dict[str, Dict]):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        data = {
            "updated_at": datetime.now(timezone.utc).isoformat(),
            "sessions": sessions,
        }
        with open(self.path, "w") as f:
            json.dump(data, f, indent=2)

    def store_session(self, session: Session) -> None:
        """Save the session, replacing any earlier one for the same shop.

        Args:
            session: Session to persist. The file and its directory are
                created if missing.
        """
        sessions = self._load_all()
        sessions[session.shop] = asdict(session)
        self._save_all(sessions)

        if self.debug:
            print(f"  Stored session for {session.shop}")

    def load_session(self, shop: str) -> Optional[Session]:
        """Return the stored session for shop, or None if there is none."""
        record = self._load_all().get(shop)
        if not record:
            return None
        return Session(
            shop=record["shop"],
            access_token=record["access_token"],
            is_online=record.get("is_online", False),
            scope=record.get("scope", ""),
        )

    def delete_session(self, shop: str) -> bool:
        """Remove the shop's session. Returns False if none was stored."""
        sessions = self._load_all()
        if shop not in sessions:
            return False
        del sessions[shop]
        self._save_all(sessions)
        return True
