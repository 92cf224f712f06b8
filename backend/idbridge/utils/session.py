# SPDX-FileCopyrightText: 2024-2025 Pathway Bio, Inc. <https://pwbio.ai>
# SPDX-FileContributor: Kimberly Robasky
# SPDX-License-Identifier: Apache-2.0

"""
Per-browser session state

Thin typed wrapper over Starlette's request.session. SessionMiddleware
serializes the whole mapping into one signed cookie when the response is
sent, so every write made during a request lands together.
"""
from typing import Any, MutableMapping, Optional

from fastapi import Request

BINDING_KEY = 'idbridge.auth_binding'
BACK_URL_KEY = 'BackURL'
PASSIVE_ATTEMPTED_KEY = 'idbridge.passive_attempted'
MEMBER_KEY = 'loggedInAs'
SESSION_ID_KEY = 'idbridge.session_id'
FEDERATION_KEY = 'idbridge.federation'


class SessionState:
    """Key/value access to the persisted browser session"""

    def __init__(self, data: MutableMapping[str, Any]):
        self._data = data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)

    def clear_all(self) -> None:
        self._data.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._data

    @property
    def session_id(self) -> Optional[str]:
        return self._data.get(SESSION_ID_KEY)

    def rebind(self, session_id: str) -> None:
        """Share the identity provider's session identifier and lifetime"""
        self._data[SESSION_ID_KEY] = session_id

    def end_federated_login(self) -> None:
        """The federated session this login was tied to is gone"""
        self._data.pop(MEMBER_KEY, None)
        self._data.pop(SESSION_ID_KEY, None)

    @property
    def back_url(self) -> Optional[str]:
        return self._data.get(BACK_URL_KEY)

    @back_url.setter
    def back_url(self, url: str) -> None:
        self._data[BACK_URL_KEY] = url

    def pop_back_url(self) -> Optional[str]:
        return self._data.pop(BACK_URL_KEY, None)

    @property
    def passive_attempted(self) -> bool:
        return bool(self._data.get(PASSIVE_ATTEMPTED_KEY))

    def mark_passive_attempted(self) -> None:
        self._data[PASSIVE_ATTEMPTED_KEY] = 1

    @property
    def member_id(self) -> Optional[int]:
        return self._data.get(MEMBER_KEY)


def get_session_state(request: Request) -> SessionState:
    """FastAPI dependency returning the current session"""
    return SessionState(request.session)
