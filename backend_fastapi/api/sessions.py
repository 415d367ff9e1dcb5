"""
Sesiones de cliente: cada una tiene su propio TaskStore.

La sesión se toma de la petición HTTP que transporta la llamada MCP
(cabecera Mcp-Session-Id en streamable HTTP, parámetro session_id en SSE).
Sin petición o sin id válido, todas las llamadas comparten DEFAULT_SESSION.
"""

import logging
import re
from collections import OrderedDict
from typing import Any, Callable

from core.application.task_store import TaskStore

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"
SESSION_QUERY_PARAM = "session_id"
DEFAULT_SESSION = "default"
DEFAULT_MAX_SESSIONS = 256
_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def is_valid_session_id(session_id: str) -> bool:
    return bool(_SESSION_ID_RE.match(session_id))


def session_key(ctx: Any) -> str:
    """Id de sesión de la llamada en curso, o DEFAULT_SESSION."""
    try:
        request = getattr(ctx.request_context, "request", None)
    except ValueError:
        # Fuera de una petición MCP
        return DEFAULT_SESSION
    if request is None:
        return DEFAULT_SESSION

    session_id = request.headers.get(SESSION_HEADER) or request.query_params.get(
        SESSION_QUERY_PARAM
    )
    if not session_id:
        return DEFAULT_SESSION
    if not is_valid_session_id(session_id):
        logger.warning(f"⚠️ Id de sesión inválido {session_id!r}, se usa la sesión por defecto")
        return DEFAULT_SESSION
    return session_id


class SessionRegistry:
    """
    Un TaskStore por sesión, con desalojo LRU.

    El store se crea sin inicializar: la carga desde el backend ocurre en su
    primera operación. Como cada mutación ya está persistida, desalojar un
    store no pierde datos; si la sesión vuelve, su nuevo store relee el
    backend.
    """

    def __init__(
        self,
        store_factory: Callable[[str], TaskStore],
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions debe ser al menos 1")
        self._store_factory = store_factory
        self._max_sessions = max_sessions
        self._stores: OrderedDict[str, TaskStore] = OrderedDict()

    def get_store(self, session_id: str) -> TaskStore:
        store = self._stores.get(session_id)
        if store is not None:
            self._stores.move_to_end(session_id)
            return store

        store = self._store_factory(session_id)
        self._stores[session_id] = store
        logger.info(f"🆕 Sesión {session_id} registrada ({len(self._stores)} activas)")

        while len(self._stores) > self._max_sessions:
            evicted, _ = self._stores.popitem(last=False)
            logger.info(f"♻️ Sesión {evicted} desalojada de memoria")
        return store

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._stores

    def __len__(self) -> int:
        return len(self._stores)
