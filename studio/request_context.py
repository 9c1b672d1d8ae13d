from __future__ import annotations

from contextvars import ContextVar


# Label of the job or route currently touching the database, for slow-query logs.
current_operation: ContextVar[str] = ContextVar('current_operation', default='background')
