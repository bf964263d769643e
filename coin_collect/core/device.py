from __future__ import annotations

import uuid

from coin_collect.core.config import Settings

DEVICE_ID_NAMESPACE = uuid.UUID("8f3c2b56-4d0e-4f5b-9a61-2f7f0c1d9e43")


def resolve_device_id(settings: Settings) -> str:
    """Return the identifier this installation uses as its account id.

    ``DEVICE_ID`` wins when configured. Otherwise the id is derived from the
    host's hardware node id so it stays stable across restarts.
    """
    configured = (settings.device_id or "").strip()
    if configured:
        return configured.upper()
    return str(uuid.uuid5(DEVICE_ID_NAMESPACE, str(uuid.getnode()))).upper()
