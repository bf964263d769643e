from __future__ import annotations

from uuid import UUID, uuid4


def generate_promocode_ids(*, count: int, existing_ids: set[UUID] | None = None) -> list[UUID]:
    if count <= 0:
        raise ValueError("count must be positive")

    existing = existing_ids if existing_ids is not None else set()
    generated: list[UUID] = []
    while len(generated) < count:
        promocode_id = uuid4()
        if promocode_id in existing:
            continue
        existing.add(promocode_id)
        generated.append(promocode_id)
    return generated
