"""Field validators shared by request schemas."""

from ..core.time_slots import is_valid_time_slot


def validate_time_slot(value: str) -> str:
    candidate = value.strip() if isinstance(value, str) else value
    if not is_valid_time_slot(candidate):
        raise ValueError("time slot must be a zero-padded HH:MM on the slot grid")
    return candidate
