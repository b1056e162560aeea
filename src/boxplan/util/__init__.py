from .identity import new_container_name, new_plan_id, new_step_id, new_uuid, now_utc
from .paths import host_path, resolve_container_path, resolve_context_source

__all__ = [
    "new_uuid",
    "new_plan_id",
    "new_step_id",
    "new_container_name",
    "now_utc",
    "resolve_container_path",
    "resolve_context_source",
    "host_path",
]
