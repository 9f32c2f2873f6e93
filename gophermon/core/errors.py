"""
Error classes for clearer exception sources.
"""
from __future__ import annotations

class GophermonError(Exception):
    pass

class UnknownAbilityError(GophermonError):
    def __init__(self, template_id: str):
        super().__init__(f"Unknown ability template: {template_id}")
        self.template_id = template_id

class InvalidCombatantError(GophermonError):
    pass

class SnapshotError(GophermonError):
    def __init__(self, kind: str, detail: str):
        super().__init__(f"Failed to restore {kind}: {detail}")
        self.kind = kind
        self.detail = detail
