from __future__ import annotations

from dataclasses import dataclass

from .policies.base import ShiftAssociationPolicy
from .policies.lenient_policy import LenientShiftPolicy
from .policies.strict_policy import StrictShiftPolicy


@dataclass
class ShiftPolicyFactory:
    """Factory Pattern: choose the shift-association policy from organization settings."""

    def for_settings(self, *, require_scheduled_shift: bool) -> ShiftAssociationPolicy:
        if require_scheduled_shift:
            return StrictShiftPolicy()
        return LenientShiftPolicy()
