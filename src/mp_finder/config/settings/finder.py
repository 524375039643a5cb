"""Config settings – FinderSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from mp_finder.config.settings.base import Settings
from mp_finder.config.validation import InvalidSettingValueError

REPORT_MODES = ("error", "log", "log-warn", "off")


@dataclasses.dataclass
class FinderSettings(Settings):
    """Tunables shared by every finder and locator of a process.

    ``report_unused_dimensions`` decides what happens when a locator carries
    dimensions nobody consumed: ``error`` raises, ``log``/``log-warn`` only
    log, ``off`` skips the check.
    """

    _prefix: ClassVar[str] = "FINDER"

    report_unused_dimensions: str = "error"
    allow_base64: bool = True
    default_page_size: int | None = None
    default_lookup_limit: int | None = None

    processed_items_log_limit: int = 1
    time_warn_limit_ms: int = 10000
    minimum_time_warn_limit_ms: int = 1000
    processed_and_filtered_items_warn_limit: int = 10000
    processed_items_warn_limit: int = 100000

    next_lookup_limit_multiplier: float = 2.0
    next_lookup_limit_max_step: int = 5000

    def _validate(self) -> None:
        if self.report_unused_dimensions not in REPORT_MODES:
            raise InvalidSettingValueError(
                "report_unused_dimensions",
                self.report_unused_dimensions,
                f"must be one of {', '.join(REPORT_MODES)}",
            )
        for name in ("default_page_size", "default_lookup_limit"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidSettingValueError(name, value, "must not be negative")
        for name in (
            "processed_items_log_limit",
            "time_warn_limit_ms",
            "minimum_time_warn_limit_ms",
            "processed_and_filtered_items_warn_limit",
            "processed_items_warn_limit",
        ):
            if getattr(self, name) < 0:
                raise InvalidSettingValueError(name, getattr(self, name), "must not be negative")
        if self.next_lookup_limit_multiplier < 1:
            raise InvalidSettingValueError(
                "next_lookup_limit_multiplier", self.next_lookup_limit_multiplier, "must be >= 1"
            )


__all__ = ["REPORT_MODES", "FinderSettings"]
