"""Release stage: trigger guard, publisher and the pipeline state machine."""

from __future__ import annotations
