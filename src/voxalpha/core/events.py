"""
事件模型（Event Model）

核心邏輯不直接操作 UI。每一題的出題、判定結果與錯誤都以事件回呼
（event handler）送出，由上層決定如何呈現或記錄。
"""

from __future__ import annotations

from typing import Callable, List, Literal, TypedDict


class AlternativeRecord(TypedDict):
    candidate: str
    similarity: float


class TrialEvent(TypedDict, total=False):
    type: Literal["challenge", "recording", "verdict", "error"]
    language: str
    trace_id: str

    # challenge
    unit: str
    expected: str

    # recording
    recording: Literal["started", "stopped", "timeout"]

    # verdict
    transcript: str
    matched: str
    similarity: float
    accepted: bool
    alternatives: List[AlternativeRecord]
    policy: Literal["open", "closed"]
    message: str
    next_delay: float

    # error
    exception_type: str
    exception_message: str


TrialEventHandler = Callable[[TrialEvent], None]
