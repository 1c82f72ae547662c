"""Inter-module data contracts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pagescribe.types import AssertionKind, Priority, TestType


class AccessibilityInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str = ""
    label: str = ""
    required: bool | None = None


class ElementMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    selector: str  # id, first class or tag name; not unique
    type: str
    attributes: dict[str, str] = Field(default_factory=dict)
    interactable: bool = False
    visibility: bool = False
    accessibility: AccessibilityInfo | None = None


class ElementAnalysis(BaseModel):
    is_interactive: bool = False
    is_form_element: bool = False
    is_navigational: bool = False
    accessibility_score: int = Field(default=100, ge=0, le=100)
    potential_issues: list[str] = Field(default_factory=list)


class TestStep(BaseModel):
    __test__ = False

    model_config = ConfigDict(frozen=True)

    action: str  # click, input, verify, measure
    selector: str
    expected_result: str = ""
    data: dict[str, Any] | None = None  # shape depends on action
    assertion: AssertionKind | None = None  # verify steps only


class TestCase(BaseModel):
    __test__ = False

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    type: TestType
    priority: Priority
    steps: tuple[TestStep, ...] = ()


class AnalysisSnapshot(BaseModel):
    timestamp: datetime
    url: str
    elements: dict[str, ElementMetadata] = Field(default_factory=dict)
