"""Deterministic test case generation from a page snapshot."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pagescribe.constants import (
    FORM_TYPES,
    PERFORMANCE_METRICS,
    SAMPLE_INVALID_INPUT,
    SAMPLE_VALID_INPUT,
)
from pagescribe.models.domain import ElementMetadata, TestCase, TestStep
from pagescribe.types import AssertionKind, Priority, StepAction, TestType

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger(__name__)


class TestCaseGenerator:
    """Turns selector -> metadata records into an ordered list of test cases.

    Three independent passes run in a fixed order (functional, accessibility,
    performance); within a pass, cases follow the mapping's iteration order.
    """

    __test__ = False

    def __init__(self, elements: Mapping[str, ElementMetadata]) -> None:
        self._elements = elements

    def generate_suite(self) -> list[TestCase]:
        """Generate the full suite."""
        cases = [
            *self.generate_functional_tests(),
            *self.generate_accessibility_tests(),
            *self.generate_performance_tests(),
        ]
        logger.info(
            "generated_test_cases",
            count=len(cases),
            types={t.value: sum(1 for c in cases if c.type == t) for t in TestType},
        )
        return cases

    def generate_functional_tests(self) -> list[TestCase]:
        tests: list[TestCase] = []
        for selector, metadata in self._elements.items():
            if metadata.interactable:
                tests.append(self._interaction_test(selector, metadata))
            if metadata.type in FORM_TYPES:
                tests.append(self._form_validation_test(selector, metadata))
        return tests

    def generate_accessibility_tests(self) -> list[TestCase]:
        tests: list[TestCase] = []
        for selector, metadata in self._elements.items():
            if metadata.accessibility is None:
                continue
            tests.append(
                TestCase(
                    name=f"Accessibility Test - {selector}",
                    description=f"Verify accessibility features for {metadata.type} element",
                    type=TestType.ACCESSIBILITY,
                    priority=Priority.HIGH,
                    steps=(
                        TestStep(
                            action=StepAction.VERIFY,
                            selector=selector,
                            expected_result="Element should have proper ARIA attributes",
                            assertion=AssertionKind.ARIA,
                        ),
                        TestStep(
                            action=StepAction.VERIFY,
                            selector=selector,
                            expected_result="Element should have proper contrast ratio",
                            assertion=AssertionKind.CONTRAST,
                        ),
                    ),
                )
            )
        return tests

    def generate_performance_tests(self) -> list[TestCase]:
        """Always exactly one page-level case, independent of the elements."""
        return [
            TestCase(
                name="Page Load Performance Test",
                description="Verify page load times and performance metrics",
                type=TestType.PERFORMANCE,
                priority=Priority.MEDIUM,
                steps=(
                    TestStep(
                        action=StepAction.MEASURE,
                        selector="document",
                        expected_result="Page should load within acceptable time limits",
                        data={"metrics": list(PERFORMANCE_METRICS)},
                    ),
                ),
            )
        ]

    def _interaction_test(self, selector: str, metadata: ElementMetadata) -> TestCase:
        steps: list[TestStep] = []
        if metadata.visibility:
            steps.append(
                TestStep(
                    action=StepAction.VERIFY,
                    selector=selector,
                    expected_result="Element should be visible",
                    assertion=AssertionKind.VISIBLE,
                )
            )
        steps.append(
            TestStep(
                action=StepAction.CLICK,
                selector=selector,
                expected_result=f"{metadata.type} should respond to interaction",
            )
        )
        return TestCase(
            name=f"Interaction Test - {selector}",
            description=f"Verify {metadata.type} element interaction",
            type=TestType.FUNCTIONAL,
            priority=Priority.HIGH,
            steps=tuple(steps),
        )

    def _form_validation_test(self, selector: str, metadata: ElementMetadata) -> TestCase:
        return TestCase(
            name=f"Form Validation Test - {selector}",
            description=f"Verify form validation for {metadata.type}",
            type=TestType.FUNCTIONAL,
            priority=Priority.HIGH,
            steps=(
                TestStep(
                    action=StepAction.INPUT,
                    selector=selector,
                    expected_result="Form should validate input correctly",
                    data={
                        "valid_input": SAMPLE_VALID_INPUT,
                        "invalid_input": SAMPLE_INVALID_INPUT,
                    },
                ),
            ),
        )
