"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock

import pytest

from fieldsmith.mapping import FieldDefinition, ValueType


@pytest.fixture
def basic_catalog() -> list[FieldDefinition]:
    """Title, steps and priority as a live catalog would return them."""
    return [
        FieldDefinition(reference_name="System.Title", display_name="Title", required=True),
        FieldDefinition(
            reference_name="Microsoft.VSTS.TCM.Steps",
            display_name="Steps",
            value_type=ValueType.TEXT,
        ),
        FieldDefinition(
            reference_name="Microsoft.VSTS.Common.Priority",
            display_name="Priority",
            value_type=ValueType.NUMBER,
        ),
    ]


@pytest.fixture
def custom_catalog(basic_catalog) -> list[FieldDefinition]:
    """Catalog with project-specific custom fields."""
    return basic_catalog + [
        FieldDefinition(reference_name="Custom.RiskLevel", display_name="Risk Level"),
        FieldDefinition(reference_name="Custom.ReviewDate", display_name="Review Date",
                        value_type=ValueType.DATETIME),
        FieldDefinition(reference_name="Custom.ReviewDue", display_name="Review Due"),
        FieldDefinition(reference_name="Microsoft.VSTS.Common.Severity", display_name="Severity"),
    ]


@pytest.fixture
def mock_fetcher(custom_catalog) -> AsyncMock:
    """Create a mocked catalog fetcher."""
    return AsyncMock(return_value=custom_catalog)
