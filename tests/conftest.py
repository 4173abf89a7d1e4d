"""Shared test fixtures and configuration."""

import pytest

from docs_knowledge_search.config import Settings


# Every Settings field is reachable through an env var of the same name;
# clear them so a developer shell cannot change test outcomes.
SETTINGS_ENV = [name.upper() for name in Settings.model_fields]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove search configuration from the environment before each test."""
    for key in SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings():
    """Default settings that ignore any .env file in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture
def scenario_knowledge_base():
    """Three naming entries: two mention microflows, one does not."""
    return {
        "conventions": {
            "categories": {
                "naming": [
                    {"title": "Microflow naming conventions for actions"},
                    {"title": "Domain model entity naming"},
                    {"title": "Nanoflow vs microflow performance"},
                ]
            }
        }
    }


@pytest.fixture
def sample_knowledge_base():
    """A small mixed corpus with categories, flat items and metadata ids."""
    return {
        "best-practices": {
            "version": "1.0",
            "categories": {
                "microflows": [
                    {
                        "practice": "Commit objects in batches",
                        "description": "Avoid committing inside a loop; collect objects in a list and commit once.",
                        "_metadata": {"id": "bp-commit"},
                    },
                    {
                        "practice": "Error handling in microflows",
                        "description": "Use custom error handlers and roll back on failure.",
                    },
                ],
                "security": [
                    {
                        "rule": "Entity access rules",
                        "description": "Every persistent entity needs access rules per module role.",
                    },
                ],
            },
        },
        "sdk-patterns": {
            "items": [
                {
                    "pattern": {"name": "Create an entity with the Model SDK"},
                    "code": "domainModel.entities.push(entity)",
                },
            ]
        },
    }
