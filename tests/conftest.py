"""Pytest configuration and shared fixtures."""

import json
import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_document():
    """A small Q&A document: one root category with nested questions."""
    return {
        "Help": {
            "Delivery": {
                "How long does delivery take?": "Two to three working days.",
                "Do you ship abroad?": "Only within the EU.",
            },
            "Payment": {
                "Which cards do you accept?": "Visa and Mastercard.",
                "Refunds": {
                    "How do I get a refund?": "Write to support within 14 days.",
                },
            },
            "What are your opening hours?": "Nine to six on weekdays.",
        }
    }


@pytest.fixture
def sample_document_file(temp_dir, sample_document):
    """The sample document written to a JSON file."""
    path = temp_dir / "db.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


@pytest.fixture
def sample_tree(sample_document):
    """The sample document built into a QATree."""
    from qnatree.builder import TreeBuilder

    return TreeBuilder().build(sample_document)


@pytest.fixture
def navigator(sample_tree):
    """Navigator over the sample tree."""
    from qnatree.navigator import Navigator

    return Navigator(sample_tree)


@pytest.fixture
def question_store():
    """Empty in-memory question store."""
    from qnatree.storage import InMemoryQuestionStore

    return InMemoryQuestionStore()
