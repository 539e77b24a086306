"""Pytest configuration shared by all test suites"""

import logging
import os
import sys
from pathlib import Path

import pytest

# Add project root to path for docseek imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# docseek.main configures logging on import; keep tests from writing log files
os.environ.setdefault("LOG_FILE", "")


@pytest.fixture
def gl_corpus():
    """Small corpus in the shape of the docs.gl reference pages"""
    return {
        "docs/glBindTexture.xhtml": "glBindTexture binds a named texture to a texturing target",
        "docs/glGenTextures.xhtml": "glGenTextures generates texture names",
        "docs/glClear.xhtml": "glClear clears buffers to preset values",
        "docs/glViewport.xhtml": "glViewport sets the viewport",
    }


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Drop handlers installed by setup_logging() during a test"""
    from docseek.logging_config import remove_handlers

    level = logging.getLogger().level
    yield
    remove_handlers()
    logging.getLogger().setLevel(level)
