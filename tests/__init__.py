"""Test suite package marker."""

import pytest

# Assertion helpers must be rewritten before the test modules import them.
pytest.register_assert_rewrite("tests.assertions")
