# ===============================================
# tests/test_settings.py
# Settings validation.
# ===============================================

import pytest
from pydantic import ValidationError

from fortec_gateway.settings import Settings


def test_log_level_is_normalised():
    assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError):
        Settings(LOG_LEVEL="LOUD")
