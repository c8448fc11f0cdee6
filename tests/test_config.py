"""
Tests for settings loading
"""

from seatplan.core.config import Settings

def test_env_file_overrides_defaults(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("AUTOSAVE_QUIET_PERIOD=5\nALLOW_PENDING_ASSIGNMENT=false\n")

    config = Settings(_env_file=str(env_file))

    assert config.AUTOSAVE_QUIET_PERIOD == 5.0
    assert config.ALLOW_PENDING_ASSIGNMENT is False
    assert config.DEFAULT_TABLE_CAPACITY == 8

def test_env_file_is_the_default_source():
    assert Settings.model_config["env_file"] == ".env"
