import pytest
from pydantic import ValidationError

from modelbridge.models.bridge_config import BridgeConfig


def test_defaults():
    config = BridgeConfig()

    assert config.reserved_type_key == "__typename"
    assert config.id_key == "id"
    assert config.placeholder_keys == ("associatedField", "associatedId")
    assert config.log_level == "INFO"


def test_log_level_is_case_insensitive():
    assert BridgeConfig(log_level="debug").log_level == "DEBUG"


def test_invalid_log_level_is_rejected():
    with pytest.raises(ValidationError) as exc:
        BridgeConfig(log_level="chatty")

    assert "log_level" in str(exc.value)


def test_empty_reserved_key_is_rejected():
    with pytest.raises(ValidationError, match="non-empty"):
        BridgeConfig(id_key="")


def test_from_env_reads_prefixed_variables():
    config = BridgeConfig.from_env(
        {
            "MODELBRIDGE_RESERVED_TYPE_KEY": "_kind",
            "MODELBRIDGE_LOG_LEVEL": "warning",
            "MODELBRIDGE_PLACEHOLDER_KEYS": "field, owner",
            "UNRELATED": "x",
        }
    )

    assert config.reserved_type_key == "_kind"
    assert config.id_key == "id"
    assert config.log_level == "WARNING"
    assert config.placeholder_keys == ("field", "owner")


def test_from_env_rejects_wrong_placeholder_arity():
    with pytest.raises(ValidationError):
        BridgeConfig.from_env({"MODELBRIDGE_PLACEHOLDER_KEYS": "only_one"})


def test_from_env_uses_process_environment(monkeypatch):
    monkeypatch.setenv("MODELBRIDGE_ID_KEY", "uuid")

    assert BridgeConfig.from_env().id_key == "uuid"
