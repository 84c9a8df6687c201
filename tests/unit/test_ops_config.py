import pytest

from lenscart.app_shell.config import ConfigurationError, validate_ops_rules
from lenscart.rules.loader import load_rules


@pytest.fixture
def rules(rules_path):
    return load_rules(rules_path)


def test_creates_data_dir(rules, tmp_path) -> None:
    data_dir = tmp_path / "nested" / "data"
    validate_ops_rules(rules, data_dir)
    assert data_dir.is_dir()


def test_missing_env(rules, tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("LENSCART_JWT_SECRET", raising=False)
    strict = rules.model_copy(
        update={"ops": rules.ops.model_copy(update={"required_env": ["LENSCART_JWT_SECRET"]})}
    )
    with pytest.raises(ConfigurationError, match="LENSCART_JWT_SECRET"):
        validate_ops_rules(strict, tmp_path)


def test_data_dir_is_a_file(rules, tmp_path) -> None:
    blocker = tmp_path / "data"
    blocker.write_text("not a directory")
    with pytest.raises(ConfigurationError):
        validate_ops_rules(rules, blocker)
