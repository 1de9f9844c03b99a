import pytest

from rules.contract_loader import (
    ContractNotFoundError,
    get_all_field_keys,
    get_contract,
    has_contract,
    load_generation_contracts,
)


@pytest.fixture(autouse=True)
def _bundled_contracts(monkeypatch):
    # Always read the bundled YAML unless a test passes a path
    monkeypatch.delenv("GENERATION_CONTRACTS_PATH", raising=False)
    monkeypatch.delenv("APP_CONFIG_PATH", raising=False)


def test_bundled_registry_has_every_field():
    assert get_all_field_keys() == ["valueProp", "positioning", "audience", "objectives", "constraints", "bets"]


def test_value_prop_contract():
    contract = get_contract("valueProp")
    assert contract.id == "valueProp"
    assert contract.output_spec.max_words == 50
    assert contract.output_spec.variants == 3
    assert contract.output_spec.format == "paragraph"
    assert contract.require_business_definition is True
    assert contract.allow_gap_fallback is True
    assert "empower" in contract.exclusions
    assert "enterprise-grade" in contract.exclusions


def test_contracts_without_exclusions_default_to_empty():
    assert get_contract("objectives").exclusions == []
    assert get_contract("constraints").output_spec.variants == 2
    assert get_contract("audience").output_spec.format == "bullets"


def test_unknown_contract_raises():
    assert has_contract("valueProp") is True
    assert has_contract("tagline") is False
    with pytest.raises(ContractNotFoundError) as excinfo:
        get_contract("tagline")
    assert isinstance(excinfo.value, KeyError)
    assert str(excinfo.value) == "No contract found for field key: tagline"


def test_custom_contracts_file(tmp_path):
    path = tmp_path / "contracts.yaml"
    path.write_text(
        "contracts:\n"
        "  tagline:\n"
        "    exclusions: [synergy]\n"
        "    outputSpec: {variants: 5, format: paragraph, maxWords: 12}\n",
        encoding="utf-8",
    )
    contracts = load_generation_contracts(str(path))
    assert list(contracts) == ["tagline"]
    assert contracts["tagline"].id == "tagline"
    assert contracts["tagline"].output_spec.max_words == 12


def test_env_var_points_at_contracts_file(tmp_path, monkeypatch):
    path = tmp_path / "env_contracts.yaml"
    path.write_text("contracts:\n  slogan:\n    exclusions: []\n", encoding="utf-8")
    monkeypatch.setenv("GENERATION_CONTRACTS_PATH", str(path))
    assert get_all_field_keys() == ["slogan"]


def test_missing_file_raises(tmp_path, caplog):
    with caplog.at_level("ERROR", logger="variant_guard"):
        with pytest.raises(FileNotFoundError):
            load_generation_contracts(str(tmp_path / "nope.yaml"))
    assert any("not found" in rec.getMessage() for rec in caplog.records)


def test_malformed_file_raises_value_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("contracts:\n  broken:\n    outputSpec: {maxWords: lots}\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_generation_contracts(str(path))
