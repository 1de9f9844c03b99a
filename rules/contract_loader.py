"""
Generation Contract Loader
Reads generation_contracts.yaml once and serves contracts by field key.
"""
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from logger_config import logger
from src.models import GenerationContract
from src.settings import AppSettings


DEFAULT_CONTRACTS_PATH = Path(__file__).parent / "generation_contracts.yaml"


class ContractNotFoundError(KeyError):
    """Raised when no contract is registered for a field key."""

    def __init__(self, field_key: str):
        super().__init__(field_key)
        self.field_key = field_key

    def __str__(self) -> str:
        return f"No contract found for field key: {self.field_key}"


def _resolve_contracts_path(path: Optional[str] = None) -> Path:
    if path:
        return Path(path)
    configured = AppSettings.load().contracts_path
    return Path(configured) if configured else DEFAULT_CONTRACTS_PATH


@lru_cache(maxsize=4)
def _load_from(contracts_path: Path) -> Dict[str, GenerationContract]:
    if not contracts_path.exists():
        logger.error(f"Generation contracts not found at {contracts_path}")
        raise FileNotFoundError(f"Generation contracts not found: {contracts_path}")

    try:
        with open(contracts_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("Root YAML must be a mapping.")
        raw_contracts = data.get("contracts", data)
        if not isinstance(raw_contracts, dict):
            raise ValueError("'contracts' must map field keys to contract definitions.")

        contracts = {}
        for field_key, raw in raw_contracts.items():
            payload = dict(raw or {})
            payload.setdefault("id", field_key)
            contracts[field_key] = GenerationContract.model_validate(payload)
    except (yaml.YAMLError, ValidationError, ValueError) as e:
        logger.error(f"Failed to load generation contracts from {contracts_path}: {e}", exc_info=True)
        raise ValueError(f"Invalid generation contracts file {contracts_path}: {e}") from e

    logger.info("Generation contracts loaded successfully")
    logger.info(f"  - Contracts: {len(contracts)}")
    logger.info(f"  - Field keys: {', '.join(contracts)}")
    return contracts


def load_generation_contracts(path: Optional[str] = None) -> Dict[str, GenerationContract]:
    """
    Load all generation contracts.

    Args:
        path: Optional YAML path. Defaults to GENERATION_CONTRACTS_PATH or the
            bundled rules/generation_contracts.yaml.

    Returns:
        Mapping of field key to GenerationContract. Cached per path.
    """
    return _load_from(_resolve_contracts_path(path).resolve())


def get_contract(field_key: str, path: Optional[str] = None) -> GenerationContract:
    contracts = load_generation_contracts(path)
    contract = contracts.get(field_key)
    if contract is None:
        raise ContractNotFoundError(field_key)
    return contract


def get_all_field_keys(path: Optional[str] = None) -> List[str]:
    return list(load_generation_contracts(path).keys())


def has_contract(field_key: str, path: Optional[str] = None) -> bool:
    return field_key in load_generation_contracts(path)


def clear_contract_cache() -> None:
    _load_from.cache_clear()
