"""Deployment parameter resolution for contract-deployer."""

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence

from .constants import HEX_PREFIX, NONE_SENTINEL
from .exceptions import ConfigMalformedError, InvalidAmountError
from .types import USE_DEFAULT, ContractSpec, DeploymentConfig, EffectiveParams, Setting


def resolve_setting(override: Setting, default: Setting) -> Setting:
    """
    Pick a contract-level setting over the configuration default.

    Args:
        override: Contract-level setting, possibly USE_DEFAULT
        default: Configuration-level setting, possibly USE_DEFAULT

    Returns:
        override unless it is USE_DEFAULT, else default
    """
    return default if override is USE_DEFAULT else override


def parse_amount(raw: Any, field: str) -> Optional[int]:
    """
    Convert a gas or value setting to a non-negative integer.

    Accepts integers, integral floats, decimal strings (including
    scientific notation such as "1e18") and 0x-prefixed hex strings.

    Args:
        raw: Setting value, or USE_DEFAULT when nothing was configured
        field: Setting name, for error messages

    Returns:
        Integer amount, or None if the setting is USE_DEFAULT

    Raises:
        InvalidAmountError: If raw is not a non-negative integer amount
    """
    if raw is USE_DEFAULT:
        return None

    # bool is an int subclass; true/false is never a meaningful amount
    if isinstance(raw, bool):
        raise InvalidAmountError(f"Invalid {field}: {raw!r}")

    if isinstance(raw, int):
        amount = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise InvalidAmountError(f"Invalid {field}: {raw!r} is not a whole number")
        amount = int(raw)
    elif isinstance(raw, str):
        amount = _parse_amount_string(raw.strip(), field)
    else:
        raise InvalidAmountError(f"Invalid {field}: {raw!r}")

    if amount < 0:
        raise InvalidAmountError(f"Invalid {field}: {raw!r} is negative")
    return amount


def _parse_amount_string(text: str, field: str) -> int:
    if text.lower().startswith(HEX_PREFIX):
        try:
            return int(text, 16)
        except ValueError as e:
            raise InvalidAmountError(f"Invalid {field}: {text!r}") from e

    try:
        number = Decimal(text)
    except InvalidOperation as e:
        raise InvalidAmountError(f"Invalid {field}: {text!r}") from e

    if not number.is_finite() or number != number.to_integral_value():
        raise InvalidAmountError(f"Invalid {field}: {text!r} is not a whole number")
    return int(number)


def resolve_sender(config: DeploymentConfig, spec: ContractSpec, accounts: Sequence[str] = ()) -> str:
    """
    Pick the sending account.

    Contract sender, then configuration sender, then the node's first
    account. `accounts` is only indexed when neither is configured.

    Raises:
        ConfigMalformedError: If no sender is configured and the node has no accounts
    """
    sender = resolve_setting(spec.sender, config.sender)
    if sender is not USE_DEFAULT:
        return str(sender)

    if len(accounts) == 0:
        raise ConfigMalformedError(
            f"No sender configured for contract '{spec.name}' and the node has no accounts"
        )
    return accounts[0]


def resolve_params(
    config: DeploymentConfig, spec: ContractSpec, accounts: Sequence[str] = ()
) -> EffectiveParams:
    """
    Compute the effective sender, gas and value for one contract.

    Args:
        config: Enclosing configuration supplying the defaults
        spec: Contract being deployed
        accounts: Node accounts, used only when no sender is configured

    Returns:
        EffectiveParams; value is only carried for payable contracts

    Raises:
        InvalidAmountError: If gas or value is malformed
        ConfigMalformedError: If no sender can be determined
    """
    sender = resolve_sender(config, spec, accounts)
    gas = parse_amount(resolve_setting(spec.gas, config.gas), "gas")

    value = None
    if spec.payable:
        value = parse_amount(resolve_setting(spec.value, config.value), "value")

    return EffectiveParams(sender=sender, gas=gas, value=value, payable=spec.payable)


def _is_none(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and raw.strip().lower() == NONE_SENTINEL)


def parse_param_values(raw: Any, contract_name: str) -> Dict[str, Any]:
    """
    Interpret a contract's param_Values descriptor.

    Returns:
        Mapping of parameter name to type; empty for "none" or a missing key.
        A list is keyed by position.

    Raises:
        ConfigMalformedError: If the descriptor is any other kind of value
    """
    if _is_none(raw):
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, list):
        return {str(i): v for i, v in enumerate(raw)}
    raise ConfigMalformedError(
        f"param_Values of contract '{contract_name}' must be an object or \"none\""
    )


def parse_values(raw: Any, contract_name: str) -> List[Any]:
    """
    Interpret a contract's constructor values.

    Raises:
        ConfigMalformedError: If values is neither a list nor "none"
    """
    if _is_none(raw):
        return []
    if isinstance(raw, list):
        return list(raw)
    raise ConfigMalformedError(f"values of contract '{contract_name}' must be a list")


def argument_count(spec: ContractSpec) -> int:
    """Constructor argument count, as declared by param_Values."""
    return len(parse_param_values(spec.param_values, spec.name))


def constructor_args(spec: ContractSpec) -> List[Any]:
    """
    Positional constructor arguments for a contract.

    An empty param_Values selects the no-argument path regardless of what
    `values` holds.

    Raises:
        ConfigMalformedError: If param_Values or values has the wrong shape
    """
    if argument_count(spec) == 0:
        return []
    return parse_values(spec.values, spec.name)
