"""
Digital asset operations for the Layer1 API

Address creation, transaction listing, asset pool balance and transaction
requests. Every operation validates its parameters before any network call
and maps to exactly one signed request.
"""

import logging
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Type
from urllib.parse import quote

from .config import Layer1Config
from .exceptions import ValidationError
from .http_client import AuthenticatedClient

logger = logging.getLogger(__name__)

ADDRESSES_ENDPOINT = '/digital/v1/addresses'
TRANSACTIONS_ENDPOINT = '/digital/v1/transactions'
ASSET_POOLS_ENDPOINT = '/digital/v1/asset-pools'
TRANSACTION_REQUESTS_ENDPOINT = '/digital/v1/transaction-requests'


class Network(str, Enum):
    """Blockchain networks supported by the API"""
    ETHEREUM = "ETHEREUM"
    BINANCE = "BINANCE"
    TRON = "TRON"
    RIPPLE = "RIPPLE"
    POLYGON = "POLYGON"
    BITCOIN = "BITCOIN"
    LITECOIN = "LITECOIN"
    DOGECOIN = "DOGECOIN"
    SOLANA = "SOLANA"


class Asset(str, Enum):
    """Assets that can be sent with a transaction request"""
    ETH = "ETH"
    USDT = "USDT"
    USDC = "USDC"
    BTC = "BTC"
    LTC = "LTC"
    DOGE = "DOGE"
    SOL = "SOL"
    BNB = "BNB"
    TRX = "TRX"
    XRP = "XRP"
    POL = "POL"


def _require_string(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{name} is required and must be a non-empty string",
            "MISSING_PARAMETER",
            {"parameter": name}
        )
    return value


def _require_enum(name: str, value: Any, enum_type: Type[Enum]) -> str:
    allowed = [member.value for member in enum_type]
    if isinstance(value, enum_type):
        return value.value
    if value not in allowed:
        raise ValidationError(
            f"{name} must be one of {', '.join(allowed)}",
            "INVALID_PARAMETER",
            {"parameter": name, "value": value, "allowed": allowed}
        )
    return value


def validate_amount(amount: Any) -> str:
    """
    Validate a transfer amount.

    Amounts travel as decimal strings to preserve precision; the string is
    returned unchanged.

    Args:
        amount: Amount as a decimal string

    Returns:
        str: The same amount string

    Raises:
        ValidationError: If the amount is not a string holding a positive finite decimal
    """
    if not isinstance(amount, str):
        raise ValidationError(
            "amount must be a decimal string",
            "INVALID_PARAMETER",
            {"parameter": "amount", "type": type(amount).__name__}
        )

    try:
        value = Decimal(amount.strip())
    except InvalidOperation:
        raise ValidationError(
            f"amount is not a valid decimal: {amount}",
            "INVALID_PARAMETER",
            {"parameter": "amount", "value": amount}
        )

    if not value.is_finite() or value <= 0 or amount != amount.strip():
        raise ValidationError(
            f"amount must be a positive decimal: {amount}",
            "INVALID_PARAMETER",
            {"parameter": "amount", "value": amount}
        )

    return amount


class DigitalAssetService:
    """
    Layer1 digital asset operations.

    Pool-scoped operations use the asset pool from the configuration object
    the service was built with.
    """

    def __init__(self, client: AuthenticatedClient, config: Optional[Layer1Config] = None):
        self.client = client
        self.config = config or client.config

    @property
    def asset_pool_id(self) -> str:
        return self.config.asset_pool_id

    def create_address(self, network: Any, reference: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a new blockchain address in the asset pool.

        Args:
            network: Blockchain network
            reference: Caller reference for the address, e.g. "user-id-123"

        Returns:
            dict: Created address
        """
        network = _require_enum("network", network, Network)
        if reference is not None and not isinstance(reference, str):
            raise ValidationError("reference must be a string", "INVALID_PARAMETER", {"parameter": "reference"})

        body = {
            'assetPoolId': self.asset_pool_id,
            'network': network,
        }
        if reference:
            body['reference'] = reference

        logger.info(f"Creating {network} address in asset pool {self.asset_pool_id}")
        return self.client.request(ADDRESSES_ENDPOINT, 'POST', body)

    def list_transactions(self, transaction_hash: Optional[str] = None) -> Dict[str, Any]:
        """
        List transactions for the asset pool.

        Args:
            transaction_hash: Optional transaction hash filter

        Returns:
            dict: Page of transactions
        """
        if transaction_hash is not None and not isinstance(transaction_hash, str):
            raise ValidationError(
                "transactionHash must be a string",
                "INVALID_PARAMETER",
                {"parameter": "transactionHash"}
            )

        params = {
            'assetPoolId': self.asset_pool_id,
            'q': f"hash:{transaction_hash}" if transaction_hash else None,
        }

        return self.client.request(TRANSACTIONS_ENDPOINT, 'GET', query_params=params)

    def get_asset_pool_balance(self, asset_pool_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Get the balance of an asset pool.

        Args:
            asset_pool_id: Pool to query; defaults to the configured pool

        Returns:
            dict: Asset pool with balances
        """
        pool_id = asset_pool_id or self.asset_pool_id
        _require_string("assetPoolId", pool_id)

        try:
            segment = quote(pool_id, safe='')
        except UnicodeEncodeError as e:
            raise ValidationError(
                f"assetPoolId is not valid UTF-8 text: {e.reason}",
                "INVALID_PARAMETER",
                {"parameter": "assetPoolId"}
            )

        return self.client.request(f"{ASSET_POOLS_ENDPOINT}/{segment}")

    def send_transaction_request(
        self,
        to_address: str,
        amount: str,
        asset: Any,
        network: Any,
        reference: str
    ) -> Dict[str, Any]:
        """
        Create a transaction request to send funds.

        Args:
            to_address: Destination address
            amount: Amount as a decimal string
            asset: Asset to send
            network: Network to send on
            reference: Unique reference for the transaction

        Returns:
            dict: Created transaction request
        """
        to_address = _require_string("toAddress", to_address)
        amount = validate_amount(amount)
        asset = _require_enum("asset", asset, Asset)
        network = _require_enum("network", network, Network)
        reference = _require_string("reference", reference)

        body = {
            'assetPoolId': self.asset_pool_id,
            'asset': asset,
            'network': network,
            'reference': reference,
            'destinations': [
                {
                    'address': to_address,
                    'amount': amount,
                }
            ],
        }

        logger.info(f"Creating transaction request {reference}: {amount} {asset} on {network}")
        return self.client.request(TRANSACTION_REQUESTS_ENDPOINT, 'POST', body)
