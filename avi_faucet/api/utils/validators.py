"""
Input validation utilities for funding requests.
"""

import re
from typing import Optional, Tuple

from avi_faucet.core.service.funding.endpoints import (
    EVM_FAMILY,
    SOLANA_FAMILY,
    relay_network_family,
)

BASE58_PATTERN = re.compile(r'^[1-9A-HJ-NP-Za-km-z]+$')
EVM_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')

SOLANA_ADDRESS_MIN_LENGTH = 32
SOLANA_ADDRESS_MAX_LENGTH = 44


class AddressValidator:
    """Validators for blockchain addresses. Format only, no checksums."""

    @staticmethod
    def validate_solana_address(address: Optional[str]) -> bool:
        """Validate base58 (Solana-style) address format."""
        if not address:
            return False

        if len(address) < SOLANA_ADDRESS_MIN_LENGTH or len(address) > SOLANA_ADDRESS_MAX_LENGTH:
            return False

        return bool(BASE58_PATTERN.fullmatch(address))

    @staticmethod
    def validate_evm_address(address: Optional[str]) -> bool:
        """Validate EVM address format: 0x followed by exactly 40 hex characters."""
        if not address:
            return False
        return bool(EVM_PATTERN.fullmatch(address))

    @staticmethod
    def validate_address_for_network(address: Optional[str], network: str) -> Tuple[bool, str]:
        """
        Validate an address against the chain family of a relay network.
        Returns: (is_valid, error_message)
        """
        family = relay_network_family(network)

        if family == SOLANA_FAMILY:
            if AddressValidator.validate_solana_address(address):
                return True, ""
            return False, "Invalid Solana address"

        if family == EVM_FAMILY:
            if AddressValidator.validate_evm_address(address):
                return True, ""
            return False, "Invalid EVM address"

        return False, f"Unsupported network: {network}"
