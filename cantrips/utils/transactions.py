"""
Transaction submission through web3
"""

import logging
from typing import Any, Dict, Optional
from web3 import Web3

from .accounts import Signer

logger = logging.getLogger(__name__)

RECEIPT_TIMEOUT = 300


def build_params(w3: Web3, signer: Signer, gas_limit: int, value: int = 0) -> Dict[str, Any]:
    params = {
        'from': signer.address,
        'nonce': w3.eth.get_transaction_count(signer.address),
        'gas': gas_limit,
        'gasPrice': w3.eth.gas_price,
    }
    if value:
        params['value'] = value
    return params


def send_transaction(w3: Web3, signer: Signer, tx: Dict[str, Any]):
    """
    Signs (or lets the node sign) and sends a transaction, then waits for it

    Returns:
        The transaction receipt
    """
    if signer.account is not None:
        signed_tx = signer.account.sign_transaction(tx)
        tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
    else:
        tx_hash = w3.eth.send_transaction(tx)

    logger.info(f"Transaction sent: {tx_hash.hex()}")
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=RECEIPT_TIMEOUT)
    if receipt['status'] != 1:
        raise RuntimeError(f"Transaction {tx_hash.hex()} reverted")

    logger.info(f"Transaction confirmed in block {receipt['blockNumber']}")
    return receipt


def transact(w3: Web3, signer: Signer, function: Any, gas_limit: int, value: int = 0):
    """Builds and sends a contract function call"""
    tx = function.build_transaction(build_params(w3, signer, gas_limit, value))
    return send_transaction(w3, signer, tx)


def transfer_value(w3: Web3, signer: Signer, to_address: str, value: int, gas_limit: Optional[int] = None):
    """Sends native coin to an address"""
    tx = build_params(w3, signer, gas_limit or 21000, value)
    tx['to'] = to_address
    tx['value'] = value
    if signer.account is not None:
        tx['chainId'] = w3.eth.chain_id
    return send_transaction(w3, signer, tx)
