"""
ERC1155 helpers for contracts in the deployment journal
"""

from ..deployments.deployed import get_deployed_contract, select_deployed_contract
from ..utils.accounts import parse_account
from ..utils.amounts import TOKEN_ID_PATTERN, parse_token_id
from ..utils.input import given_or_input_until
from ..utils.standards import ERC1155_ABI
from ..utils.transactions import transact
from .common import argument, deployed_contract_options, force_non_interactive, task
from .erc20 import input_address, input_amount

FAILURE_MESSAGE = (
    "This might happen because of many reasons, e.g. the contract does not implement ERC1155 "
    "properly, or you have a deployment error (e.g. an invalid address or corrupted deployment "
    "files). Check the error for more details:"
)
TOKEN_ID_HELP = "The token id (a positive base-10 or base-16 integer)"


def erc1155_contract(context, args):
    contract_id = select_deployed_contract(
        context, args.contract_id, args.deployment_id, args.force_non_interactive
    )
    return get_deployed_contract(context, args.deployment_id, contract_id, ERC1155_ABI)


def input_token_id(given, force_non_interactive) -> int:
    return parse_token_id(given_or_input_until(
        given, "0x0", "Token (e.g. 0, 123 or 0x4fa):", lambda v: bool(TOKEN_ID_PATTERN.match(v)),
        "Invalid token id", force_non_interactive
    ))


@task("erc1155:get-balance", "Gets the ERC1155 balance of an account and a token",
      failure_message="Could not get the balance for the given account and token. " + FAILURE_MESSAGE)
@argument("--address", help="The index (0 to number of accounts - 1), or address, of the account")
@argument("--token-id", help=TOKEN_ID_HELP)
@deployed_contract_options
@force_non_interactive
def get_balance(context, args):
    contract = erc1155_contract(context, args)
    address = input_address(context, args.address, "Insert checksum address or account index:",
                            args.force_non_interactive)
    token_id = input_token_id(args.token_id, args.force_non_interactive)
    balance = contract.functions.balanceOf(address, token_id).call()
    print(f"The balance for {address} is: {balance}")


@task("erc1155:get-token-metadata", "Gets the metadata URI of an ERC1155 token",
      failure_message="Could not get the metadata for the given token. " + FAILURE_MESSAGE)
@argument("--token-id", help=TOKEN_ID_HELP)
@deployed_contract_options
@force_non_interactive
def get_token_metadata(context, args):
    contract = erc1155_contract(context, args)
    token_id = input_token_id(args.token_id, args.force_non_interactive)
    print(f"Metadata: {contract.functions.uri(token_id).call()}")


@task("erc1155:mint", "Mints a given amount of a given token to a given address",
      failure_message="Could not mint the tokens. " + FAILURE_MESSAGE)
@argument("--token-id", help=TOKEN_ID_HELP)
@argument("--amount", help="The amount to mint, e.g. 1eth, 2.5eth or 3000000000000000000")
@argument("--to-address", help="The index, or address, of the account to mint tokens to")
@argument("--using-account", help="The index of the account to execute the mint with")
@deployed_contract_options
@force_non_interactive
def mint(context, args):
    contract = erc1155_contract(context, args)
    token_id = input_token_id(args.token_id, args.force_non_interactive)
    amount = input_amount(args.amount, args.force_non_interactive)
    signer = parse_account(args.using_account or "0", context.get_signers())
    to_address = input_address(context, args.to_address, "Insert target checksum address or account index:",
                               args.force_non_interactive)

    transact(context.get_web3(), signer, contract.functions.mint(to_address, token_id, amount, b""),
             context.settings.gas_limit)
    print(f"Minted to {to_address} an amount of {amount} of token {token_id} successfully.")


@task("erc1155:transfer", "Transfers a given amount of a given token from the chosen account to a given address",
      failure_message="Could not transfer the tokens. " + FAILURE_MESSAGE)
@argument("--token-id", help=TOKEN_ID_HELP)
@argument("--amount", help="The amount to send, e.g. 1eth, 2.5eth or 3000000000000000000")
@argument("--to-address", help="The index, or address, of the account to send tokens to")
@argument("--using-account", help="The index of the account to send tokens from")
@deployed_contract_options
@force_non_interactive
def transfer(context, args):
    contract = erc1155_contract(context, args)
    token_id = input_token_id(args.token_id, args.force_non_interactive)
    amount = input_amount(args.amount, args.force_non_interactive)
    signer = parse_account(args.using_account or "0", context.get_signers())
    to_address = input_address(context, args.to_address, "Insert target checksum address or account index:",
                               args.force_non_interactive)

    function = contract.functions.safeTransferFrom(signer.address, to_address, token_id, amount, b"")
    transact(context.get_web3(), signer, function, context.settings.gas_limit)
    print(f"Transferred to {to_address} an amount of {amount} of token {token_id} successfully.")
