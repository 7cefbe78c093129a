"""
ERC20 helpers for contracts in the deployment journal
"""

from ..deployments.deployed import get_deployed_contract, select_deployed_contract
from ..utils.accounts import is_index_or_address, parse_account, parse_address
from ..utils.amounts import is_amount, parse_amount
from ..utils.input import given_or_input_until
from ..utils.standards import ERC20_ABI
from ..utils.transactions import transact
from .common import argument, deployed_contract_options, force_non_interactive, task

FAILURE_CAUSES = (
    "the contract does not implement ERC20 properly, or you have a deployment error "
    "(e.g. an invalid address or corrupted deployment files). Check the error for more details:"
)


def erc20_contract(context, args):
    contract_id = select_deployed_contract(
        context, args.contract_id, args.deployment_id, args.force_non_interactive
    )
    return get_deployed_contract(context, args.deployment_id, contract_id, ERC20_ABI)


def input_address(context, given, prompt, force_non_interactive):
    return parse_address(given_or_input_until(
        given, "0", prompt, is_index_or_address,
        "The value is not a valid address or account index", force_non_interactive
    ), context.get_signers())


def input_amount(given, force_non_interactive) -> int:
    return parse_amount(given_or_input_until(
        given, "1eth", "Insert amount (e.g. 1500000000000000000 or 1.5eth):", is_amount,
        "The given amount is not valid", force_non_interactive
    ))


@task("erc20:get-metadata", "Gets the metadata of an ERC20 contract",
      failure_message="Could not get the metadata. This might happen because of many reasons, e.g. "
                      + FAILURE_CAUSES)
@deployed_contract_options
@force_non_interactive
def get_metadata(context, args):
    contract = erc20_contract(context, args)
    print(f"Name: {contract.functions.name().call()}")
    print(f"Symbol: {contract.functions.symbol().call()}")
    print(f"Decimals: {contract.functions.decimals().call()}")
    print(f"Total Supply: {contract.functions.totalSupply().call()}")


@task("erc20:get-balance", "Gets the ERC20 balance of an account",
      failure_message="Could not get the balance for the given account. This might happen because "
                      "of many reasons, e.g. " + FAILURE_CAUSES)
@argument("--address", help="The index (0 to number of accounts - 1), or address, of the account")
@deployed_contract_options
@force_non_interactive
def get_balance(context, args):
    contract = erc20_contract(context, args)
    address = input_address(context, args.address, "Insert checksum address or account index:",
                            args.force_non_interactive)
    balance = contract.functions.balanceOf(address).call()
    print(f"The balance for {address} is: {balance}")


@task("erc20:transfer", "Transfers an amount of tokens to another account or address",
      failure_message="Could not transfer the tokens. This might happen because of many reasons, e.g. "
                      + FAILURE_CAUSES)
@argument("--amount", help="The amount to send, e.g. 1eth, 2.5eth or 3000000000000000000")
@argument("--to-address", help="The index, or address, of the account to send tokens to")
@argument("--using-account", help="The index of the account to send tokens from")
@deployed_contract_options
@force_non_interactive
def transfer(context, args):
    contract = erc20_contract(context, args)
    signer = parse_account(args.using_account or "0", context.get_signers())
    to_address = input_address(context, args.to_address, "Insert target checksum address or account index:",
                               args.force_non_interactive)
    amount = input_amount(args.amount, args.force_non_interactive)

    transact(context.get_web3(), signer, contract.functions.transfer(to_address, amount),
             context.settings.gas_limit)
    print(f"Transferred from {signer.address} to {to_address} a token amount of {amount} wei successfully.")


@task("erc20:mint", "Mints an amount of tokens to another account or address",
      failure_message="Could not mint the tokens. This might happen because of many reasons, e.g. "
                      "the contract does not define mint(address, uint256) properly (or you don't "
                      "meet the conditions to call it), or " + FAILURE_CAUSES)
@argument("--amount", help="The amount to mint, e.g. 1eth, 2.5eth or 3000000000000000000")
@argument("--to-address", help="The index, or address, of the account to mint tokens to")
@argument("--using-account", help="The index of the account to mint tokens with")
@deployed_contract_options
@force_non_interactive
def mint(context, args):
    contract = erc20_contract(context, args)
    signer = parse_account(args.using_account or "0", context.get_signers())
    to_address = input_address(context, args.to_address, "Insert target checksum address or account index:",
                               args.force_non_interactive)
    amount = input_amount(args.amount, args.force_non_interactive)

    transact(context.get_web3(), signer, contract.functions.mint(to_address, amount),
             context.settings.gas_limit)
    print(f"Minted to {to_address} a token amount of {amount} successfully.")
