from ..deployments.deployed import get_deployed_contract
from ..utils.accounts import parse_account, parse_address
from ..utils.standards import OWNABLE_ABI
from ..utils.transactions import transact
from .common import CONTRACT_ID_HELP, DEPLOYMENT_ID_HELP, argument, task


@task("transfer-ownership", "Transfers the ownership of a deployed contract to another account or address",
      failure_message="Could not transfer the contract's ownership. This might happen because of many "
                      "reasons, e.g. the contract does not implement transferOwnership(address) like "
                      "an OpenZeppelin's Ownable one does, or you have a transaction error (e.g. not "
                      "using the owner account in --from-account, or not having such account among "
                      "your accounts). Check the error for more details:")
@argument("contract_id", help=CONTRACT_ID_HELP)
@argument("to_account", help="The index (0 to number of accounts - 1), or address, of the new owner")
@argument("--deployment-id", help=DEPLOYMENT_ID_HELP)
@argument("--from-account", help="The index (0 to number of accounts - 1) of the current owner account")
def transfer_ownership(context, args):
    signers = context.get_signers()
    signer = parse_account(args.from_account or "0", signers)
    to_address = parse_address(args.to_account, signers)
    contract = get_deployed_contract(context, args.deployment_id, args.contract_id, OWNABLE_ABI)

    transact(context.get_web3(), signer, contract.functions.transferOwnership(to_address),
             context.settings.gas_limit)
    print(f"The contract was successfully transferred to the new address: {to_address}")
