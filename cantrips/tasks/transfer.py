from ..utils.accounts import parse_account, parse_address
from ..utils.amounts import parse_amount
from ..utils.transactions import transfer_value
from .common import argument, task


@task("transfer", "Sends native coin from an account (by index) to another account (by index or address)",
      failure_message="Could not transfer the amount:")
@argument("--from-account", required=True, help="The index (0 to number of accounts - 1) of the account to send from")
@argument("--amount", required=True, help="The amount to send, e.g. 1eth, 2.5eth or 3000000000000000000")
@argument("--to-account", required=True, help="The index, or address, of the account to send to")
def transfer(context, args):
    signers = context.get_signers()
    signer = parse_account(args.from_account, signers)
    to_address = parse_address(args.to_account, signers)
    amount = parse_amount(args.amount)

    transfer_value(context.get_web3(), signer, to_address, amount)
    print(f"Transferred from {signer.address} to {to_address} an amount of {amount} wei successfully.")
