from ..deployments.deployed import get_deployed_contract, select_deployed_contract
from ..utils.standards import ERC721_ABI
from .common import deployed_contract_options, force_non_interactive, task


@task("erc721:get-metadata", "Gets the metadata of an ERC721 contract",
      failure_message="Could not get the metadata. This might happen because of many reasons, e.g. "
                      "the contract does not implement ERC721 properly, or you have a deployment error "
                      "(e.g. an invalid address or corrupted deployment files). Check the error for "
                      "more details:")
@deployed_contract_options
@force_non_interactive
def get_metadata(context, args):
    contract_id = select_deployed_contract(
        context, args.contract_id, args.deployment_id, args.force_non_interactive
    )
    contract = get_deployed_contract(context, args.deployment_id, contract_id, ERC721_ABI)
    print(f"Name: {contract.functions.name().call()}")
    print(f"Symbol: {contract.functions.symbol().call()}")
