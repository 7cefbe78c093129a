"""
Minimal ABIs of the token standards the token tasks talk to

Used when the deployment journal holds no ABI for a contract.
"""


def _function(name, inputs, outputs, mutability="view"):
    return {
        'type': 'function',
        'name': name,
        'stateMutability': mutability,
        'inputs': [{'name': n, 'type': t} for n, t in inputs],
        'outputs': [{'name': '', 'type': t} for t in outputs],
    }


OWNABLE_ABI = [
    _function('owner', [], ['address']),
    _function('transferOwnership', [('newOwner', 'address')], [], 'nonpayable'),
]

ERC20_ABI = [
    _function('name', [], ['string']),
    _function('symbol', [], ['string']),
    _function('decimals', [], ['uint8']),
    _function('totalSupply', [], ['uint256']),
    _function('balanceOf', [('account', 'address')], ['uint256']),
    _function('transfer', [('to', 'address'), ('value', 'uint256')], ['bool'], 'nonpayable'),
    _function('mint', [('to', 'address'), ('amount', 'uint256')], [], 'nonpayable'),
]

ERC721_ABI = [
    _function('name', [], ['string']),
    _function('symbol', [], ['string']),
    _function('balanceOf', [('owner', 'address')], ['uint256']),
    _function('ownerOf', [('tokenId', 'uint256')], ['address']),
]

ERC1155_ABI = [
    _function('balanceOf', [('account', 'address'), ('id', 'uint256')], ['uint256']),
    _function('uri', [('id', 'uint256')], ['string']),
    _function('mint', [('to', 'address'), ('id', 'uint256'), ('amount', 'uint256'), ('data', 'bytes')],
              [], 'nonpayable'),
    _function('safeTransferFrom', [('from', 'address'), ('to', 'address'), ('id', 'uint256'),
                                   ('value', 'uint256'), ('data', 'bytes')], [], 'nonpayable'),
]
