"""
Verified selector catalog.

Static mapping of 4-byte selectors to signatures and effect semantics.
Built once at import and never mutated.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Optional, Tuple


class Category(str, Enum):
    APPROVAL = "APPROVAL"
    TRANSFER = "TRANSFER"
    DEX = "DEX"
    OWNERSHIP = "OWNERSHIP"
    PROXY_UPGRADE = "PROXY_UPGRADE"
    SAFE_ADMIN = "SAFE_ADMIN"
    BATCH = "BATCH"
    CONTRACT_CALL = "CONTRACT_CALL"
    UNRESOLVED = "UNRESOLVED"


@dataclass(frozen=True)
class SelectorEntry:
    selector: str
    signature: str
    function_name: str
    category: Category
    effect_template_id: str
    param_names: Tuple[str, ...]
    description: str = ""


MULTISEND_SELECTOR = "0x8d80ff0a"

_UNIV2_SWAP_TAIL = ("path", "to", "deadline")

_RAW_ENTRIES = [
    # ERC20 / ERC721 / ERC1155 permissions
    ("0x095ea7b3", "approve(address,uint256)", Category.APPROVAL, "erc20_approve",
     ("spender", "amount"), "Approve spender to transfer tokens"),
    ("0xa22cb465", "setApprovalForAll(address,bool)", Category.APPROVAL, "approval_for_all",
     ("operator", "approved"), "Approve or revoke operator for all tokens"),
    ("0xd505accf", "permit(address,address,uint256,uint256,uint8,bytes32,bytes32)", Category.APPROVAL,
     "permit", ("owner", "spender", "value", "deadline", "v", "r", "s"),
     "Gasless approval via signature (EIP-2612)"),

    # Transfers
    ("0xa9059cbb", "transfer(address,uint256)", Category.TRANSFER, "erc20_transfer",
     ("to", "amount"), "Transfer tokens to recipient"),
    ("0x23b872dd", "transferFrom(address,address,uint256)", Category.TRANSFER, "transfer_from",
     ("from", "to", "amount"), "Transfer tokens from one address to another"),
    ("0x42842e0e", "safeTransferFrom(address,address,uint256)", Category.TRANSFER, "nft_transfer",
     ("from", "to", "tokenId"), "Safely transfer an NFT"),
    ("0xb88d4fde", "safeTransferFrom(address,address,uint256,bytes)", Category.TRANSFER, "nft_transfer",
     ("from", "to", "tokenId", "data"), "Safely transfer an NFT with data"),
    ("0xf242432a", "safeTransferFrom(address,address,uint256,uint256,bytes)", Category.TRANSFER,
     "erc1155_transfer", ("from", "to", "id", "amount", "data"), "Transfer ERC1155 tokens"),
    ("0x2eb2c2d6", "safeBatchTransferFrom(address,address,uint256[],uint256[],bytes)", Category.TRANSFER,
     "erc1155_batch_transfer", ("from", "to", "ids", "amounts", "data"), "Batch transfer ERC1155 tokens"),

    # Ownership
    ("0xf2fde38b", "transferOwnership(address)", Category.OWNERSHIP, "transfer_ownership",
     ("newOwner",), "Transfer contract ownership"),
    ("0x715018a6", "renounceOwnership()", Category.OWNERSHIP, "renounce_ownership",
     (), "Permanently renounce contract ownership"),

    # Proxy upgrades
    ("0x3659cfe6", "upgradeTo(address)", Category.PROXY_UPGRADE, "upgrade",
     ("newImplementation",), "Upgrade proxy implementation"),
    ("0x4f1ef286", "upgradeToAndCall(address,bytes)", Category.PROXY_UPGRADE, "upgrade_and_call",
     ("newImplementation", "data"), "Upgrade proxy implementation and call initializer"),

    # Batches
    ("0xac9650d8", "multicall(bytes[])", Category.BATCH, "multicall",
     ("data",), "Execute multiple calls in one transaction"),
    ("0x5ae401dc", "multicall(uint256,bytes[])", Category.BATCH, "multicall",
     ("deadline", "data"), "Execute multiple calls with a deadline"),
    ("0x252dba42", "aggregate((address,bytes)[])", Category.BATCH, "aggregate",
     ("calls",), "Aggregate multiple contract calls"),
    ("0x3593564c", "execute(bytes,bytes[],uint256)", Category.BATCH, "universal_router",
     ("commands", "inputs", "deadline"), "Universal Router command execution"),
    (MULTISEND_SELECTOR, "multiSend(bytes)", Category.BATCH, "multisend",
     ("transactions",), "Safe MultiSend batch"),

    # Safe administration
    ("0x6a761202",
     "execTransaction(address,uint256,bytes,uint8,uint256,uint256,uint256,address,address,bytes)",
     Category.SAFE_ADMIN, "safe_exec",
     ("to", "value", "data", "operation", "safeTxGas", "baseGas", "gasPrice", "gasToken",
      "refundReceiver", "signatures"),
     "Execute a Safe transaction with owner signatures"),
    ("0x610b5925", "enableModule(address)", Category.SAFE_ADMIN, "safe_enable_module",
     ("module",), "Enable a Safe module"),
    ("0xe009cfde", "disableModule(address,address)", Category.SAFE_ADMIN, "safe_disable_module",
     ("prevModule", "module"), "Disable a Safe module"),
    ("0xf08a0323", "setFallbackHandler(address)", Category.SAFE_ADMIN, "safe_fallback",
     ("handler",), "Set the Safe fallback handler"),
    ("0xe19a9dd9", "setGuard(address)", Category.SAFE_ADMIN, "safe_guard",
     ("guard",), "Set the Safe transaction guard"),
    ("0x0d582f13", "addOwnerWithThreshold(address,uint256)", Category.SAFE_ADMIN, "safe_add_owner",
     ("owner", "_threshold"), "Add a Safe owner and set threshold"),
    ("0xf8dc5dd9", "removeOwner(address,address,uint256)", Category.SAFE_ADMIN, "safe_remove_owner",
     ("prevOwner", "owner", "_threshold"), "Remove a Safe owner and set threshold"),
    ("0xe318b52b", "swapOwner(address,address,address)", Category.SAFE_ADMIN, "safe_swap_owner",
     ("prevOwner", "oldOwner", "newOwner"), "Replace a Safe owner"),
    ("0x694e80c3", "changeThreshold(uint256)", Category.SAFE_ADMIN, "safe_threshold",
     ("_threshold",), "Change the Safe signature threshold"),
    ("0x468721a7", "execTransactionFromModule(address,uint256,bytes,uint8)", Category.SAFE_ADMIN,
     "safe_module_exec", ("to", "value", "data", "operation"),
     "Module executes a Safe transaction without signatures"),
    ("0x5229073f", "execTransactionFromModuleReturnData(address,uint256,bytes,uint8)", Category.SAFE_ADMIN,
     "safe_module_exec", ("to", "value", "data", "operation"),
     "Module executes a Safe transaction without signatures"),

    # Uniswap V2 router
    ("0x7ff36ab5", "swapExactETHForTokens(uint256,address[],address,uint256)", Category.DEX, "swap",
     ("amountOutMin",) + _UNIV2_SWAP_TAIL, "Swap exact ETH for tokens"),
    ("0x18cbafe5", "swapExactTokensForETH(uint256,uint256,address[],address,uint256)", Category.DEX, "swap",
     ("amountIn", "amountOutMin") + _UNIV2_SWAP_TAIL, "Swap exact tokens for ETH"),
    ("0x38ed1739", "swapExactTokensForTokens(uint256,uint256,address[],address,uint256)", Category.DEX, "swap",
     ("amountIn", "amountOutMin") + _UNIV2_SWAP_TAIL, "Swap exact tokens for tokens"),
    ("0xfb3bdb41", "swapETHForExactTokens(uint256,address[],address,uint256)", Category.DEX, "swap",
     ("amountOut",) + _UNIV2_SWAP_TAIL, "Swap ETH for exact tokens"),
    ("0x8803dbee", "swapTokensForExactTokens(uint256,uint256,address[],address,uint256)", Category.DEX, "swap",
     ("amountOut", "amountInMax") + _UNIV2_SWAP_TAIL, "Swap tokens for exact tokens"),
    ("0x4a25d94a", "swapTokensForExactETH(uint256,uint256,address[],address,uint256)", Category.DEX, "swap",
     ("amountOut", "amountInMax") + _UNIV2_SWAP_TAIL, "Swap tokens for exact ETH"),
    ("0xe8e33700", "addLiquidity(address,address,uint256,uint256,uint256,uint256,address,uint256)",
     Category.DEX, "add_liquidity",
     ("tokenA", "tokenB", "amountADesired", "amountBDesired", "amountAMin", "amountBMin", "to", "deadline"),
     "Add liquidity to a pool"),
    ("0xf305d719", "addLiquidityETH(address,uint256,uint256,uint256,address,uint256)",
     Category.DEX, "add_liquidity",
     ("token", "amountTokenDesired", "amountTokenMin", "amountETHMin", "to", "deadline"),
     "Add ETH liquidity to a pool"),
    ("0xbaa2abde", "removeLiquidity(address,address,uint256,uint256,uint256,address,uint256)",
     Category.DEX, "remove_liquidity",
     ("tokenA", "tokenB", "liquidity", "amountAMin", "amountBMin", "to", "deadline"),
     "Remove liquidity from a pool"),
    ("0x02751cec", "removeLiquidityETH(address,uint256,uint256,uint256,address,uint256)",
     Category.DEX, "remove_liquidity",
     ("token", "liquidity", "amountTokenMin", "amountETHMin", "to", "deadline"),
     "Remove ETH liquidity from a pool"),

    # WETH
    ("0xd0e30db0", "deposit()", Category.DEX, "wrap", (), "Wrap ETH into WETH"),
    ("0x2e1a7d4d", "withdraw(uint256)", Category.DEX, "unwrap", ("wad",), "Unwrap WETH into ETH"),
]


def _build_catalog() -> Dict[str, SelectorEntry]:
    catalog = {}
    for selector, signature, category, template_id, names, description in _RAW_ENTRIES:
        catalog[selector] = SelectorEntry(
            selector=selector,
            signature=signature,
            function_name=signature.split("(", 1)[0],
            category=category,
            effect_template_id=template_id,
            param_names=names,
            description=description,
        )
    return catalog


VERIFIED_SELECTORS = MappingProxyType(_build_catalog())


# Display names only. Never used for risk assessment.
KNOWN_ADDRESSES = MappingProxyType({
    "0x7a250d5630b4cf539739df2c5dacb4c659f2488d": "Uniswap V2 Router",
    "0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45": "Uniswap Universal Router",
    "0x1111111254eeb25477b68fb85ed929f73a960582": "1inch v5 Router",
    "0xdef1c0ded9bec7f1a1670819833240f027b25eff": "0x Exchange Proxy",
    "0xd9db270c1b5e3bd161e8c8503c55ceabee709552": "Safe Singleton 1.3.0",
    "0x69f4d1788e39c87893c980c06edf4b7f686e2938": "Safe Singleton L2 1.3.0",
    "0xa6b71e26c5e0845f74c812102ca7114b6a896ab2": "Safe Proxy Factory 1.3.0",
    "0xf48f2b2d2a534e402487b3ee7c18c33aec0fe5e4": "Safe Compatibility Fallback Handler",
    "0x40a2accbd92bca938b02010e17a5b8929b49130d": "Safe MultiSend 1.1.1",
    "0xa238cbeb142c10ef7ad8442c6d1f9e89e07e7761": "Safe MultiSend 1.3.0",
    "0x998739bfdaadde7c933b942a68053933098f9eda": "Safe MultiSend 1.4.1",
    "0x9641d764fc13c8b624c04430c7356c1c7c8102e2": "Safe MultiSendCallOnly 1.3.0",
    "0x0da0c3e52c977ed3cbc641ff02dd271c3ed55afe": "Allowance Module",
})


def lookup_selector(selector: str) -> Optional[SelectorEntry]:
    """Look up a selector in the verified catalog."""
    return VERIFIED_SELECTORS.get(selector.lower())


def lookup_address(address: Optional[str]) -> Optional[str]:
    """Display name for a well-known contract address."""
    if not address:
        return None
    return KNOWN_ADDRESSES.get(address.lower())
