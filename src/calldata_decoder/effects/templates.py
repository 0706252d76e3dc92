"""
Consequence templates keyed by function category.

Each handler receives the identified function and its decoded parameters
and returns the base EffectModel, before any trust or DELEGATECALL
adjustment. Human-facing text only names addresses that carry a label
from the trust profile or the known-address table; anything else is
described generically.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models import EffectModel, Identification, Permanence, Severity, Source
from ..selectors import Category, lookup_address
from .severity import escalate

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

UNLIMITED_WARNING = "UNLIMITED permission - the recipient can drain your entire balance"
IRREVERSIBLE_TRANSFER = "This transfer is IMMEDIATE and IRREVERSIBLE once confirmed"
UNKNOWN_CONSEQUENCES = "Cannot determine the consequences of this transaction"
UNLIMITED_SCOPE = "Operation scope is UNLIMITED (maximum value for: {names})"

# Deterministic name rules for functions identified outside the catalog
CRITICAL_NAME_PATTERNS = ("delegatecall", "selfdestruct", "upgrade", "setimplementation")
HIGH_NAME_PATTERNS = ("transfer", "approve", "withdraw", "execute", "owner", "admin")
ALLOWANCE_NAME_PATTERNS = ("approve", "allowance", "permit")
BENEFICIARY_KEYS = ("to", "recipient", "onBehalfOf", "receiver", "beneficiary")


@dataclass(frozen=True)
class EffectContext:
    params: Optional[Dict[str, Any]] = field(default=None, hash=False)
    unlimited: Tuple[str, ...] = ()
    profile: Any = None
    target_address: Optional[str] = None
    call_count: Optional[int] = None

    def param(self, name: str, default=None):
        if not self.params:
            return default
        return self.params.get(name, default)

    def label_for(self, address: Optional[str]) -> Optional[str]:
        if not address:
            return None
        if self.profile is not None:
            label = self.profile.get_address_label(address)
            if label:
                return label
        return lookup_address(address)

    def describe(self, address: Optional[str], generic: str) -> str:
        return self.label_for(address) or generic

    @property
    def token_label(self) -> str:
        return self.label_for(self.target_address) or "this token"


def format_amount(amount) -> str:
    if amount is None:
        return "unknown"
    return str(amount)


def format_deadline(deadline) -> Optional[str]:
    if deadline is None:
        return None
    try:
        return datetime.fromtimestamp(int(deadline), tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return str(deadline)


def _effect(effect_type: str, severity: Severity, permanence: Optional[Permanence], **kwargs) -> EffectModel:
    return EffectModel(effect_type=effect_type, severity=severity, permanence=permanence, **kwargs)


def _revoke_effect(ident: Identification) -> EffectModel:
    return _effect(
        "PERMISSION_REVOKE",
        Severity.OK,
        Permanence.IMMEDIATE,
        label=ident.function_name,
        consequences=["This revokes a previously granted permission"],
    )


def _unlimited_grant(ident: Identification, ctx: EffectContext, spender: Optional[str], noun: str) -> EffectModel:
    spender_label = ctx.describe(spender, "A spender address")
    return _effect(
        "PERMISSION_GRANT",
        escalate(Severity.HIGH),
        Permanence.PERMANENT_UNTIL_REVOKED,
        label=ident.function_name,
        beneficiary=spender,
        amount_label="unlimited",
        consequences=[
            f"{spender_label} can transfer ANY AMOUNT of {noun} from your wallet at ANY TIME",
            "This permission is PERMANENT until you explicitly revoke it",
            "No further approval from you will be required for future transfers",
        ],
        warnings=[UNLIMITED_WARNING],
        mitigations=[
            "Consider approving only the specific amount needed for this transaction",
            "Revoke unused approvals regularly using revoke.cash or similar tools",
        ],
    )


def approval_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    template = ident.template_id

    if template == "approval_for_all":
        operator = ctx.param("operator")
        if ctx.params is not None and ctx.param("approved") is False:
            return _revoke_effect(ident)
        effect = _unlimited_grant(ident, ctx, operator, f"{ctx.token_label} (every token in the collection)")
        return effect

    amount_key = "value" if template == "permit" else "amount"
    spender = ctx.param("spender")
    amount = ctx.param(amount_key)

    if ctx.params is not None and amount == 0:
        return _revoke_effect(ident)

    if amount_key in ctx.unlimited:
        effect = _unlimited_grant(ident, ctx, spender, ctx.token_label)
    else:
        spender_label = ctx.describe(spender, "A spender address")
        effect = _effect(
            "PERMISSION_GRANT",
            Severity.HIGH,
            Permanence.PERMANENT_UNTIL_REVOKED,
            label=ident.function_name,
            beneficiary=spender,
            amount_label=format_amount(amount) if amount is not None else None,
            consequences=[
                f"{spender_label} can transfer up to {format_amount(amount)} of {ctx.token_label} from your wallet"
                if amount is not None else f"{spender_label} can transfer {ctx.token_label} from your wallet",
                "Each transfer will reduce this allowance until it reaches zero",
            ],
        )

    if template == "permit":
        effect.consequences.append("The approval is granted by an off-chain signature (EIP-2612 permit)")
        deadline = format_deadline(ctx.param("deadline"))
        if deadline:
            effect.consequences.append(f"The permit is valid until {deadline}")
    return effect


def transfer_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    template = ident.template_id
    recipient = ctx.param("to")
    recipient_label = ctx.describe(recipient, "a recipient address")

    if template == "nft_transfer":
        first = f"NFT #{format_amount(ctx.param('tokenId'))} will be transferred to {recipient_label}"
    elif template == "erc1155_transfer":
        first = (
            f"{format_amount(ctx.param('amount'))} of token ID {format_amount(ctx.param('id'))} "
            f"will be transferred to {recipient_label}"
        )
    elif template == "erc1155_batch_transfer":
        ids = ctx.param("ids") or []
        first = f"{len(ids)} token ID(s) will be transferred to {recipient_label}"
    else:
        first = f"{format_amount(ctx.param('amount'))} {ctx.token_label} will be transferred to {recipient_label}"

    consequences = [first]
    sender = ctx.param("from")
    if sender is not None:
        consequences.append(f"Tokens are taken from {ctx.describe(sender, 'the sender address')}")
    consequences.append(IRREVERSIBLE_TRANSFER)

    return _effect(
        "ASSET_TRANSFER",
        Severity.HIGH,
        Permanence.IMMEDIATE,
        label=ident.function_name,
        beneficiary=recipient,
        consequences=consequences,
        mitigations=["Verify the recipient address is correct before signing"],
    )


def dex_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    template = ident.template_id
    recipient = ctx.param("to")
    consequences: List[str] = []
    warnings: List[str] = []
    severity = Severity.DANGER

    if template == "swap":
        effect_type = "SWAP"
        if ctx.param("amountIn") is not None:
            consequences.append(f"You will swap {format_amount(ctx.param('amountIn'))} tokens")
        elif ctx.param("amountOut") is not None:
            consequences.append(f"You will receive exactly {format_amount(ctx.param('amountOut'))} tokens")
        else:
            consequences.append("You will swap ETH for tokens")
        if ctx.param("amountOutMin") is not None:
            consequences.append(
                f"Minimum output: {format_amount(ctx.param('amountOutMin'))} (transaction reverts if not met)"
            )
        if ctx.param("amountInMax") is not None:
            consequences.append(
                f"Maximum input: {format_amount(ctx.param('amountInMax'))} (transaction reverts if exceeded)"
            )
    elif template == "add_liquidity":
        effect_type = "LIQUIDITY_PROVISION"
        consequences += [
            "You will deposit tokens into a liquidity pool",
            "You will receive LP tokens representing your share",
            "Your tokens will be used by others for trading (you earn fees)",
        ]
    elif template == "remove_liquidity":
        effect_type = "LIQUIDITY_REMOVAL"
        consequences += [
            "You will burn LP tokens and receive underlying assets",
            "The exact amounts depend on current pool ratios",
        ]
    elif template == "wrap":
        effect_type = "WRAP"
        severity = Severity.WARN
        consequences += [
            "Your ETH will be converted to WETH (1:1)",
            "WETH is an ERC20 token that can be used in DeFi protocols",
        ]
    else:
        effect_type = "UNWRAP"
        severity = Severity.WARN
        consequences.append(f"{format_amount(ctx.param('wad'))} WETH will be converted back to ETH")

    if recipient is not None:
        consequences.append(f"Output will be sent to {ctx.describe(recipient, 'a recipient address')}")
        safe_address = getattr(ctx.profile, "safe_address", None)
        if safe_address and recipient.lower() != safe_address:
            warnings.append("Output is sent to an address other than your Safe")
    deadline = format_deadline(ctx.param("deadline"))
    if deadline:
        consequences.append(f"Transaction expires: {deadline}")

    return _effect(
        effect_type,
        severity,
        Permanence.IMMEDIATE,
        label=ident.function_name,
        beneficiary=recipient,
        consequences=consequences,
        warnings=warnings,
    )


def ownership_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    if ident.template_id == "renounce_ownership":
        consequences = [
            "Contract ownership will be permanently renounced",
            "NO ONE will be able to perform owner-only functions after this",
            "This action is IRREVERSIBLE",
        ]
        beneficiary = None
    else:
        beneficiary = ctx.param("newOwner")
        consequences = [
            f"Full control of this contract will be transferred to {ctx.describe(beneficiary, 'an address')}",
            "The new owner will have complete administrative control",
            "You will lose all owner privileges",
        ]
    return _effect(
        "CONTROL_TRANSFER",
        Severity.CRITICAL,
        Permanence.PERMANENT,
        label=ident.function_name,
        beneficiary=beneficiary,
        consequences=consequences,
        warnings=["This permanently changes who controls this contract"],
        mitigations=[
            "Ensure you trust the destination address completely",
            "This action may be irreversible - double-check everything",
        ],
    )


def upgrade_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    implementation = ctx.param("newImplementation")
    consequences = [
        "The contract's code/logic will be changed",
        f"New implementation: {ctx.describe(implementation, 'an unlabeled implementation contract')}",
        "All future interactions with this contract will use the new implementation",
        "This could change how your funds or assets are handled",
    ]
    if ident.template_id == "upgrade_and_call":
        consequences.append("An initialization call will run on the new implementation immediately")
    return _effect(
        "UPGRADE_AUTHORITY",
        Severity.CRITICAL,
        Permanence.PERMANENT,
        label=ident.function_name,
        beneficiary=implementation,
        consequences=consequences,
        warnings=["Contract upgrades can completely change functionality"],
        mitigations=[
            "Ensure you trust the destination address completely",
            "This action may be irreversible - double-check everything",
        ],
    )


def _safe_exec(ident: Identification, ctx: EffectContext, module: bool) -> EffectModel:
    target = ctx.param("to")
    inner_delegatecall = ctx.param("operation") == 1
    consequences: List[str] = []
    warnings: List[str] = []
    mitigations: List[str] = []

    if module:
        consequences += [
            "MODULE EXECUTION: This transaction BYPASSES signature requirements",
            "No owner signatures are needed - the module has autonomous execution power",
        ]
        warnings.append("This execution bypasses normal signature requirements")

    if inner_delegatecall:
        consequences += [
            "DELEGATECALL: External code will execute IN THE CONTEXT of your Safe",
            "The target contract's code will run with your Safe's storage and permissions",
            "This can modify ANY Safe state including owners, threshold, and modules",
        ]
        warnings += [
            "DELEGATECALL executes external code with your Safe's full permissions",
            "Malicious code could steal all assets, add owners, or change settings",
        ]
        mitigations += [
            "Verify the target contract is from a trusted, audited source",
            "Consider using CALL instead of DELEGATECALL if possible",
            "Review the target contract's code on a block explorer",
        ]
    else:
        consequences.append(f"The Safe will execute a CALL to {ctx.describe(target, 'a target contract')}")
        value = ctx.param("value")
        if value:
            consequences.append(f"{format_amount(value)} wei will be sent with this call")
        data = ctx.param("data")
        if data and data != "0x":
            consequences.append("The call includes data (a function call on the target contract)")
    consequences.append("Once executed, this transaction cannot be reversed")

    if module or inner_delegatecall:
        severity = Severity.CRITICAL
    else:
        severity = Severity.HIGH
    return _effect(
        "SAFE_MODULE_EXECUTION" if module else "SAFE_EXECUTION",
        severity,
        Permanence.IMMEDIATE,
        label=ident.function_name,
        beneficiary=target,
        consequences=consequences,
        warnings=warnings,
        mitigations=mitigations,
    )


def safe_admin_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    template = ident.template_id

    if template == "safe_exec":
        return _safe_exec(ident, ctx, module=False)
    if template == "safe_module_exec":
        return _safe_exec(ident, ctx, module=True)

    if template in ("safe_enable_module", "safe_disable_module"):
        module = ctx.param("module")
        module_label = ctx.describe(module, "A module")
        if template == "safe_enable_module":
            consequences = [
                f"{module_label} will gain AUTONOMOUS EXECUTION POWER",
                "This module can execute ANY transaction from your Safe WITHOUT owner signatures",
                "This permission remains active until the module is explicitly disabled",
            ]
            warnings = [
                "Enabled modules can execute transactions WITHOUT any owner signatures",
                "Module has COMPLETE control over Safe assets and settings",
            ]
            permanence = Permanence.PERMANENT_UNTIL_REVOKED
        else:
            consequences = [
                f"{module_label} will LOSE execution power",
                "This module will no longer be able to execute transactions from your Safe",
            ]
            warnings = []
            permanence = Permanence.PERMANENT
        return _effect(
            "SAFE_MODULE_CHANGE", Severity.CRITICAL, permanence,
            label=ident.function_name, beneficiary=module,
            consequences=consequences, warnings=warnings,
            mitigations=["Verify the module contract is audited and from a trusted source"],
        )

    if template == "safe_fallback":
        handler = ctx.param("handler")
        if handler is not None and handler.lower() == ZERO_ADDRESS:
            consequences = [
                "The fallback handler will be REMOVED",
                "Calls to undefined functions will revert instead of being forwarded",
            ]
        else:
            consequences = [
                f"Fallback handler will be set to {ctx.describe(handler, 'a handler address')}",
                "Calls to undefined functions on your Safe will be forwarded to this address",
                "The handler can interpret and respond to arbitrary calls to your Safe",
            ]
        return _effect(
            "SAFE_FALLBACK_CHANGE", Severity.HIGH, Permanence.PERMANENT,
            label=ident.function_name, beneficiary=handler, consequences=consequences,
        )

    if template == "safe_guard":
        guard = ctx.param("guard")
        if guard is not None and guard.lower() == ZERO_ADDRESS:
            consequences = [
                "The transaction guard will be REMOVED",
                "Any restrictions enforced by the previous guard will no longer apply",
            ]
        else:
            consequences = [
                f"Transaction guard will be set to {ctx.describe(guard, 'a guard contract')}",
                "This guard contract can BLOCK any Safe transaction from executing",
                "A malicious guard could permanently block all Safe operations",
            ]
        return _effect(
            "SAFE_GUARD_CHANGE", Severity.CRITICAL, Permanence.PERMANENT,
            label=ident.function_name, beneficiary=guard, consequences=consequences,
            warnings=["A guard contract can block ALL transactions if misconfigured"],
            mitigations=["Ensure the guard contract is well-audited"],
        )

    if template == "safe_threshold":
        threshold = ctx.param("_threshold")
        consequences = [
            f"After this change, {format_amount(threshold)} owner signature(s) will be required to execute transactions",
        ]
        if threshold == 1:
            consequences.append("A threshold of 1 means ANY single owner can execute transactions alone")
        return _effect(
            "SAFE_THRESHOLD_CHANGE", Severity.CRITICAL, Permanence.PERMANENT,
            label=ident.function_name, consequences=consequences,
            warnings=["This changes how many signatures are needed to execute transactions"],
        )

    # Owner changes
    threshold = ctx.param("_threshold")
    if template == "safe_add_owner":
        owner = ctx.param("owner")
        consequences = [
            f"{ctx.describe(owner, 'An address')} will become a Safe owner",
            "This address will gain SIGNING AUTHORITY on your Safe",
        ]
    elif template == "safe_remove_owner":
        owner = ctx.param("owner")
        consequences = [
            f"{ctx.describe(owner, 'An address')} will be REMOVED as a Safe owner",
            "This address will LOSE all signing authority on your Safe",
        ]
    else:
        owner = ctx.param("newOwner")
        consequences = [
            f"Safe owner {ctx.describe(ctx.param('oldOwner'), 'an address')} will be REPLACED by "
            f"{ctx.describe(owner, 'another address')}",
            "The old owner loses all control; the new owner gains signing rights",
        ]
    if threshold is not None:
        consequences.append(f"After this change, {format_amount(threshold)} signature(s) will be required")
    return _effect(
        "SAFE_OWNER_CHANGE", Severity.CRITICAL, Permanence.PERMANENT,
        label=ident.function_name, beneficiary=owner, consequences=consequences,
        warnings=["This changes who can sign transactions for the Safe"],
        mitigations=["Verify you trust the new owner address completely"],
    )


def batch_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    count = ctx.call_count if ctx.call_count is not None else "multiple"
    severity = Severity.WARN if ident.template_id == "multisend" else Severity.HIGH
    return _effect(
        "BATCH_OPERATION",
        severity,
        Permanence.IMMEDIATE,
        label=ident.function_name,
        consequences=[
            f"This transaction contains {count} bundled operations",
            "Each operation within the batch must be analyzed separately",
            "All operations execute atomically - all succeed or all fail",
        ],
        warnings=["Batch operations may hide dangerous calls within benign ones"],
    )


def _extract_beneficiary(params: Optional[Dict[str, Any]]) -> Optional[str]:
    if not params:
        return None
    for key in BENEFICIARY_KEYS:
        value = params.get(key)
        if isinstance(value, str) and value.startswith("0x"):
            return value
    return None


def contract_call_effect(ident: Identification, ctx: EffectContext) -> EffectModel:
    """Function identified by a local ABI or a trust-profile label."""
    name = ident.function_name or "unknown function"
    lower_name = name.lower()

    if any(p in lower_name for p in CRITICAL_NAME_PATTERNS):
        severity = Severity.CRITICAL
    elif any(p in lower_name for p in HIGH_NAME_PATTERNS):
        severity = Severity.HIGH
    else:
        severity = Severity.WARN

    grants_allowance = any(p in lower_name for p in ALLOWANCE_NAME_PATTERNS)
    permanence = None
    if grants_allowance:
        permanence = Permanence.PERMANENT_UNTIL_REVOKED
    elif any(p in lower_name for p in ("transfer", "swap", "repay")):
        permanence = Permanence.IMMEDIATE

    beneficiary = _extract_beneficiary(ctx.params)
    warnings: List[str] = []
    amount_label = None

    if ident.source == Source.TRUST_PROFILE:
        consequences = [
            f'This transaction calls the "{name}" function on a TRUSTED contract',
            "The trust profile explicitly allows this selector for this contract",
            "Parameter details could not be decoded - verify calldata manually",
        ]
        warnings += [
            "INTERPRETATION SOURCE: TRUST_PROFILE (not ABI-verified)",
            "The function name is based on your trust profile's label for this selector",
        ]
    else:
        consequences = [f'This transaction calls the "{name}" function (verified via local ABI)']
        if beneficiary:
            consequences.append(f"Beneficiary/recipient: {ctx.describe(beneficiary, beneficiary)}")
        if ident.source == Source.TRUST_PROFILE_ABI:
            warnings.append("VERIFICATION SOURCE: LOCAL_ABI (contract ABI from trust profile)")
        else:
            warnings.append("VERIFICATION SOURCE: LOCAL_ABI (contract ABI from local registry)")

    if ctx.unlimited:
        consequences.append(UNLIMITED_SCOPE.format(names=", ".join(ctx.unlimited)))
        if grants_allowance:
            severity = escalate(severity)
            permanence = Permanence.PERMANENT_UNTIL_REVOKED
            amount_label = "unlimited"
            warnings.insert(0, UNLIMITED_WARNING)

    return _effect(
        "CONTRACT_CALL",
        severity,
        permanence,
        label=name,
        beneficiary=beneficiary,
        amount_label=amount_label,
        consequences=consequences,
        warnings=warnings,
        mitigations=["Verify the function matches your expected action"],
    )


def unresolved_effect(ident: Optional[Identification], ctx: EffectContext) -> EffectModel:
    return _effect(
        "UNKNOWN",
        Severity.UNKNOWN,
        None,
        label=ident.function_name if ident else None,
        warnings=[UNKNOWN_CONSEQUENCES],
        mitigations=[
            "Verify the contract source code on a block explorer",
            "Do not sign if you cannot verify the transaction's purpose",
        ],
    )


EFFECT_HANDLERS: Dict[Category, Callable[..., EffectModel]] = {
    Category.APPROVAL: approval_effect,
    Category.TRANSFER: transfer_effect,
    Category.DEX: dex_effect,
    Category.OWNERSHIP: ownership_effect,
    Category.PROXY_UPGRADE: upgrade_effect,
    Category.SAFE_ADMIN: safe_admin_effect,
    Category.BATCH: batch_effect,
    Category.CONTRACT_CALL: contract_call_effect,
    Category.UNRESOLVED: unresolved_effect,
}


def native_transfer_effect(value: int, to: Optional[str], ctx: EffectContext) -> EffectModel:
    """Sub-call with empty data: a plain ETH transfer."""
    return _effect(
        "NATIVE_TRANSFER",
        Severity.WARN,
        Permanence.IMMEDIATE,
        label="ETH transfer",
        beneficiary=to,
        consequences=[
            f"{value} wei will be sent to {ctx.describe(to, 'a recipient address')}",
            IRREVERSIBLE_TRANSFER,
        ],
        mitigations=["Verify the recipient address is correct before signing"],
    )
