"""Margin contract function and event signatures.

Argument order and array sizes are the contract's wire format.
"""
from __future__ import annotations

from ...chains.evm.contract import EventInput, EventSpec, FunctionSpec

_BYTES32 = ("bytes32",)
_UINT256 = ("uint256",)
_BOOL = ("bool",)

MARGIN_FUNCTIONS: dict[str, FunctionSpec] = {
    spec.name: spec
    for spec in (
        # State changing
        FunctionSpec(
            "openPosition",
            ("address[11]", "uint256[10]", "uint32[4]", "bytes", "bool", "bytes"),
            _BYTES32,
        ),
        FunctionSpec(
            "openWithoutCounterparty",
            ("address[4]", "uint256[3]", "uint32[4]"),
            _BYTES32,
        ),
        FunctionSpec(
            "increasePosition",
            ("bytes32", "address[7]", "uint256[8]", "uint32[2]", "bool", "bytes", "bytes"),
            _UINT256,
        ),
        FunctionSpec("increaseWithoutCounterparty", ("bytes32", "uint256"), _UINT256),
        FunctionSpec(
            "closePosition",
            ("bytes32", "uint256", "address", "address", "bool", "bytes"),
            ("uint256", "uint256", "uint256"),
        ),
        FunctionSpec(
            "closePositionDirectly",
            ("bytes32", "uint256", "address"),
            ("uint256", "uint256", "uint256"),
        ),
        FunctionSpec(
            "closeWithoutCounterparty",
            ("bytes32", "uint256", "address"),
            ("uint256", "uint256"),
        ),
        FunctionSpec(
            "cancelLoanOffering",
            ("address[9]", "uint256[7]", "uint32[4]", "uint256"),
            _UINT256,
        ),
        FunctionSpec("marginCall", ("bytes32", "uint256")),
        FunctionSpec("cancelMarginCall", ("bytes32",)),
        FunctionSpec("forceRecoverCollateral", ("bytes32", "address"), _UINT256),
        FunctionSpec("depositCollateral", ("bytes32", "uint256")),
        FunctionSpec("transferLoan", ("bytes32", "address")),
        FunctionSpec("transferPosition", ("bytes32", "address")),
        # Constant
        FunctionSpec(
            "getPosition", _BYTES32, ("address[4]", "uint256[2]", "uint32[6]")
        ),
        FunctionSpec("containsPosition", _BYTES32, _BOOL),
        FunctionSpec("isPositionCalled", _BYTES32, _BOOL),
        FunctionSpec("isPositionClosed", _BYTES32, _BOOL),
        FunctionSpec("getTotalOwedTokenRepaidToLender", _BYTES32, _UINT256),
        FunctionSpec("getPositionBalance", _BYTES32, _UINT256),
        FunctionSpec("getTimeUntilInterestIncrease", _BYTES32, _UINT256),
        FunctionSpec("getPositionOwedAmount", _BYTES32, _UINT256),
        FunctionSpec(
            "getPositionOwedAmountAtTime", ("bytes32", "uint256", "uint32"), _UINT256
        ),
        FunctionSpec(
            "getLenderAmountForIncreasePositionAtTime",
            ("bytes32", "uint256", "uint32"),
            _UINT256,
        ),
        FunctionSpec("getLoanUnavailableAmount", _BYTES32, _UINT256),
        FunctionSpec("getLoanFilledAmount", _BYTES32, _UINT256),
        FunctionSpec("getLoanCanceledAmount", _BYTES32, _UINT256),
        FunctionSpec("getLoanNumber", _BYTES32, _UINT256),
        FunctionSpec("isLoanApproved", _BYTES32, _BOOL),
    )
}

POSITION_OPENED = EventSpec(
    "PositionOpened",
    (
        EventInput("positionId", "bytes32", indexed=True),
        EventInput("trader", "address", indexed=True),
        EventInput("lender", "address", indexed=True),
        EventInput("loanHash", "bytes32"),
        EventInput("owedToken", "address"),
        EventInput("heldToken", "address"),
        EventInput("loanFeeRecipient", "address"),
        EventInput("principal", "uint256"),
        EventInput("heldTokenFromSell", "uint256"),
        EventInput("depositAmount", "uint256"),
        EventInput("interestRate", "uint256"),
        EventInput("callTimeLimit", "uint32"),
        EventInput("maxDuration", "uint32"),
        EventInput("depositInHeldToken", "bool"),
    ),
)

POSITION_CLOSED = EventSpec(
    "PositionClosed",
    (
        EventInput("positionId", "bytes32", indexed=True),
        EventInput("closer", "address", indexed=True),
        EventInput("payoutRecipient", "address", indexed=True),
        EventInput("closeAmount", "uint256"),
        EventInput("remainingAmount", "uint256"),
        EventInput("owedTokenPaidToLender", "uint256"),
        EventInput("payoutAmount", "uint256"),
        EventInput("buybackCostInHeldToken", "uint256"),
        EventInput("payoutInHeldToken", "bool"),
    ),
)

MARGIN_EVENTS: dict[str, EventSpec] = {
    spec.name: spec for spec in (POSITION_OPENED, POSITION_CLOSED)
}
