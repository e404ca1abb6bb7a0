"""oraclevault.core.exceptions

Errors are part of the interface.

Every failure aborts the whole operation. Nothing here is retried.
"""

from __future__ import annotations


class OracleVaultError(Exception):
    """Base exception for oraclevault."""

    code = "vault.error"


class ConfigError(OracleVaultError):
    """Configuration is missing, invalid, or inconsistent."""

    code = "config.invalid"


class JournalError(OracleVaultError):
    """Event journal failures: schema, IO, integrity."""

    code = "journal.error"


class ReentrancyError(OracleVaultError):
    """A guarded entry point was entered while another one was running."""

    code = "vault.reentrancy"


# -----------------
# Authorization
# -----------------


class AuthorizationError(OracleVaultError):
    """Wrong caller for this operation."""

    code = "auth.denied"


class NotOwner(AuthorizationError):
    code = "auth.not_owner"


class NotGuardian(AuthorizationError):
    code = "auth.not_guardian"


class NotManager(AuthorizationError):
    code = "auth.not_manager"


class NotWhitelisted(AuthorizationError):
    """Rebalance target has not passed the whitelist timelock."""

    code = "auth.not_whitelisted"


# -----------------
# Validation
# -----------------


class ValidationError(OracleVaultError):
    """Input rejected. Resubmit corrected input."""

    code = "validation.invalid"


class InvalidOracle(ValidationError):
    code = "validation.invalid_oracle"


class InvalidDistribution(ValidationError):
    """Resting liquidity would sit outside the oracle band."""

    code = "validation.invalid_distribution"


class ZeroAmount(ValidationError):
    code = "validation.zero_amount"


class InvalidWhitelistTarget(ValidationError):
    """Strategy and traded tokens can never be rebalance targets."""

    code = "validation.invalid_whitelist_target"


class AlreadyWhitelisted(ValidationError):
    code = "validation.already_whitelisted"


class InvalidInitialMintAmounts(ValidationError):
    code = "validation.invalid_initial_mint"


class NoProposal(ValidationError):
    code = "validation.no_proposal"


class AlreadyProposed(ValidationError):
    """A proposal is pending for this key. Reject it first."""

    code = "validation.already_proposed"


class FeeTooHigh(ValidationError):
    code = "validation.fee_too_high"


# -----------------
# Timelock
# -----------------


class TimelockError(OracleVaultError):
    code = "timelock.error"


class Timelocked(TimelockError):
    """Proposal still inside its waiting window. Retry later."""

    code = "timelock.pending"


# -----------------
# Bounds / slippage
# -----------------


class BoundError(OracleVaultError):
    code = "bound.exceeded"


class SlippageExceeded(BoundError):
    code = "bound.slippage"


class BurnSlippageExceeded(BoundError):
    code = "bound.burn_slippage"


class CapExceeded(BoundError):
    code = "bound.cap"


class InvalidTradeTick(BoundError):
    """Realized trade price is worse than fair by more than the band."""

    code = "bound.trade_tick"


class InsufficientBalance(BoundError):
    code = "bound.insufficient_balance"


# -----------------
# External dependencies
# -----------------


class ExternalDependencyError(OracleVaultError):
    code = "external.failed"


class OracleUnavailable(ExternalDependencyError):
    """No price, no trade."""

    code = "external.oracle_unavailable"


class ExternalCallError(ExternalDependencyError):
    code = "external.call_failed"
