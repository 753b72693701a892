"""Ledger read endpoints and wallet reconciliation."""
from fastapi import APIRouter, Depends, Query

from identity_server.core.config import Settings
from identity_server.core.crypto import canonical_wallet_key
from identity_server.interfaces.http.deps import (
    get_app_settings,
    get_current_wallet,
    get_ledger_service,
    get_reconciliation_service,
)
from identity_server.modules.ledger import LedgerService
from identity_server.modules.transactions import ReconciliationService
from identity_server.modules.transactions.sync import DEFAULT_SYNC_LIMIT
from identity_server.schemas import (
    BalanceResponse,
    Envelope,
    LiveTransactionListResponse,
    NetworkStatusResponse,
    SyncResponse,
    TokenHoldingResponse,
    TokenListResponse,
    TransactionVerificationResponse,
    WalletValidationResponse,
)

router = APIRouter()


@router.get("/balance/{wallet_key}", response_model=Envelope[BalanceResponse], summary="SOL balance")
async def get_balance(wallet_key: str, ledger: LedgerService = Depends(get_ledger_service)) -> Envelope[BalanceResponse]:
    wallet_key = canonical_wallet_key(wallet_key)
    balance = await ledger.get_balance(wallet_key)
    return Envelope[BalanceResponse](
        data=BalanceResponse(wallet_key=wallet_key, lamports=balance.lamports, sol=balance.sol)
    )


@router.get("/tokens/{wallet_key}", response_model=Envelope[TokenListResponse], summary="SPL token holdings")
async def get_tokens(wallet_key: str, ledger: LedgerService = Depends(get_ledger_service)) -> Envelope[TokenListResponse]:
    wallet_key = canonical_wallet_key(wallet_key)
    holdings = await ledger.get_token_holdings(wallet_key)
    return Envelope[TokenListResponse](
        data=TokenListResponse(
            wallet_key=wallet_key,
            tokens=[TokenHoldingResponse.model_validate(holding) for holding in holdings],
        )
    )


@router.get(
    "/transactions/{wallet_key}",
    response_model=Envelope[LiveTransactionListResponse],
    summary="Recent transactions straight from the ledger",
)
async def get_live_transactions(
    wallet_key: str,
    limit: int = Query(20, ge=1, le=100),
    ledger: LedgerService = Depends(get_ledger_service),
) -> Envelope[LiveTransactionListResponse]:
    wallet_key = canonical_wallet_key(wallet_key)
    history = await ledger.get_transaction_history(wallet_key, limit)
    return Envelope[LiveTransactionListResponse](
        data=LiveTransactionListResponse(wallet_key=wallet_key, transactions=history)
    )


@router.post("/sync", response_model=Envelope[SyncResponse], summary="Reconcile the caller's ledger history")
async def sync_transactions(
    limit: int = Query(DEFAULT_SYNC_LIMIT, ge=1, le=1000),
    wallet_key: str = Depends(get_current_wallet),
    reconciliation: ReconciliationService = Depends(get_reconciliation_service),
) -> Envelope[SyncResponse]:
    result = await reconciliation.sync(wallet_key, limit)
    return Envelope[SyncResponse](
        message="Transactions synced successfully",
        data=SyncResponse.model_validate(result),
    )


@router.get(
    "/verify/{signature}",
    response_model=Envelope[TransactionVerificationResponse],
    summary="Ledger status of a transaction signature",
)
async def verify_transaction(
    signature: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> Envelope[TransactionVerificationResponse]:
    verification = await ledger.verify_transaction(signature)
    return Envelope[TransactionVerificationResponse](
        data=TransactionVerificationResponse.model_validate(verification)
    )


@router.get("/network", response_model=Envelope[NetworkStatusResponse], summary="Cluster status")
async def network_status(
    ledger: LedgerService = Depends(get_ledger_service),
    settings: Settings = Depends(get_app_settings),
) -> Envelope[NetworkStatusResponse]:
    status = await ledger.get_network_status()
    return Envelope[NetworkStatusResponse](
        data=NetworkStatusResponse(
            network=settings.solana.network,
            version=status.version,
            current_slot=status.current_slot,
            block_time=status.block_time,
            epoch=status.epoch,
            slot_index=status.slot_index,
            slots_in_epoch=status.slots_in_epoch,
        )
    )


@router.get("/validate/{wallet_key}", response_model=Envelope[WalletValidationResponse], summary="Validate a wallet key")
async def validate_wallet(
    wallet_key: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> Envelope[WalletValidationResponse]:
    validation = await ledger.validate_wallet(wallet_key)
    return Envelope[WalletValidationResponse](
        data=WalletValidationResponse(
            wallet_key=wallet_key,
            valid=validation.valid,
            exists=validation.exists,
            balance=validation.balance,
            error=validation.error,
        )
    )
