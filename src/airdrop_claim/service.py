"""Claim service - wires gateway, wallet, validator, composer and builder together."""

from __future__ import annotations

import logging

from airdrop_claim.cardano.blockfrost import BlockfrostGateway
from airdrop_claim.cardano.builder import ClaimTxBuilder
from airdrop_claim.cardano.wallet import KeyWallet
from airdrop_claim.claim.composer import TransactionComposer
from airdrop_claim.claim.validator import ClaimValidator
from airdrop_claim.codec.datum import decode_record_cbor
from airdrop_claim.errors import ClaimError, RecordNotFound
from airdrop_claim.interfaces.gateway import ChainGateway
from airdrop_claim.interfaces.journal import ClaimJournal
from airdrop_claim.interfaces.wallet import Wallet
from airdrop_claim.models.chain import Utxo
from airdrop_claim.models.config import ClaimConfig
from airdrop_claim.models.records import (
    AssetId,
    ClaimRequest,
    ClaimResult,
    InspectionReport,
    OutputRef,
)
from airdrop_claim.storage.sqlite import SQLiteClaimJournal

log = logging.getLogger(__name__)


def locate_record_utxo(utxos: list[Utxo], target: OutputRef, asset: AssetId) -> Utxo:
    """Find the record UTxO for a claim target.

    Lookup order: exact ``tx_hash#index``, then any output of the same
    transaction, then the first UTxO holding the asset with a datum.
    """
    match = (
        next((u for u in utxos if u.ref == target), None)
        or next((u for u in utxos if u.ref.tx_hash == target.tx_hash), None)
        or next((u for u in utxos if u.value.quantity(asset.unit) and u.inline_datum), None)
    )
    if match is None:
        raise RecordNotFound(f"no UTxO at the lock address matches {target}")
    if not match.inline_datum or not match.value.quantity(asset.unit):
        raise RecordNotFound(f"UTxO {match.ref} is missing the datum or the {asset.unit} asset")
    return match


class AirdropClaimService:
    """Runs a claim end to end against fresh chain state.

    locate -> validate -> compose -> build -> sign -> submit -> confirm.
    Each claim attempt is independent; nothing is cached between calls and
    double-spend protection is left to the ledger.
    """

    def __init__(
        self,
        cfg: ClaimConfig,
        gateway: ChainGateway,
        wallet: Wallet,
        journal: ClaimJournal | None = None,
    ) -> None:
        self._cfg = cfg
        self.gateway = gateway
        self.wallet = wallet
        self.journal = journal
        self.validator = ClaimValidator()
        self.composer = TransactionComposer()

    def _asset(self, asset: AssetId | None = None) -> AssetId:
        return asset or AssetId(self._cfg.policy_id, self._cfg.asset_name)

    async def inspect(
        self, target: OutputRef, asset: AssetId | None = None,
    ) -> InspectionReport:
        """Validate a target record for this wallet without building anything."""
        caller = await self.wallet.get_identity_hash()
        asset = self._asset(asset)
        record = None
        try:
            utxos = await self.gateway.find_utxos_at_address(self._cfg.lock_address)
            utxo = locate_record_utxo(utxos, target, asset)
            target = utxo.ref
            record = decode_record_cbor(utxo.inline_datum)
            request = ClaimRequest(caller, utxo.ref, asset)
            approval = self.validator.validate(request, utxo.inline_datum)
        except ClaimError as exc:
            return InspectionReport(
                str(target), record, claimable=False, reason=f"{exc.kind}:{exc}",
            )
        return InspectionReport(
            str(utxo.ref), approval.record, claimable=True, allocation=approval.allocation,
        )

    async def claim(
        self, target: OutputRef, asset: AssetId | None = None, wait: bool = True,
    ) -> ClaimResult:
        """Attempt a claim. Errors come back as a failed ClaimResult."""
        caller = await self.wallet.get_identity_hash()
        try:
            result = await self._claim(caller, target, self._asset(asset), wait)
        except ClaimError as exc:
            log.warning("Claim on %s failed: %s (%s)", target, exc.kind, exc)
            result = ClaimResult(
                success=False,
                target=str(target),
                error=f"{exc.kind}:{exc}",
                retryable=exc.retryable,
            )
        if self.journal is not None:
            await self.journal.record_attempt(caller, result)
        return result

    async def _claim(
        self, caller: str, target: OutputRef, asset: AssetId, wait: bool,
    ) -> ClaimResult:
        log.info("Claiming %s for %s", target, caller[:16])

        # 1. Fresh record lookup
        utxos = await self.gateway.find_utxos_at_address(self._cfg.lock_address)
        utxo = locate_record_utxo(utxos, target, asset)

        # 2. Validate
        request = ClaimRequest(caller, utxo.ref, asset)
        approval = self.validator.validate(request, utxo.inline_datum)

        # 3. Compose
        address = await self.wallet.get_address()
        plan = self.composer.compose(
            record=approval.record,
            allocation=approval.allocation,
            caller_identity=caller,
            payout_address=address,
            script_input=utxo.ref,
            lock_address=self._cfg.lock_address,
            held=utxo.value,
        )

        # 4. Balance
        params = await self.gateway.get_protocol_params()
        wallet_utxos = await self.gateway.find_utxos_at_address(address)
        builder = ClaimTxBuilder(
            params,
            self._cfg.script_cbor,
            spend_mem=self._cfg.spend_mem,
            spend_steps=self._cfg.spend_steps,
            collateral_min_lovelace=self._cfg.collateral_min_lovelace,
            min_change_lovelace=self._cfg.min_change_lovelace,
        )
        unsigned = builder.build(plan, utxo, wallet_utxos, change_address=address)

        # 5. Sign and submit
        signed = await self.wallet.sign(unsigned)
        tx_hash = await self.gateway.submit(signed.cbor)

        confirmed = None
        if wait:
            confirmed = await self.gateway.await_confirmation(
                tx_hash,
                timeout=self._cfg.confirm_timeout,
                poll_interval=self._cfg.confirm_poll_interval,
            )

        return ClaimResult(
            success=True,
            target=str(utxo.ref),
            tx_hash=tx_hash,
            token_payout=plan.token_payout,
            lovelace_payout=plan.lovelace_payout,
            confirmed=confirmed,
        )


def build_wallet(cfg: ClaimConfig) -> KeyWallet:
    network_id = cfg.network.network_id
    if cfg.signing_key:
        return KeyWallet.from_hex(cfg.signing_key, network_id)
    if cfg.signing_key_file:
        return KeyWallet.from_skey_file(cfg.signing_key_file, network_id)
    raise ValueError("no signing key configured")


async def run_claim(cfg: ClaimConfig, target: OutputRef, wait: bool = True) -> ClaimResult:
    """Entry point for a one-shot claim with the configured collaborators."""
    wallet = build_wallet(cfg)
    gateway = BlockfrostGateway(
        cfg.resolved_blockfrost_url(), cfg.blockfrost_project_id, cfg.request_timeout,
    )
    journal = SQLiteClaimJournal(cfg.db_path)
    try:
        await journal.initialize()
        service = AirdropClaimService(cfg, gateway, wallet, journal)
        return await service.claim(target, wait=wait)
    finally:
        await gateway.close()
        await journal.close()


async def run_inspect(cfg: ClaimConfig, target: OutputRef) -> InspectionReport:
    wallet = build_wallet(cfg)
    gateway = BlockfrostGateway(
        cfg.resolved_blockfrost_url(), cfg.blockfrost_project_id, cfg.request_timeout,
    )
    service = AirdropClaimService(cfg, gateway, wallet)
    try:
        return await service.inspect(target)
    finally:
        await gateway.close()
