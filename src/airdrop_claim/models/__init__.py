"""Data models for the airdrop_claim client."""

from airdrop_claim.models.plutus import Constr, PlutusBytes, PlutusData, PlutusInt, PlutusList
from airdrop_claim.models.records import (
    AirdropRecord,
    AssetId,
    ClaimApproval,
    ClaimAttempt,
    Claimant,
    ClaimPlan,
    ClaimRequest,
    ClaimResult,
    InspectionReport,
    OutputRef,
    PlannedOutput,
    Spent,
    SpentMarker,
    Unspent,
)
from airdrop_claim.models.chain import LOVELACE_PER_ADA, ProtocolParams, Utxo, Value
from airdrop_claim.models.config import BLOCKFROST_URLS, ClaimConfig, Network

__all__ = [
    "Constr", "PlutusBytes", "PlutusData", "PlutusInt", "PlutusList",
    "AirdropRecord", "AssetId", "ClaimApproval", "ClaimAttempt", "Claimant",
    "ClaimPlan", "ClaimRequest", "ClaimResult", "InspectionReport", "OutputRef",
    "PlannedOutput", "Spent", "SpentMarker", "Unspent",
    "LOVELACE_PER_ADA", "ProtocolParams", "Utxo", "Value",
    "BLOCKFROST_URLS", "ClaimConfig", "Network",
]
