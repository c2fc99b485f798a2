"""Import invite codes from the legacy browser-storage layout into the canonical store.

The legacy layout kept the same invite in up to three places (a dedicated
code list, a pending-invite list and lists embedded in each realtor record)
and treated a buyer's stored invite code as a fallback match. Each code is
written once here. A code whose owner differs between locations is reported
as a conflict and not imported.
"""

import json
from typing import Any, Iterator, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.models.invite_code import InviteCode, InviteStatus, normalize_code
from src.services.repository import Repository, get_repository, utc_now
from src.utils.errors import InviteCodeCollisionError
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

INVITE_CODES_KEY = "buyhome_invite_codes"
PENDING_INVITES_KEY = "buyhome_pending_invites"
ALL_REALTORS_KEY = "buyhome_all_realtors"
ALL_BUYERS_KEY = "buyhome_all_buyers"


class ImportReport(BaseModel):
    """Summary of a legacy import run."""
    imported: list[str] = Field(default_factory=list)
    skipped_existing: list[str] = Field(default_factory=list)
    conflicts: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Code -> distinct realtor ids found for it"
    )
    malformed: int = 0


class _LegacyEntry(BaseModel):
    """One reference to an invite code found in a legacy storage location."""
    code: str
    realtor_id: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[str] = None
    used: bool = False
    source: str

    @field_validator("realtor_id", "email", "created_at", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        # Numbers are kept as text; other shapes are dropped
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        return value if isinstance(value, str) else None


def _load(snapshot: dict, key: str) -> list:
    raw = snapshot.get(key)
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Legacy storage key is not valid JSON", key=key)
            return []
    return raw if isinstance(raw, list) else []


def _iter_entries(snapshot: dict) -> Iterator[_LegacyEntry]:
    """Yield every invite reference found in the snapshot, in legacy lookup order."""
    for item in _load(snapshot, INVITE_CODES_KEY):
        if isinstance(item, dict):
            yield _LegacyEntry(
                code=normalize_code(item.get("code") or item.get("inviteCode")),
                realtor_id=item.get("realtorId"),
                email=item.get("email"),
                created_at=item.get("createdAt"),
                used=item.get("status") == InviteStatus.USED.value,
                source=INVITE_CODES_KEY,
            )

    for item in _load(snapshot, PENDING_INVITES_KEY):
        if isinstance(item, dict):
            yield _LegacyEntry(
                code=normalize_code(item.get("inviteCode")),
                realtor_id=item.get("realtorId"),
                email=item.get("email"),
                created_at=item.get("createdAt"),
                used=False,
                source=PENDING_INVITES_KEY,
            )

    for realtor in _load(snapshot, ALL_REALTORS_KEY):
        if not isinstance(realtor, dict):
            continue
        for item in realtor.get("pendingInvites") or []:
            if isinstance(item, dict):
                yield _LegacyEntry(
                    code=normalize_code(item.get("inviteCode")),
                    realtor_id=realtor.get("id"),
                    email=item.get("email"),
                    created_at=item.get("createdAt"),
                    used=False,
                    source=ALL_REALTORS_KEY,
                )

    for buyer in _load(snapshot, ALL_BUYERS_KEY):
        if isinstance(buyer, dict) and buyer.get("inviteCode"):
            yield _LegacyEntry(
                code=normalize_code(buyer.get("inviteCode")),
                realtor_id=buyer.get("realtorId"),
                email=buyer.get("email"),
                created_at=buyer.get("createdAt"),
                used=True,
                source=ALL_BUYERS_KEY,
            )


def _first_value(entries: list[_LegacyEntry], attr: str) -> Optional[Any]:
    for entry in entries:
        value = getattr(entry, attr)
        if value:
            return value
    return None


def _build_invite(code: str, entries: list[_LegacyEntry]) -> InviteCode:
    realtor_id = _first_value(entries, "realtor_id")
    used = any(entry.used for entry in entries)
    now = utc_now()
    payload = {
        "code": code,
        "realtor_id": realtor_id,
        "email": _first_value(entries, "email") or "",
        "status": InviteStatus.USED if used else InviteStatus.PENDING,
        "created_at": _first_value(entries, "created_at") or now,
        "used_at": now if used else None,
    }
    try:
        return InviteCode.model_validate(payload)
    except ValidationError:
        # Unparseable legacy timestamp
        payload["created_at"] = now
        return InviteCode.model_validate(payload)


async def import_legacy_snapshot(snapshot: dict, repository: Optional[Repository] = None) -> ImportReport:
    """
    Collapse a legacy storage snapshot into the canonical invite store.

    `snapshot` maps legacy storage keys to either JSON strings (as stored in
    the browser) or already-parsed lists.
    """
    repository = repository or get_repository()
    report = ImportReport()

    grouped: dict[str, list[_LegacyEntry]] = {}
    for entry in _iter_entries(snapshot):
        if not entry.code:
            report.malformed += 1
            continue
        grouped.setdefault(entry.code, []).append(entry)

    with log_timing("import_legacy_snapshot", logger=logger, codes_found=len(grouped)):
        for code, entries in grouped.items():
            owners = sorted({entry.realtor_id for entry in entries if entry.realtor_id})
            if len(owners) > 1:
                report.conflicts[code] = owners
                logger.warning(
                    "Conflicting owners for legacy invite code",
                    code=code,
                    owners=owners,
                    sources=sorted({entry.source for entry in entries}),
                )
                continue

            try:
                invite = _build_invite(code, entries)
            except ValidationError as e:
                report.malformed += 1
                logger.warning("Skipping malformed legacy invite", code=code, error=str(e))
                continue

            if await repository.get_invite(invite.code) is not None:
                report.skipped_existing.append(invite.code)
                continue

            try:
                await repository.insert_invite(invite)
            except InviteCodeCollisionError:
                report.skipped_existing.append(invite.code)
                continue
            report.imported.append(invite.code)

    logger.info(
        "Legacy invite import finished",
        imported=len(report.imported),
        skipped_existing=len(report.skipped_existing),
        conflicts=len(report.conflicts),
        malformed=report.malformed,
    )
    return report
