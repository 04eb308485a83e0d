"""Run the claim detection passes and persist their candidates."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from reclaimer.domain.time_windows import utcnow

from .passes import CLAIM_PASSES
from .snapshot import load_snapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from reclaimer.domain.ports.unit_of_work import ReconciliationUnitOfWork
    from reclaimer.domain.time_windows import Clock

    from .passes import ClaimPass

log = getLogger(__name__)


@dataclass(slots=True)
class AnalysisResult:
    created: dict[str, int] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def total_created(self) -> int:
        return sum(self.created.values())


class ClaimAnalyzer:
    """Execute every pass in its own unit of work so one failure cannot undo another."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], ReconciliationUnitOfWork],
        *,
        clock: Clock = utcnow,
        passes: Sequence[ClaimPass] = CLAIM_PASSES,
    ) -> None:
        self.unit_of_work_factory = unit_of_work_factory
        self.passes = tuple(passes)
        self._clock = clock

    def run(self, *, ledger_synced: bool = True) -> AnalysisResult:
        """Run all passes.

        Passes that compare against return receipts are skipped when
        ``ledger_synced`` is false, since receipts for the latest window may be missing.
        """

        result = AnalysisResult()
        for claim_pass in self.passes:
            if claim_pass.needs_synced_ledger and not ledger_synced:
                log.warning(f"Skipping claim pass {claim_pass.name}: ledger data unavailable")
                result.skipped.append(claim_pass.name)
                continue
            try:
                created = self._run_pass(claim_pass)
            except Exception as exc:
                log.exception(f"Claim pass {claim_pass.name} failed")
                result.errors.append(f"{claim_pass.name}: {exc}")
                created = 0
            result.created[claim_pass.name] = created

        log.info(
            f"Claim analysis finished: created={result.total_created}, passes={result.created}"
        )
        return result

    def _run_pass(self, claim_pass: ClaimPass) -> int:
        now = self._clock()
        with self.unit_of_work_factory() as uow:
            snapshot = load_snapshot(uow.repositories)
            candidates = claim_pass.detect(snapshot)
            for item in candidates:
                item.created_at = now
                item.updated_at = now
                uow.repositories.claimable_items.add(item)
            uow.commit()
        if candidates:
            log.info(f"Claim pass {claim_pass.name} created {len(candidates)} item(s)")
        return len(candidates)
