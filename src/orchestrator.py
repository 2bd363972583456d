"""
Main Orchestrator for Budget Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. Startup (local storage -> pending share link -> user decision)
2. Entry edits (reducer -> persist -> audit)
3. Data exchange (share link, export, import with merge or replace)
4. Insights (annual summary -> Gemini tips)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Incoming data is validated completely before anything is applied
- Replacing local data requires explicit confirmation; merge is the default
- A failing source (corrupt storage, bad link, bad file) is logged and
  treated as "no data from this source", never as a crash
"""

from enum import Enum
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

from src.agents import InsightResponse, InsightsAgent
from src.audit import AuditLogger, create_correlation_id
from src.budget import (
    BudgetState,
    MergeReport,
    add_entry,
    annual_summary,
    delete_entry,
    find_entry,
    merge_budgets,
    replace_budget,
    toggle_paid,
    update_entry,
)
from src.config import get_settings
from src.models.audit import AuditEventType
from src.models.budget import (
    AnnualBudget,
    AnnualSummary,
    BudgetEntry,
    EntryDraft,
    EntryType,
    MonthlyData,
    empty_year,
)
from src.services.storage import (
    BudgetRepository,
    JsonFileStore,
    KeyValueStoreInterface,
    StorageError,
)
from src.sharing import (
    DecodedShareLink,
    ImportMode,
    ImportRejectedError,
    ShareLinkError,
    build_share_url,
    decode_share,
    encode_budget,
    export_budget,
    load_import_file,
    split_fragment,
)


class ConfirmationRequiredError(Exception):
    """A destructive replace was requested without user confirmation."""
    pass


class StartupSource(str, Enum):
    """Where the budget shown after startup came from."""
    STORAGE = "storage"
    EMPTY = "empty"


class StartupResult(BaseModel):
    """Outcome of BudgetSession.start()."""

    source: StartupSource
    pending_share_link: Optional[DecodedShareLink] = None
    share_link_error: Optional[str] = None

    @property
    def needs_decision(self) -> bool:
        """True when the user must choose merge, replace or ignore."""
        return self.pending_share_link is not None


class BudgetSession:
    """
    Owns the application state and its persistence.

    Flow:
    1. start() loads local data and decodes a share link if one is given
    2. A decoded link is held as pending until the user decides
    3. Every mutation replaces the state and writes it to storage

    Storage writes are fire-and-forget: a failed write is logged and the
    in-memory state stays authoritative.
    """

    def __init__(
        self,
        repository: BudgetRepository,
        year: int,
        insights_agent: Optional[InsightsAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
        share_base_url: str = "http://localhost:8501/",
        max_import_size: Optional[int] = None,
        initial_month: int = 0,
    ):
        self._repository = repository
        self._year = year
        self._audit_logger = audit_logger or AuditLogger()
        self._insights_agent = insights_agent
        self._share_base_url = share_base_url
        self._max_import_size = max_import_size
        self._state = BudgetState(
            budget=AnnualBudget.empty(year),
            year=year,
            month=initial_month,
        )
        self._pending: Optional[DecodedShareLink] = None

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> BudgetState:
        return self._state

    @property
    def budget(self) -> AnnualBudget:
        return self._state.budget

    @property
    def year(self) -> int:
        return self._year

    @property
    def month_data(self) -> MonthlyData:
        return self._state.month_data

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def pending_share_link(self) -> Optional[DecodedShareLink]:
        return self._pending

    def summary(self) -> AnnualSummary:
        return annual_summary(self.budget, self._year)

    def select_month(self, month: int) -> BudgetState:
        self._state = self._state.select_month(month)
        return self._state

    def select_tab(self, tab: Literal["month", "year"]) -> BudgetState:
        self._state = self._state.select_tab(tab)
        return self._state

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    def _load_local(self) -> Optional[AnnualBudget]:
        try:
            budget = self._repository.load()
        except StorageError as e:
            # CorruptDataError included
            self._audit_logger.log_storage_load_failed(
                key=self._repository.key,
                error_message=str(e),
            )
            return None
        if budget is None:
            return None
        if self._year not in budget:
            budget = budget.model_copy(deep=True)
            budget.root[self._year] = empty_year()
        return budget

    def start(self, share_fragment: Optional[str] = None) -> StartupResult:
        """
        Initialize state from local storage (or an empty year) and
        decode the share link, if any, into a pending decision.
        """
        local = self._load_local()
        if local is not None:
            source = StartupSource.STORAGE
            self._state = self._state.with_budget(local)
        else:
            source = StartupSource.EMPTY
            self._state = self._state.with_budget(AnnualBudget.empty(self._year))
        self._audit_logger.log_budget_loaded(year=self._year, source=source.value)

        result = StartupResult(source=source)
        if share_fragment:
            try:
                self._pending = self.receive_share_link(share_fragment)
                result.pending_share_link = self._pending
            except ShareLinkError as e:
                result.share_link_error = str(e)
        return result

    def receive_share_link(self, text: str) -> Optional[DecodedShareLink]:
        """
        Decode a share link and hold it until the user decides.

        Raises ShareLinkError after logging; the local state is untouched.
        """
        parts = split_fragment(text)
        if parts is None:
            return None
        version, token = parts
        try:
            decoded = decode_share(version, token, self._year)
        except ShareLinkError as e:
            self._audit_logger.log_share_link_rejected(error_message=str(e))
            raise
        self._audit_logger.log_share_link_decoded(
            year=self._year,
            version=decoded.version,
            entries=decoded.entry_count,
        )
        self._pending = decoded
        return decoded

    def dismiss_share_link(self) -> None:
        self._pending = None

    def apply_share_link(
        self,
        mode: ImportMode = ImportMode.MERGE,
        confirmed: bool = False,
    ) -> Optional[MergeReport]:
        """Apply the pending share link, then forget it."""
        if self._pending is None:
            raise LookupError("No share link is waiting for a decision")
        report = self.apply_incoming(
            self._pending.budget,
            mode=mode,
            confirmed=confirmed,
        )
        self._pending = None
        return report

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _commit(self, budget: AnnualBudget) -> None:
        self._state = self._state.with_budget(budget)
        try:
            self._repository.save(budget)
        except StorageError as e:
            self._audit_logger.log_storage_save_failed(
                key=self._repository.key,
                error_message=str(e),
            )

    # -------------------------------------------------------------------------
    # Entry edits (current year, selected month)
    # -------------------------------------------------------------------------

    def add_entry(self, entry_type: EntryType, draft: EntryDraft) -> BudgetEntry:
        budget, entry = add_entry(
            self.budget, self._year, self._state.month, entry_type, draft
        )
        self._commit(budget)
        self._audit_logger.log_entry_changed(
            event_type=AuditEventType.ENTRY_ADDED,
            entry_id=entry.id,
            year=self._year,
            month=self._state.month,
            entry_type=entry_type.value,
            details={"category": entry.category, "amount": entry.amount},
        )
        return entry

    def delete_entry(self, entry_type: EntryType, entry_id: str) -> None:
        budget = delete_entry(
            self.budget, self._year, self._state.month, entry_type, entry_id
        )
        self._commit(budget)
        self._audit_logger.log_entry_changed(
            event_type=AuditEventType.ENTRY_DELETED,
            entry_id=entry_id,
            year=self._year,
            month=self._state.month,
            entry_type=entry_type.value,
        )

    def toggle_paid(self, entry_type: EntryType, entry_id: str) -> BudgetEntry:
        budget = toggle_paid(
            self.budget, self._year, self._state.month, entry_type, entry_id
        )
        self._commit(budget)
        entry = find_entry(budget, self._year, self._state.month, entry_type, entry_id)
        self._audit_logger.log_entry_changed(
            event_type=AuditEventType.ENTRY_TOGGLED,
            entry_id=entry_id,
            year=self._year,
            month=self._state.month,
            entry_type=entry_type.value,
            details={"paid": entry.paid},
        )
        return entry

    def start_editing(self, entry_id: str) -> None:
        self._state = self._state.start_editing(entry_id)

    def cancel_editing(self) -> None:
        self._state = self._state.stop_editing()

    def update_entry(
        self,
        entry_type: EntryType,
        entry_id: str,
        draft: EntryDraft,
    ) -> BudgetEntry:
        budget = update_entry(
            self.budget, self._year, self._state.month, entry_type, entry_id, draft
        )
        self._commit(budget)
        self._audit_logger.log_entry_changed(
            event_type=AuditEventType.ENTRY_UPDATED,
            entry_id=entry_id,
            year=self._year,
            month=self._state.month,
            entry_type=entry_type.value,
        )
        return find_entry(budget, self._year, self._state.month, entry_type, entry_id)

    # -------------------------------------------------------------------------
    # Data exchange
    # -------------------------------------------------------------------------

    def apply_incoming(
        self,
        incoming: AnnualBudget,
        mode: ImportMode = ImportMode.MERGE,
        confirmed: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[MergeReport]:
        """
        Merge or replace the local budget with validated incoming data.

        Returns the merge report, or None for a replace.
        Raises ConfirmationRequiredError for an unconfirmed replace.
        """
        if mode is ImportMode.REPLACE:
            if not confirmed:
                raise ConfirmationRequiredError(
                    "Replacing all local data requires explicit confirmation"
                )
            self._commit(replace_budget(self.budget, incoming))
            self._audit_logger.log_budget_replaced(
                years=incoming.years,
                correlation_id=correlation_id,
            )
            return None

        merged, report = merge_budgets(self.budget, incoming)
        self._commit(merged)
        self._audit_logger.log_budget_merged(
            added=report.added,
            skipped=report.skipped,
            years_adopted=report.years_adopted,
            correlation_id=correlation_id,
        )
        return report

    def import_file(
        self,
        raw: bytes,
        mode: ImportMode = ImportMode.MERGE,
        confirmed: bool = False,
        filename: str = "upload",
    ) -> Optional[MergeReport]:
        """
        Validate an uploaded file and apply it.

        Raises ImportRejectedError (state untouched) for invalid files and
        ConfirmationRequiredError for an unconfirmed replace.
        """
        correlation_id = create_correlation_id()
        try:
            incoming, result = load_import_file(
                raw,
                self._year,
                max_size=self._max_import_size,
            )
        except ImportRejectedError as e:
            self._audit_logger.log_import_rejected(
                source=filename,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise

        if mode is ImportMode.REPLACE and not confirmed:
            raise ConfirmationRequiredError(
                "Replacing all local data requires explicit confirmation"
            )

        self._audit_logger.log_import_accepted(
            year=self._year,
            source=filename,
            warnings=len(result.warnings),
            correlation_id=correlation_id,
        )
        return self.apply_incoming(
            incoming,
            mode=mode,
            confirmed=confirmed,
            correlation_id=correlation_id,
        )

    def share_url(self) -> str:
        """Link carrying the non-empty months of the current year."""
        token = encode_budget(self.budget, self._year)
        months = sum(1 for m in self.budget.year(self._year) if not m.is_empty)
        self._audit_logger.log_share_link_created(
            year=self._year,
            months=months,
            length=len(token),
        )
        return build_share_url(self._share_base_url, token)

    def export_file(self) -> tuple[str, str]:
        """
        (filename, JSON text) of the full budget.

        Not logged: the UI builds the download on every render. Call
        record_export() once the file is actually downloaded.
        """
        return export_budget(self.budget, self._year)

    def record_export(self, filename: str) -> None:
        self._audit_logger.log_budget_exported(year=self._year, filename=filename)

    # -------------------------------------------------------------------------
    # Insights
    # -------------------------------------------------------------------------

    async def insights(self) -> InsightResponse:
        """Tips for the current year. Never raises."""
        agent = self._insights_agent or InsightsAgent(audit_logger=self._audit_logger)
        self._insights_agent = agent
        return await agent.get_financial_insights(self.summary())


def create_session(
    store: Optional[KeyValueStoreInterface] = None,
    insights_agent: Optional[InsightsAgent] = None,
    initial_month: int = 0,
) -> BudgetSession:
    """
    Factory function wiring settings, storage, audit logging and the
    insights agent into a session.

    Args:
        store: Key-value store to use. Defaults to the JSON file store in
               the configured data directory.
        insights_agent: Agent to use. Defaults to a Gemini-backed agent,
                        which degrades on its own when unconfigured.
        initial_month: Month selected when the session opens.
    """
    settings = get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    audit_logger = AuditLogger()
    store = store or JsonFileStore(storage_settings.data_dir)
    repository = BudgetRepository(store, key=storage_settings.budget_key)
    insights_agent = insights_agent or InsightsAgent(
        settings=settings.gemini,
        audit_logger=audit_logger,
    )

    return BudgetSession(
        repository=repository,
        year=app_settings.current_year,
        insights_agent=insights_agent,
        audit_logger=audit_logger,
        share_base_url=app_settings.share_base_url,
        max_import_size=app_settings.max_import_size_bytes,
        initial_month=initial_month,
    )
