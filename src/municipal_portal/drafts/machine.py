"""Step-gated state machine for authoring and submitting a claim."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from municipal_portal.claims.submission import ClaimSubmission, SubmissionResult
from municipal_portal.core.errors import ConfigError, PortalError, UploadError, ValidationError
from municipal_portal.drafts.models import ClaimDraft, DraftStep, LocationSelection, Priority
from municipal_portal.forms.evaluator import field_errors
from municipal_portal.forms.validators import validate_required
from municipal_portal.services.models import FieldKind, ServiceDefinition
from municipal_portal.services.registry import ServiceRegistry
from municipal_portal.uploads.pipeline import AttachmentPipeline, StagedFile, validate_staged_file

if TYPE_CHECKING:
    from municipal_portal.sync.engine import SyncEngine

logger = logging.getLogger(__name__)

_BASE_FIELDS = ("service_id", "title", "description")


class ClaimDraftMachine:
    """Drives a ClaimDraft through base info, service fields and submission.

    Step 2 is only entered when the selected service declares extra fields;
    otherwise continuing from step 1 submits directly. A failed submission
    returns the draft to the step it was submitted from, with its data intact.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        pipeline: AttachmentPipeline,
        submission: ClaimSubmission,
        sync: SyncEngine | None = None,
        draft: ClaimDraft | None = None,
    ) -> None:
        self._registry = registry
        self._pipeline = pipeline
        self._submission = submission
        self._sync = sync
        self.draft = draft or ClaimDraft()
        self.result: SubmissionResult | None = None
        self.last_error: PortalError | None = None
        self.used_local_attachments = False

    # -- properties ----------------------------------------------------------

    @property
    def step(self) -> DraftStep:
        return self.draft.step

    @property
    def service(self) -> ServiceDefinition | None:
        if not self.draft.service_id:
            return None
        return self._registry.lookup(self.draft.service_id)

    @property
    def claim_id(self) -> str | None:
        return self.result.claim_id if self.result else None

    @property
    def max_files(self) -> int:
        return self._pipeline.config.max_files

    # -- editing -------------------------------------------------------------

    def select_service(self, service_id: str) -> None:
        """Choose the service. Switching services discards extra-field answers."""
        self._require_step(DraftStep.BASE_INFO)
        self._registry.lookup(service_id)
        if service_id != self.draft.service_id:
            self.draft.extra_field_values = {}
        self.draft.service_id = service_id

    def update(
        self,
        *,
        title: str | None = None,
        description: str | None = None,
        priority: Priority | str | None = None,
    ) -> None:
        self._require_editable()
        if title is not None:
            self.draft.title = title
        if description is not None:
            self.draft.description = description
        if priority is not None:
            self.draft.priority = Priority(priority)

    def set_location(self, location: LocationSelection) -> None:
        self._require_editable()
        self.draft.location_address = location.address
        self.draft.latitude = location.latitude
        self.draft.longitude = location.longitude

    def set_extra_value(self, name: str, value: str) -> None:
        self._require_editable()
        service = self.service
        if service is None or service.field(name) is None:
            raise ConfigError(
                f"Field {name!r} is not defined for service {self.draft.service_id!r}"
            )
        self.draft.extra_field_values[name] = value

    def apply_qr_result(self, name: str, decoded: str) -> None:
        """Store a QR decoder result in a QR field."""
        service = self.service
        field = service.field(name) if service else None
        if field is None or field.kind != FieldKind.QR:
            raise ConfigError(f"Field {name!r} is not a QR field")
        self.set_extra_value(name, decoded)

    def add_files(self, files: Iterable[StagedFile]) -> list[StagedFile]:
        """Stage attachments, keeping at most ``max_files`` of the combined set.

        Raises:
            ValidationError: If a file has a disallowed type or size; nothing
                is staged in that case.
        """
        self._require_editable()
        incoming = list(files)
        problems: list[str] = []
        for f in incoming:
            try:
                validate_staged_file(f, self._pipeline.config)
            except UploadError as exc:
                problems.append(f"{f.file_name}: {exc}")
        if problems:
            raise ValidationError({"attachments": problems})

        combined = self.draft.staged_files + incoming
        if len(combined) > self.max_files:
            logger.warning(
                "Attachment limit is %d; dropping %d file(s)",
                self.max_files, len(combined) - self.max_files,
            )
        self.draft.staged_files = combined[: self.max_files]
        return list(self.draft.staged_files)

    def remove_file(self, index: int) -> None:
        self._require_editable()
        del self.draft.staged_files[index]

    # -- validation ----------------------------------------------------------

    def base_errors(self) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        for name in _BASE_FIELDS:
            err = validate_required(getattr(self.draft, name))
            if err:
                errors[name] = [err]
        return errors

    def errors(self) -> dict[str, list[str]]:
        """Inline errors for the current step."""
        if self.step == DraftStep.SERVICE_FIELDS and self.service is not None:
            return field_errors(self.service, self.draft.extra_field_values)
        return self.base_errors()

    @property
    def can_continue(self) -> bool:
        return self.step in (DraftStep.BASE_INFO, DraftStep.SERVICE_FIELDS) and not self.errors()

    # -- transitions ---------------------------------------------------------

    async def advance(self) -> DraftStep:
        """Continue from the current step.

        From step 1 this enters step 2, or submits when the service has no
        extra fields. From step 2 it submits.

        Raises:
            ValidationError: If the current step is incomplete.
        """
        if self.step == DraftStep.BASE_INFO:
            self._check_base()
            if self.service is not None and self.service.has_extra_fields:
                self.draft.step = DraftStep.SERVICE_FIELDS
                return self.step
        await self.submit()
        return self.step

    def go_back(self) -> DraftStep:
        """Return to step 1, keeping everything entered so far."""
        if self.step != DraftStep.SERVICE_FIELDS:
            raise ValueError("Already at the first step.")
        self.draft.step = DraftStep.BASE_INFO
        return self.step

    async def submit(self) -> SubmissionResult:
        """Upload attachments and submit the claim.

        Upload failures never block submission: local references are sent
        instead. Any other failure leaves the draft on the step it was
        submitted from and is re-raised for the caller to show.
        """
        origin = self.step
        if origin not in (DraftStep.BASE_INFO, DraftStep.SERVICE_FIELDS):
            raise ValueError(f"Cannot submit a draft in state {origin!r}")
        self._check_base()
        service = self.service
        if service is not None and service.has_extra_fields:
            if origin == DraftStep.BASE_INFO:
                raise ValueError("Service-specific fields must be completed first.")
            errors = field_errors(service, self.draft.extra_field_values)
            if errors:
                raise ValidationError(errors)

        self.draft.step = DraftStep.SUBMITTING
        self.last_error = None
        try:
            attachments, degraded = await self._pipeline.upload_or_fallback(
                self.draft.staged_files
            )
            self.used_local_attachments = degraded
            result = await self._submission.submit(self.draft.model_copy(deep=True), attachments)
        except PortalError as exc:
            self.draft.step = origin
            self.last_error = exc
            raise
        except BaseException:
            self.draft.step = origin
            raise

        self.result = result
        self.draft.step = DraftStep.SUBMITTED
        self.draft.staged_files = []
        await self._reconcile(result.claim_id)
        return result

    # -- internals -----------------------------------------------------------

    async def _reconcile(self, claim_id: str) -> None:
        if self._sync is None:
            return
        try:
            await self._sync.refresh_claim_by_id(claim_id)
        except PortalError as exc:
            # The claim exists server-side; the next poll will pick it up.
            logger.warning("Could not fetch new claim %s after submit: %s", claim_id, exc)

    def _check_base(self) -> None:
        errors = self.base_errors()
        if errors:
            raise ValidationError(errors)

    def _require_step(self, step: DraftStep) -> None:
        if self.step != step:
            raise ValueError(f"Action only allowed in step {step!r}, draft is {self.step!r}")

    def _require_editable(self) -> None:
        if self.step not in (DraftStep.BASE_INFO, DraftStep.SERVICE_FIELDS):
            raise ValueError(f"Draft cannot be edited in state {self.step!r}")
