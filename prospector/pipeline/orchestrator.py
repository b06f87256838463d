from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel

from ..classification.junk_filter import JunkClassifier
from ..ingestion.csv_import import parse_prospect_csv
from ..storage.base import ProspectStore
from ..storage.errors import BatchWriteError, FailureKind, StoreError
from ..storage.writer import DEFAULT_BATCH_SIZE, ProspectWriter

logger = logging.getLogger(__name__)


class ImportState(str, Enum):
    idle = "idle"
    parsing = "parsing"
    classifying = "classifying"
    saving = "saving"
    done = "done"


class ImportStatus(str, Enum):
    succeeded = "succeeded"
    validation_failed = "validation_failed"
    no_records_parsed = "no_records_parsed"
    all_records_excluded = "all_records_excluded"
    persistence_failed = "persistence_failed"


MESSAGES: dict[ImportStatus, str] = {
    ImportStatus.succeeded: "{imported} prospects importés, {excluded} exclus (chaînes, banques, services publics).",
    ImportStatus.validation_failed: "Veuillez indiquer une ville et coller les données à importer.",
    ImportStatus.no_records_parsed: (
        "Aucun prospect valide trouvé. Vérifiez que l'export est séparé par des "
        "points-virgules et contient une colonne 'name'."
    ),
    ImportStatus.all_records_excluded: (
        "Tous les prospects ont été exclus par le filtre (grandes enseignes, "
        "banques, services publics). Rien n'a été enregistré."
    ),
    ImportStatus.persistence_failed: "L'enregistrement a échoué ({kind}). {committed} prospects ont été enregistrés avant l'erreur.",
}


class ImportResult(BaseModel):
    status: ImportStatus
    city: str = ""
    imported: int = 0
    excluded: int = 0
    message: str
    failure_kind: FailureKind | None = None
    committed: int = 0

    @property
    def ok(self) -> bool:
        return self.status is ImportStatus.succeeded


class ImportOrchestrator:
    """
    Runs one import: parse -> classify -> filter -> save.

    Instances are single use. ``state`` follows
    idle -> parsing -> classifying -> saving -> done and drops back to idle
    on any early exit.
    """

    def __init__(
        self,
        store: ProspectStore,
        classifier: JunkClassifier,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.writer = ProspectWriter(store, batch_size=batch_size)
        self.classifier = classifier
        self.state = ImportState.idle
        self._used = False

    def _finish(self, status: ImportStatus, city: str, **fields) -> ImportResult:
        self.state = ImportState.done if status is ImportStatus.succeeded else ImportState.idle
        values = {"imported": 0, "excluded": 0, "kind": "", "committed": 0, **fields}
        if "failure_kind" in fields:
            values["kind"] = fields["failure_kind"].value
        result = ImportResult(
            status=status,
            city=city,
            message=MESSAGES[status].format(**values),
            **fields,
        )
        logger.info("Import for %r finished: %s", city, status.value)
        return result

    def run(self, city: str, raw_text: str) -> ImportResult:
        if self._used:
            raise RuntimeError("ImportOrchestrator instances are single use")
        self._used = True

        city = (city or "").strip()
        if not city or not (raw_text or "").strip():
            return self._finish(ImportStatus.validation_failed, city)

        self.state = ImportState.parsing
        candidates = parse_prospect_csv(raw_text, city)
        if not candidates:
            return self._finish(ImportStatus.no_records_parsed, city)

        self.state = ImportState.classifying
        exclusions = self.classifier.find_exclusions([c.name for c in candidates])
        kept = [c for c in candidates if c.name not in exclusions]
        excluded = len(candidates) - len(kept)
        if not kept:
            return self._finish(ImportStatus.all_records_excluded, city, excluded=excluded)

        self.state = ImportState.saving
        try:
            self.writer.append_batch(kept)
        except StoreError as exc:
            committed = exc.committed if isinstance(exc, BatchWriteError) else 0
            logger.error("Import for %r could not be saved: %s", city, exc.message)
            return self._finish(
                ImportStatus.persistence_failed,
                city,
                excluded=excluded,
                failure_kind=exc.kind,
                committed=committed,
            )

        return self._finish(ImportStatus.succeeded, city, imported=len(kept), excluded=excluded)
