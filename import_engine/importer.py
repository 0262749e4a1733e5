"""
import_engine.importer - Top-level orchestrator.

Coordinates csv_parser → row_processor → per-row commit, runs the
optional destroy-pre-existing sweep and produces a structured
ImportReport.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

from sqlalchemy.orm import Session

import config
from db.engine import get_session
from import_engine.csv_parser import RawRow, RowReader
from import_engine.errors import ImportFileError, RowError
from import_engine.import_log import run_log
from import_engine.report import FAILED, UPDATED, ImportOutcome, ImportReport
from import_engine.row_processor import RowProcessor, RunContext
from import_engine.settings import ImportSettings, load_settings
from services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class ProductImportEngine:
    """
    Runs every row of one file through the RowProcessor in file order.

    A row that blows up is rolled back and reported as failed; the rest
    of the file still imports.  Only errors raised by the row source
    itself (an unreadable file) escape run().
    """

    def __init__(self, catalog: CatalogService, settings: ImportSettings):
        self.catalog = catalog
        self.settings = settings
        self.processor = RowProcessor(catalog, settings)

    def run(self, rows: Iterable[tuple[int, RawRow]],
            report: ImportReport | None = None) -> ImportReport:
        report = report if report is not None else ImportReport()
        ctx = RunContext(preexisting_ids=frozenset(self.catalog.product_ids()))

        for line_no, row in rows:
            logger.info(f"Current row: {row!r}")
            outcome = self._process_row(ctx, line_no, row)
            if outcome.status == UPDATED and outcome.product_id in ctx.preexisting_ids:
                ctx.matched_ids.add(outcome.product_id)
            report.outcomes.append(outcome)

        if self.settings.destroy_preexisting_after_import:
            report.destroyed = self.destroy_preexisting(ctx)
        return report

    def _process_row(self, ctx: RunContext, line_no: int, row: RawRow) -> ImportOutcome:
        try:
            with self.catalog.row_scope():
                return self.processor.process(ctx, line_no, row)
        except RowError as exc:
            logger.error(f"Row {line_no} could not be imported: {exc}")
            return ImportOutcome(line_no, FAILED, str(exc))
        except Exception as exc:
            logger.exception(f"Row {line_no} failed unexpectedly: {row!r}")
            return ImportOutcome(line_no, FAILED, f"Unexpected: {exc}")

    def destroy_preexisting(self, ctx: RunContext) -> int:
        """
        Delete every product that existed before the run, except those a
        row in this run added a variant to.  Products created by the run
        are never in the snapshot, so they always survive.
        """
        destroyed = 0
        for product_id in sorted(ctx.preexisting_ids - ctx.matched_ids):
            try:
                with self.catalog.row_scope():
                    product = self.catalog.get_product(product_id)
                    if product is None:
                        continue
                    self.catalog.delete_product(product)
                destroyed += 1
            except Exception:
                logger.exception(f"Could not destroy pre-existing product {product_id}")
        logger.info(f"Destroyed {destroyed} product(s) that existed before the import")
        return destroyed


def run_import(
    file_path: str | Path,
    settings: ImportSettings | None = None,
    *,
    session: Session | None = None,
) -> ImportReport:
    """
    Import a delimited data file into the catalog.

    Parameters
    ----------
    file_path : the staged data file
    settings  : column mapping and run options (default: config.IMPORT_SETTINGS)
    session   : reuse an open session instead of opening (and closing) one

    Returns
    -------
    ImportReport - status "notice" unless the file itself could not be
    read, with one outcome per data row
    """
    if settings is None:
        settings = load_settings(config.IMPORT_SETTINGS)
    file_path = Path(file_path)
    report = ImportReport()

    with run_log(settings.log_file_path):
        logger.info(f"Columns setting: {settings.column_mapping!r}")
        logger.info(f"Importing products for {file_path.name} began at {datetime.now()}")

        own_session = session is None
        if own_session:
            session = get_session()
        try:
            reader = RowReader(
                file_path,
                delimiter=settings.field_delimiter,
                skip=settings.header_rows_to_skip,
                encoding=settings.encoding,
            )
            settings.columns.validate(reader.width())

            engine = ProductImportEngine(CatalogService(session), settings)
            engine.run(reader, report)
            logger.info(f"Importing products for {file_path.name} completed at {datetime.now()}")
        except ImportFileError as exc:
            session.rollback()
            logger.error(f"An error occurred during import, please check file and try again. ({exc})")
            report.fail(str(exc))
        except Exception as exc:
            session.rollback()
            logger.exception(f"An error occurred during import ({exc})")
            report.fail(f"Fatal import error: {exc}")
        finally:
            if own_session:
                session.close()

    return report
