#!/usr/bin/env python3
"""
Migration Orchestrator

Runs the phases strictly in sequence, never overlapping:

    1. List and describe the source tables
    2. Create every destination table and classify its materialized types
    3. Copy every table's rows
    4. Reset auto-increment sequences
    5. Link foreign keys (opt-in)

A dry run stops after step 1 and prints the statements it would execute.
"""

import logging
from typing import List

from core.classifier import DestinationTypeClassifier
from core.copier import BatchCopier
from core.ddl import DDLSynthesizer
from core.errors import ConfigError
from core.identifiers import mask_credentials
from core.introspector import SchemaIntrospector
from core.linker import ConstraintLinker
from core.schema_ir import MigrationContext, TableDescriptor

logger = logging.getLogger(__name__)

class Migrator:
    def __init__(self, config, source, destination=None):
        self.config = config
        self.source = source
        self.destination = destination

        self.introspector = SchemaIntrospector(source)
        self.ddl = DDLSynthesizer(destination, config.schema)
        self.classifier = DestinationTypeClassifier(destination, config.schema)
        self.copier = BatchCopier(
            source,
            destination,
            schema=config.schema,
            page_size=config.batch_size,
            row_fallback=config.debug_on_error,
            empty_string_as_null=config.empty_string_as_null
        )
        self.linker = ConstraintLinker(destination, config.schema)

    def run(self) -> MigrationContext:
        context = MigrationContext(dry_run=self.config.dry_run)

        names = self.introspector.list_tables(self.config.include_tables, self.config.exclude_tables)
        if not names:
            logger.info("No tables to migrate (check INCLUDE_TABLES / EXCLUDE_TABLES)")
            return context

        logger.info(f"Found {len(names)} table(s): {', '.join(names)}")
        tables = self._describe(names, context)

        if self.config.dry_run:
            self._plan(tables, context)
            self.print_report(context)
            return context

        if self.destination is None:
            raise ConfigError("A PostgreSQL destination is required unless running dry")

        logger.info("=== Phase: create tables ===")
        for table in tables:
            context.report_for(table.name).statements.extend(self.ddl.create_table(table))
            self.classifier.classify_table(table.name, context)

        logger.info("=== Phase: copy data ===")
        for table in tables:
            self.copier.copy_table(table.name, context)

        if self.config.reset_sequences:
            logger.info("=== Phase: reset sequences ===")
            for table in tables:
                sql = self.ddl.reset_sequence(table)
                if sql:
                    context.report_for(table.name).statements.append(sql)

        if self.config.add_foreign_keys:
            logger.info("=== Phase: link foreign keys ===")
            migrated = [table.name for table in tables]
            for table in tables:
                context.report_for(table.name).statements.extend(
                    self.linker.link_table(table, migrated, context)
                )
        else:
            logger.info("Foreign keys not linked (ADD_FOREIGN_KEYS is off)")

        logger.info(f"Migration complete: {len(tables)} table(s), {context.total_rows:,} row(s)")
        self.print_report(context)
        return context

    def _describe(self, names: List[str], context: MigrationContext) -> List[TableDescriptor]:
        tables = []
        for name in names:
            table = self.introspector.describe_table(name)
            context.add_table(table)
            tables.append(table)
        return tables

    def _plan(self, tables: List[TableDescriptor], context: MigrationContext):
        """Fill the report with what a real run would execute"""
        migrated = [table.name for table in tables]
        for table in tables:
            report = context.report_for(table.name)
            report.rows = self.source.count_rows(table.name)
            report.statements.extend(self.ddl.build_statements(table))
            if self.config.reset_sequences:
                sql = self.ddl.reset_sequence_sql(table)
                if sql:
                    report.statements.append(sql)
            if self.config.add_foreign_keys:
                for fk in table.foreign_keys:
                    if fk.ref_table in migrated:
                        report.statements.append(self.linker.foreign_key_sql(table, fk))
                    else:
                        context.warn(f"{table.name}: foreign key to {fk.ref_table} skipped (table not migrated)")

    def print_report(self, context: MigrationContext):
        title = "MIGRATION DRY RUN REPORT" if context.dry_run else "MIGRATION REPORT"
        print("\n" + "=" * 70)
        print(title)
        print("=" * 70)
        print(f"Source: {self.config.sqlite_path}")
        target = mask_credentials(self.config.pg_uri) if self.config.pg_uri else "(none)"
        print(f"Target: {target} (schema {self.config.schema})")

        print("\n" + "-" * 70)
        print("TABLES:")
        print("-" * 70)
        for report in context.reports.values():
            print(f"  {report.name}")
            print(f"      Columns: {report.columns}")
            print(f"      Rows: {report.rows:,}")

        if context.dry_run:
            print("\n" + "-" * 70)
            print("STATEMENTS:")
            print("-" * 70)
            print(f"{self.ddl.schema_statement()};")
            for report in context.reports.values():
                for sql in report.statements:
                    print(f"{sql};")

        if context.warnings:
            print("\n" + "-" * 70)
            print("WARNINGS:")
            print("-" * 70)
            for warning in context.warnings:
                print(f"  ! {warning}")

        print("\n" + "-" * 70)
        print("SUMMARY:")
        print("-" * 70)
        print(f"  Total Tables: {len(context.reports)}")
        print(f"  Total Rows: {context.total_rows:,}")
        print(f"  Foreign Keys: {'linked' if self.config.add_foreign_keys else 'skipped'}")
        print("=" * 70 + "\n")
