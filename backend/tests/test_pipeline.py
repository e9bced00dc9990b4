"""
End-to-end tests for the export and distribution pipeline.

Runs both stages against an in-memory control workbook and checks the files
written, the summaries, and the notifications raised.
"""

import pandas as pd
import pytest

from statement_exporter.core.errors import DateMissingError
from statement_exporter.core.notifications import NotificationKind
from statement_exporter.core.pipeline_engine import PipelineEngine
from statement_exporter.io.tabular_store import InMemoryStore

from conftest import DATA_HEADER, OUTPUT_HEADER


@pytest.fixture
def engine(config_loader, store, sink):
    return PipelineEngine(config_loader, store, sink=sink)


class TestScenarios:
    """Worked examples of the export and distribution rules."""

    def test_single_client_row(self, config_loader, sink, folders):
        """Only the Acme row is exported, dated 13-March-25."""
        store = InMemoryStore.from_rows({
            "Master": [["Run Date", "2025-03-13"]],
            "Export Config": [
                ["Client Name", "Data Sheet Name", "New File Name", "File Path"],
                ["Acme", "Data", "Prices", str(folders["out"])],
            ],
            "Data": [
                DATA_HEADER,
                ["Acme", "US123", "Bond A", "Market", "100.5"],
                ["Other", "US999", "Bond B", "Market", "50"],
            ],
        })
        engine = PipelineEngine(config_loader, store, sink=sink)

        result = engine.run(("export",))

        output = folders["out"] / "20250313_Prices.csv"
        assert output.exists()
        assert output.read_text().splitlines() == [
            OUTPUT_HEADER,
            "Acme,US123,Bond A,Market,100.5,13-March-25",
        ]
        assert result.export.exported_count == 1
        assert result.distribution is None

    def test_missing_price_column(self, engine, sink, folders):
        """An entry whose sheet lacks Price is skipped; the others still run."""
        result = engine.run(("export",))

        assert not (folders["out"] / "20250313_Gamma_Statement.csv").exists()
        missing = sink.of_kind(NotificationKind.MISSING_COLUMNS)
        assert len(missing) == 1
        assert "Price" in missing[0].message
        assert missing[0].client_name == "Gamma"

        assert (folders["out"] / "20250313_Acme_Statement.csv").exists()
        assert (folders["out"] / "20250313_Beta_Statement.csv").exists()

    def test_flag_no_is_not_copied(self, engine, folders):
        """Beta is flagged NO: nothing copied, nothing counted."""
        result = engine.run(("distribute",))

        assert not (folders["dest"] / "Beta").exists()
        clients = [r.client_name for r in result.distribution.results]
        assert "Beta" not in clients

    def test_flag_yes_without_source_file(self, engine, sink, folders):
        """Other is flagged YES but has no source file: reported, not counted."""
        result = engine.run(("distribute",))

        not_found = sink.of_kind(NotificationKind.SOURCE_FILE_NOT_FOUND)
        assert [n.client_name for n in not_found] == ["Other"]
        assert result.distribution.copied_count == 1
        assert (folders["dest"] / "Acme" / "20250313_Acme.xlsx").exists()


class TestExportStage:
    """Export stage over the full control workbook."""

    def test_summary(self, engine):
        """Two files written, two entries skipped."""
        result = engine.run(("export",))

        assert result.export.exported_count == 2
        assert result.export.skipped_count == 2
        kinds = {r.client_name: r.error_kind for r in result.export.results if not r.success}
        assert kinds == {
            "Gamma": NotificationKind.MISSING_COLUMNS,
            "Delta": NotificationKind.DATA_SOURCE_NOT_FOUND,
        }

    def test_rows_match_trimmed_client_in_source_order(self, engine, folders):
        """Both Acme rows (one with a trailing space) are exported in order."""
        engine.run(("export",))

        df = pd.read_csv(folders["out"] / "20250313_Acme_Statement.csv", dtype=str)
        assert list(df.columns) == [*DATA_HEADER, "Statement Date"]
        assert df["Cusip_ISIN"].tolist() == ["US123", "US456"]
        assert set(df["Statement Date"]) == {"13-March-25"}

    def test_zero_matches_writes_header_only(self, engine, folders):
        """Beta has no rows in the data sheet but still gets a file."""
        engine.run(("export",))

        output = folders["out"] / "20250313_Beta_Statement.csv"
        assert output.read_text().splitlines() == [OUTPUT_HEADER]

    def test_existing_file_is_overwritten(self, engine, folders):
        """A stale file at the output path is replaced."""
        output = folders["out"] / "20250313_Acme_Statement.csv"
        output.write_text("stale")

        engine.run(("export",))

        assert output.read_text().startswith(OUTPUT_HEADER)

    def test_completion_notification(self, engine, sink):
        """The stage ends with a tally."""
        engine.run(("export",))

        complete = sink.of_kind(NotificationKind.EXPORT_COMPLETE)
        assert len(complete) == 1
        assert complete[0].details == {"exported": 2, "skipped": 2}

    def test_missing_output_folder_is_a_write_failure(self, config_loader, control_tables, sink, tmp_path):
        """A folder that does not exist fails only that entry."""
        control_tables["Export Config"][1][3] = str(tmp_path / "nowhere")
        engine = PipelineEngine(config_loader, InMemoryStore.from_rows(control_tables), sink=sink)

        result = engine.run(("export",))

        failures = sink.of_kind(NotificationKind.FILE_WRITE_FAILURE)
        assert [n.client_name for n in failures] == ["Acme"]
        assert result.export.exported_count == 1


class TestRun:
    """Whole-run behaviour."""

    def test_both_stages_share_one_run_date(self, engine, folders):
        """Export and distribution use the same date prefix."""
        result = engine.run()

        assert result.run_date.compact == "20250313"
        assert result.export.exported_count == 2
        assert result.distribution.copied_count == 1
        assert result.notifications[-1].kind == NotificationKind.DISTRIBUTION_COMPLETE

    def test_missing_date_aborts_before_any_entry(self, config_loader, control_tables, sink, folders):
        """No run date: nothing is exported or copied."""
        control_tables["Master"][0][1] = None
        engine = PipelineEngine(config_loader, InMemoryStore.from_rows(control_tables), sink=sink)

        with pytest.raises(DateMissingError):
            engine.run()

        assert list(folders["out"].iterdir()) == []
        assert list(folders["dest"].iterdir()) == []
        assert [n.kind for n in sink.notifications] == [NotificationKind.DATE_MISSING]

    def test_unparsable_date_aborts(self, config_loader, control_tables, sink):
        control_tables["Master"][0][1] = "not a date"
        engine = PipelineEngine(config_loader, InMemoryStore.from_rows(control_tables), sink=sink)

        with pytest.raises(DateMissingError):
            engine.run(("export",))

    def test_missing_export_config_still_distributes(self, config_loader, control_tables, sink, folders):
        """Without an export table the export stage is empty and reported."""
        del control_tables["Export Config"]
        engine = PipelineEngine(config_loader, InMemoryStore.from_rows(control_tables), sink=sink)

        result = engine.run()

        assert result.export.results == []
        assert result.distribution.copied_count == 1
        assert (folders["dest"] / "Acme" / "20250313_Acme.xlsx").exists()
        missing = sink.of_kind(NotificationKind.DATA_SOURCE_NOT_FOUND)
        assert [n.message for n in missing] == ["Data sheet 'Export Config' not found"]

    def test_missing_distribution_config(self, config_loader, control_tables, sink, folders):
        del control_tables["Distribution Config"]
        engine = PipelineEngine(config_loader, InMemoryStore.from_rows(control_tables), sink=sink)

        result = engine.run()

        assert result.export.exported_count == 2
        assert result.distribution.results == []
        assert list(folders["dest"].iterdir()) == []
        assert "Distribution Config" in sink.of_kind(NotificationKind.DATA_SOURCE_NOT_FOUND)[-1].message

    def test_unknown_stage(self, engine):
        with pytest.raises(ValueError):
            engine.run(("publish",))

    def test_source_folder_override(self, engine, folders, tmp_path):
        """An explicit source folder replaces the master sheet value."""
        empty = tmp_path / "empty"
        empty.mkdir()

        result = engine.run(("distribute",), source_folder=empty)

        assert result.distribution.copied_count == 0
        assert result.notifications[-1].message == "No files were copied"

    def test_result_serializes(self, engine):
        data = engine.run().to_dict()

        assert data["run_date"] == "2025-03-13"
        assert data["export"]["exported_count"] == 2
        assert data["distribution"]["copied_count"] == 1


class TestPreview:
    """Export preview writes nothing."""

    def test_preview(self, engine, folders):
        previews = {p["client_name"]: p for p in engine.preview_export()}

        assert previews["Acme"]["row_count"] == 2
        assert previews["Acme"]["csv"].startswith(OUTPUT_HEADER)
        assert previews["Gamma"]["error_kind"] == "missing_columns"
        assert list(folders["out"].iterdir()) == []
