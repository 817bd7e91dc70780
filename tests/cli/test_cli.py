"""Tests for the colhist command line."""

from pathlib import Path

from typer.testing import CliRunner

from colhist.cli import app

runner = CliRunner()


class TestHistogramCommand:
    """Tests for successful runs."""

    def test_column(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-c", "1", "-s", "-n", "3"])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["0.50,5.00", "1.50,3.00", "2.50,2.00"]

    def test_expression(self, write_csv):
        path = write_csv("1,2\n3,4\n")
        result = runner.invoke(app, [str(path), "-e", "?0 + ?1", "-n", "2"])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["4.00,1.00", "6.00,1.00"]

    def test_stdin(self):
        result = runner.invoke(app, ["-c", "0", "-n", "2"], input="1\n2\n3\n4\n")
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["1.75,2.00", "3.25,2.00"]

    def test_delimiter(self, write_csv):
        path = write_csv("a\t1\nb\t3\n")
        result = runner.invoke(app, [str(path), "-c", "1", "-d", "\t", "-n", "2"])
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["1.50\t1.00", "2.50\t1.00"]

    def test_header_and_count_decimals(self, sample_csv: Path):
        result = runner.invoke(
            app,
            [str(sample_csv), "-c", "1", "-s", "-n", "3", "--header", "--count-decimals", "0"],
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == [
            "bin_label,bin_value",
            "0.50,5",
            "1.50,3",
            "2.50,2",
        ]

    def test_output_file(self, sample_csv: Path, tmp_path: Path):
        output = tmp_path / "out.csv"
        result = runner.invoke(
            app, [str(sample_csv), "-c", "1", "-s", "-n", "3", "-o", str(output)]
        )
        assert result.exit_code == 0, result.output
        assert output.read_text() == "0.50,5.00\n1.50,3.00\n2.50,2.00\n"
        assert "Wrote 3 bins (10 values)" in result.output

    def test_delimiter_from_environment(self, write_csv):
        path = write_csv("a;1\nb;3\n")
        result = runner.invoke(
            app, [str(path), "-c", "1", "-n", "2"], env={"COLHIST_DELIMITER": ";"}
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.splitlines() == ["1.50;1.00", "2.50;1.00"]


class TestSkippedRows:
    """Tests for lenient and strict handling of bad rows."""

    def test_lenient_reports_skipped_rows(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-c", "1", "-n", "3"])
        assert result.exit_code == 0, result.output
        assert "Skipped 1 of 11 rows" in result.output
        assert "failed_parse: 1" in result.output

    def test_quiet_hides_summary(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-c", "1", "-n", "3", "-q"])
        assert result.exit_code == 0, result.output
        assert "Skipped" not in result.output
        assert result.stdout.splitlines() == ["0.50,5.00", "1.50,3.00", "2.50,2.00"]

    def test_skip_missing_under_strict(self, write_csv, tmp_path: Path):
        path = write_csv("1,10\n2\n3,30\n")
        output = tmp_path / "out.csv"
        result = runner.invoke(
            app,
            [str(path), "-c", "1", "-n", "2", "--strict", "--skip-missing", "-o", str(output)],
        )
        assert result.exit_code == 0, result.output
        assert "Skipped 1 of 3 rows" in result.output
        assert "no_value: 1" in result.output
        assert output.read_text() == "15.00,1.00\n25.00,1.00\n"

    def test_short_row_aborts_strict_run(self, write_csv):
        path = write_csv("1,10\n2\n3,30\n")
        result = runner.invoke(app, [str(path), "-c", "1", "--strict"])
        assert result.exit_code == 1
        assert "line 2" in result.output

    def test_strict_aborts(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-c", "1", "--strict"])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert "line 1" in result.output


class TestArgumentErrors:
    """Tests for rejected invocations."""

    def test_requires_column_or_expression(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv)])
        assert result.exit_code == 2
        assert "exactly one of --column or --expr" in result.output

    def test_column_and_expression_conflict(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-c", "1", "-e", "?1"])
        assert result.exit_code == 2

    def test_zero_bins(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-c", "1", "-n", "0"])
        assert result.exit_code == 2

    def test_negative_column(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-c", "-1"])
        assert result.exit_code == 2

    def test_missing_input(self, tmp_path: Path):
        result = runner.invoke(app, [str(tmp_path / "missing.csv"), "-c", "0"])
        assert result.exit_code == 2

    def test_bad_expression(self, sample_csv: Path):
        result = runner.invoke(app, [str(sample_csv), "-e", "?1 +"])
        assert result.exit_code == 1
        assert "invalid expression" in result.output
