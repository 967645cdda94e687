"""Tests for fastld CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import vcf_text
from fastld.cli import app
from fastld.ld.io import HEADER
from fastld.utils.logging import setup_logging

runner = CliRunner()

EXPECTED_LINES = [
    "1\t100\t200\t4\t1.000000\t0.250000\t1.000000",
    "1\t100\t300\t4\t0.333333\t0.125000\t1.000000",
    "1\t200\t300\t4\t0.333333\t0.125000\t1.000000",
]

pytestmark = pytest.mark.tier1


@pytest.fixture(autouse=True)
def restore_logging():
    """Point loguru back at the real stderr after each invocation."""
    yield
    setup_logging()


def test_cli_help():
    """Test that --help lists the commands and how to run a scan."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "r2" in result.output
    assert "compare" in result.output
    assert "--verbose" in result.output
    assert "fastld r2 INPUT" in result.output


def test_cli_bare_path_rejected(two_sample_vcf: Path):
    """Test that the input path is only accepted after the r2 command."""
    result = runner.invoke(app, [str(two_sample_vcf)])

    assert result.exit_code != 0
    assert EXPECTED_LINES[0] not in result.output



def test_cli_version():
    """Test that --version shows version number."""
    import fastld

    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert fastld.__version__ in result.output


def test_cli_r2_help():
    """Test that r2 --help shows its options."""
    result = runner.invoke(app, ["r2", "--help"])
    assert result.exit_code == 0
    assert "--max-distance" in result.output
    assert "--min-r2" in result.output
    assert "--on-malformed" in result.output


def test_cli_r2_writes_report(two_sample_vcf: Path, output_dir: Path):
    """Test that r2 -o writes the report file."""
    output = output_dir / "out.ld.txt"

    result = runner.invoke(app, ["r2", str(two_sample_vcf), "-o", str(output)])

    assert result.exit_code == 0
    assert output.read_text().splitlines() == EXPECTED_LINES
    assert "LD report written to" in result.output


def test_cli_r2_log_file(two_sample_vcf: Path, output_dir: Path):
    """Test that r2 -o writes a run log next to the report."""
    output = output_dir / "out.ld.txt"

    result = runner.invoke(app, ["r2", str(two_sample_vcf), "-o", str(output)])

    assert result.exit_code == 0
    log_path = output_dir / "out.ld.txt.log.txt"
    assert log_path.exists()

    log_content = log_path.read_text()
    assert "fastld Version" in log_content
    assert "n_samples = 2" in log_content
    assert "n_pairs_reported = 3" in log_content
    assert "max_distance = 1000000" in log_content
    assert "##" in log_content


def test_cli_r2_stdout(two_sample_vcf: Path):
    """Test that without -o the report goes to stdout."""
    result = runner.invoke(app, ["r2", str(two_sample_vcf)])

    assert result.exit_code == 0
    for line in EXPECTED_LINES:
        assert line in result.output


def test_cli_r2_stdin():
    """Test that '-' reads the VCF from stdin."""
    text = vcf_text(
        ["S1", "S2"],
        [("1", 100, ["0|0", "1|1"]), ("1", 200, ["0|0", "1|1"])],
    )

    result = runner.invoke(app, ["r2", "-"], input=text)

    assert result.exit_code == 0
    assert EXPECTED_LINES[0] in result.output


def test_cli_r2_thresholds(two_sample_vcf: Path, output_dir: Path):
    """Test that --max-distance and --min-r2 narrow the report."""
    output = output_dir / "out.ld.txt"

    result = runner.invoke(
        app,
        [
            "r2",
            str(two_sample_vcf),
            "--max-distance",
            "150",
            "--min-r2",
            "0.5",
            "-o",
            str(output),
        ],
    )

    assert result.exit_code == 0
    assert output.read_text().splitlines() == [EXPECTED_LINES[0]]


def test_cli_r2_header(two_sample_vcf: Path, output_dir: Path):
    """Test that --header writes the column line first."""
    output = output_dir / "out.ld.txt"

    result = runner.invoke(
        app, ["r2", str(two_sample_vcf), "--header", "-o", str(output)]
    )

    assert result.exit_code == 0
    assert output.read_text().splitlines() == [HEADER, *EXPECTED_LINES]


def test_cli_r2_missing_input(tmp_path: Path):
    """Test that r2 fails gracefully with a nonexistent input."""
    result = runner.invoke(app, ["r2", str(tmp_path / "missing.vcf")])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "not found" in result.output.lower()


def test_cli_r2_missing_header(tmp_path: Path):
    """Test that a VCF without a #CHROM line exits with code 1."""
    path = tmp_path / "bad.vcf"
    path.write_text("##fileformat=VCFv4.2\n")

    result = runner.invoke(app, ["r2", str(path)])

    assert result.exit_code == 1
    assert "#CHROM" in result.output


def test_cli_r2_missing_header_creates_no_output(tmp_path: Path, output_dir: Path):
    """Test that a header error leaves no empty report or run log behind."""
    path = tmp_path / "bad.vcf"
    path.write_text("##fileformat=VCFv4.2\n")
    output = output_dir / "out.ld.txt"

    result = runner.invoke(app, ["r2", str(path), "-o", str(output)])

    assert result.exit_code == 1
    assert not output.exists()
    assert not (output_dir / "out.ld.txt.log.txt").exists()



def test_cli_r2_malformed_record(write_vcf, output_dir: Path):
    """Test that a malformed record exits with code 1 and names the line."""
    path = write_vcf(["S1"], [("1", 100, ["0|1"]), ("1", 200, ["0/1"])])

    result = runner.invoke(
        app, ["r2", str(path), "-o", str(output_dir / "out.ld.txt")]
    )

    assert result.exit_code == 1
    assert "line 5" in result.output


def test_cli_r2_skip_malformed(write_vcf, output_dir: Path):
    """Test that --on-malformed skip continues past bad records."""
    path = write_vcf(
        ["S1", "S2"],
        [
            ("1", 100, ["0|0", "1|1"]),
            ("1", 150, ["0/0", "1/1"]),
            ("1", 200, ["0|0", "1|1"]),
        ],
    )
    output = output_dir / "out.ld.txt"

    result = runner.invoke(
        app, ["r2", str(path), "--on-malformed", "skip", "-o", str(output)]
    )

    assert result.exit_code == 0
    assert output.read_text().splitlines() == [EXPECTED_LINES[0]]
    log_content = (output_dir / "out.ld.txt.log.txt").read_text()
    assert "n_malformed_skipped = 1" in log_content


def test_cli_r2_invalid_policy(two_sample_vcf: Path):
    """Test that an unknown --on-malformed value is rejected."""
    result = runner.invoke(app, ["r2", str(two_sample_vcf), "--on-malformed", "warn"])

    assert result.exit_code == 1
    assert "--on-malformed" in result.output


def test_cli_r2_unsorted(write_vcf):
    """Test that unsorted input exits with code 1 unless checking is disabled."""
    path = write_vcf(
        ["S1", "S2"],
        [("1", 300, ["0|0", "1|1"]), ("1", 200, ["0|0", "1|1"])],
    )

    result = runner.invoke(app, ["r2", str(path)])
    assert result.exit_code == 1
    assert "sorted" in result.output

    result = runner.invoke(app, ["r2", str(path), "--no-check-order"])
    assert result.exit_code == 0
    assert "300\t200" not in result.output


def test_cli_r2_invalid_min_r2(two_sample_vcf: Path):
    """Test that an out-of-range --min-r2 exits with code 1."""
    result = runner.invoke(app, ["r2", str(two_sample_vcf), "--min-r2", "2"])

    assert result.exit_code == 1
    assert "min_r2" in result.output


def test_cli_json_log_file(two_sample_vcf: Path, tmp_path: Path):
    """Test that --log-file writes JSON log records."""
    log_file = tmp_path / "run.json"

    result = runner.invoke(
        app, ["--log-file", str(log_file), "r2", str(two_sample_vcf)]
    )
    assert result.exit_code == 0

    # Removing the sinks closes the file
    setup_logging()
    records = [json.loads(line) for line in log_file.read_text().splitlines()]
    messages = [record["record"]["message"] for record in records]
    assert any(message.startswith("Scanning") for message in messages)
    assert any(record["record"]["level"]["name"] == "DEBUG" for record in records)


def test_cli_compare_help():
    """Test that compare --help shows the tolerance option."""
    result = runner.invoke(app, ["compare", "--help"])
    assert result.exit_code == 0
    assert "--tolerance" in result.output


def test_cli_compare_matching(two_sample_vcf: Path, output_dir: Path):
    """Test that a report compared with its reference exits with code 0."""
    actual = output_dir / "out.ld.txt"
    expected = output_dir / "expected.ld.txt"
    expected.write_text(HEADER + "\n" + "\n".join(EXPECTED_LINES) + "\n")
    runner.invoke(app, ["r2", str(two_sample_vcf), "-o", str(actual)])

    result = runner.invoke(
        app, ["compare", str(actual), str(expected), "--tolerance", "strict"]
    )

    assert result.exit_code == 0
    assert "LD reports match (3 pairs)" in result.output


def test_cli_compare_unexpected_pair(two_sample_vcf: Path, output_dir: Path):
    """Test that an extra pair in the report fails the comparison."""
    actual = output_dir / "out.ld.txt"
    expected = output_dir / "expected.ld.txt"
    expected.write_text("\n".join(EXPECTED_LINES[:2]) + "\n")
    runner.invoke(app, ["r2", str(two_sample_vcf), "-o", str(actual)])

    result = runner.invoke(app, ["compare", str(actual), str(expected)])

    assert result.exit_code == 1
    assert "LD reports differ: 1 unexpected pairs" in result.output
    assert "unexpected: 1:200-300" in result.output


@pytest.mark.parametrize(
    "tolerance, exit_code", [("default", 1), ("strict", 1), ("relaxed", 0)]
)
def test_cli_compare_tolerance(output_dir: Path, tolerance: str, exit_code: int):
    """Test that --tolerance selects how far r² may drift."""
    actual = output_dir / "actual.ld.txt"
    expected = output_dir / "expected.ld.txt"
    actual.write_text(EXPECTED_LINES[1] + "\n")
    expected.write_text(EXPECTED_LINES[1].replace("0.333333", "0.333400") + "\n")

    result = runner.invoke(
        app, ["compare", str(actual), str(expected), "--tolerance", tolerance]
    )

    assert result.exit_code == exit_code


def test_cli_compare_missing_file(output_dir: Path):
    """Test that a missing report exits with code 1."""
    actual = output_dir / "actual.ld.txt"
    actual.write_text(EXPECTED_LINES[0] + "\n")

    result = runner.invoke(
        app, ["compare", str(actual), str(output_dir / "missing.ld.txt")]
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "not found" in result.output


def test_cli_compare_invalid_tolerance(output_dir: Path):
    """Test that an unknown tolerance preset is rejected."""
    actual = output_dir / "actual.ld.txt"
    actual.write_text(EXPECTED_LINES[0] + "\n")

    result = runner.invoke(
        app, ["compare", str(actual), str(actual), "--tolerance", "loose"]
    )

    assert result.exit_code == 1
    assert "--tolerance" in result.output
