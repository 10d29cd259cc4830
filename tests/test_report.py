#!/usr/bin/env python3
"""Tests for fixed-column report rendering."""

import io

from fastqcheck.core import check_fastq
from fastqcheck.report import render_lines, render_report
from fastqcheck.stats import Report, ScopeSummary


def test_empty_report():
    report = check_fastq(io.BytesIO(b""))
    assert render_report(report) == "0 sequences, 0 total length\n"


def test_single_base_report():
    report = check_fastq(io.BytesIO(b"@r1\nA\n+\n?\n"))
    lines = render_lines(report)

    assert lines[0] == "1 sequences, 1 total length, 1.0 average, 1 max"
    assert lines[1] == "Standard deviations at 0.25:  total 50.00 %, per base 50.00 %"
    assert lines[2].startswith("            A    C    G    T    N    0   1")
    assert lines[2].endswith("  30 AQ")
    assert lines[3] == "Total    100.0  0.0  0.0  0.0  0.0 " + "   0" * 30 + " 1000 30.0"
    assert lines[4] == "base  1  100.0  0.0  0.0  0.0  0.0 " + "   0" * 30 + " 1000 30.0"
    assert len(lines) == 5


def test_one_row_per_position():
    data = b"@r1\nACGT\n+\nIIII\n@r2\nAC\n+\nII\n"
    lines = render_lines(check_fastq(io.BytesIO(data)))

    assert lines[0] == "2 sequences, 6 total length, 3.0 average, 4 max"
    base_rows = [line for line in lines if line.startswith("base")]
    assert [row[:7] for row in base_rows] == ["base  1", "base  2", "base  3", "base  4"]
    assert base_rows[0].startswith("base  1  100.0  0.0  0.0  0.0  0.0 ")
    assert base_rows[2].startswith("base  3   0.0  0.0 100.0  0.0  0.0 ")


def test_position_without_reads_is_skipped():
    summary = ScopeSummary(count=1, composition=[100.0, 0.0, 0.0, 0.0, 0.0],
                           quality_permille=[1000], average_quality=0.0)
    report = Report(record_count=1, total_length=2, max_length=2, max_quality=0,
                    average_length=2.0, total_std_dev=35.36, per_base_std_dev=50.0,
                    overall=summary, positions=[summary, None])
    lines = render_lines(report)

    assert [line[:7] for line in lines if line.startswith("base")] == ["base  1"]


def test_rendering_is_deterministic():
    data = b"".join(f"@r{i}\nACGTN\n+\nI5?+!\n".encode() for i in range(10))
    first = render_report(check_fastq(io.BytesIO(data)))
    second = render_report(check_fastq(io.BytesIO(data)))
    assert first == second
    assert first.endswith("\n")
