"""Tests for scram_trimmer.io modules."""

import gzip
import io

import pandas as pd
import pytest
from scram_trimmer.core.models import FastqRead
from scram_trimmer.core.statistics import StatisticsSnapshot
from scram_trimmer.io.fastq import (
    FastqFormatError,
    format_read,
    open_fastq,
    read_fastq,
    write_reads,
)
from scram_trimmer.io.report import format_count, print_summary, write_stats_tsv


def parse(text):
    return list(read_fastq(io.StringIO(text)))


class TestReadFastq:
    """Test FASTQ parsing."""

    def test_single_record(self):
        """A well-formed record is parsed."""
        reads = parse("@READ1\nATCGATCC\n+\nIIIIIIII\n")
        assert reads == [FastqRead("@READ1", "ATCGATCC", "IIIIIIII")]

    def test_multiple_records_in_order(self):
        """Records are yielded in file order."""
        reads = parse("@r1\nAC\n+\nII\n@r2\nGT\n+\nFF\n")
        assert [r.header for r in reads] == ["@r1", "@r2"]

    def test_empty_stream(self):
        """An empty stream yields nothing."""
        assert parse("") == []

    def test_missing_final_newline(self):
        """The last line does not need a trailing newline."""
        reads = parse("@r1\nAC\n+\nII")
        assert reads[0].quality == "II"

    def test_windows_line_endings(self):
        """CRLF terminators are stripped."""
        reads = parse("@r1\r\nAC\r\n+\r\nII\r\n")
        assert reads == [FastqRead("@r1", "AC", "II")]

    def test_is_lazy(self):
        """Records before a structural error are still produced."""
        records = read_fastq(io.StringIO("@r1\nAC\n+\nII\nbad\nAC\n+\nII\n"))
        assert next(records).header == "@r1"
        with pytest.raises(FastqFormatError):
            next(records)

    def test_missing_sentinel(self):
        """A header without '@' is fatal."""
        with pytest.raises(FastqFormatError, match="expected '@'") as exc_info:
            parse("@r1\nAC\n+\nII\nr2\nAC\n+\nII\n")
        assert exc_info.value.line_number == 5

    def test_bad_separator(self):
        """The separator line must be exactly '+'."""
        with pytest.raises(FastqFormatError, match="expected '\\+' line"):
            parse("@r1\nAC\n+r1\nII\n")

    def test_length_mismatch(self):
        """Sequence and quality must have the same length."""
        with pytest.raises(FastqFormatError, match="same length"):
            parse("@r1\nACGT\n+\nII\n")

    def test_truncated_record(self):
        """A record cut short by end of stream is fatal."""
        with pytest.raises(FastqFormatError, match="truncated"):
            parse("@r1\nAC\n+\n")

    def test_blank_line_is_fatal(self):
        """Blank lines break the 4-line framing."""
        with pytest.raises(FastqFormatError):
            parse("@r1\nAC\n+\nII\n\n@r2\nAC\n+\nII\n")

    def test_format_error_is_value_error(self):
        """Format errors can be caught as ValueError."""
        assert issubclass(FastqFormatError, ValueError)

    def test_non_ascii_quality_is_fatal(self):
        """Characters outside ASCII are not valid quality scores."""
        with pytest.raises(FastqFormatError, match="non-ASCII") as excinfo:
            parse("@r1\nACGT\n+\nII\u00e9I\n")
        assert excinfo.value.line_number == 4


class TestWriteReads:
    """Test FASTQ serialization."""

    def test_format_read(self):
        """A read becomes four newline-terminated lines."""
        read = FastqRead("@SEQ_ID", "ACTG", "!!!!")
        assert format_read(read) == "@SEQ_ID\nACTG\n+\n!!!!\n"

    def test_write_reads(self):
        """Reads are written back to back."""
        reads = [
            FastqRead("@SEQ_ID", "ACTG", "!!!!"),
            FastqRead("@SEQ_ID2", "TGCA", "****"),
        ]
        buf = io.StringIO()
        assert write_reads(reads, buf) == 2
        assert buf.getvalue() == "@SEQ_ID\nACTG\n+\n!!!!\n@SEQ_ID2\nTGCA\n+\n****\n"


class TestOpenFastq:
    """Test compressed and plain file handling."""

    def test_gzip_roundtrip(self, tmp_path):
        """'.gz' paths are compressed on write and decompressed on read."""
        path = tmp_path / "reads.fastq.gz"
        with open_fastq(path, 'wt') as f:
            write_reads([FastqRead("@r1", "AC", "II")], f)

        with gzip.open(path, 'rt') as f:
            assert f.read() == "@r1\nAC\n+\nII\n"

        with open_fastq(path) as f:
            assert list(read_fastq(f))[0].sequence == "AC"

    def test_plain_text(self, tmp_path):
        """Other paths are plain text."""
        path = tmp_path / "reads.fastq"
        path.write_text("@r1\nAC\n+\nII\n")
        with open_fastq(path) as f:
            assert len(list(read_fastq(f))) == 1

    def test_corrupt_gzip_raises_os_error(self, tmp_path):
        """Invalid compressed data surfaces as an I/O error."""
        path = tmp_path / "reads.fastq.gz"
        path.write_bytes(b"not gzip data at all")
        with pytest.raises(OSError):
            with open_fastq(path) as f:
                list(read_fastq(f))

    def test_non_ascii_bytes_are_format_errors(self, tmp_path):
        """Undecodable bytes are reported as invalid FASTQ, whatever the locale."""
        path = tmp_path / "reads.fastq.gz"
        with gzip.open(path, 'wb') as f:
            f.write(b"@r1\nACGT\n+\nII\xe9I\n")
        with pytest.raises(FastqFormatError, match="non-ASCII"):
            with open_fastq(path) as f:
                list(read_fastq(f))

    def test_writes_ascii(self, tmp_path):
        """Output files are opened with an explicit ASCII encoding."""
        with open_fastq(tmp_path / "out.fastq", 'wt') as f:
            assert f.encoding == 'ascii'


class TestReport:
    """Test run reporting."""

    @pytest.mark.parametrize("value,expected", [
        (0, "0"),
        (123, "123"),
        (1234, "1,234"),
        (1234567, "1,234,567"),
        (1234567890123, "1,234,567,890,123"),
    ])
    def test_format_count(self, value, expected):
        """Counts get comma thousands separators."""
        assert format_count(value) == expected

    def test_print_summary(self, capsys):
        """The summary lists totals and every rejection category."""
        snapshot = StatisticsSnapshot(total=2000, trimmed=1000, adapter_missing=500,
                                      too_short=300, low_quality=200)
        print_summary(snapshot, elapsed=1.5)
        out = capsys.readouterr().out
        assert "Total reads: 2,000" in out
        assert "Percentage of trimmed reads: 50.00%" in out
        assert "Adapter missing count: 500" in out
        assert "Too short count: 300" in out
        assert "Low quality count: 200" in out

    def test_write_stats_tsv(self, tmp_path):
        """Statistics are written as a one-row TSV."""
        snapshot = StatisticsSnapshot(total=4, trimmed=1, adapter_missing=1,
                                      too_short=1, low_quality=1)
        path = write_stats_tsv(snapshot, tmp_path / "stats.tsv", elapsed=0.25)

        df = pd.read_csv(path, sep='\t')
        assert len(df) == 1
        assert df.loc[0, 'total'] == 4
        assert df.loc[0, 'trimmed_pct'] == pytest.approx(25.0)
        assert df.loc[0, 'elapsed_seconds'] == pytest.approx(0.25)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
