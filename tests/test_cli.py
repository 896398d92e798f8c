"""
Tests for the lexin-sqlite command-line interface.
"""
import logging
import sqlite3

import pytest

from lexin_sqlite import cli

BAD_REFERENCE_XML = """<Dictionary BaseLang="sv" TargetLang="en" Version="1.0">
  <Word Value="a" Type="noun" ID="1" VariantID="1"><BaseLang><Meaning>m</Meaning></BaseLang></Word>
  <Word Value="b" Type="noun" ID="2" VariantID="2">
    <BaseLang><Reference TYPE="bogus" VALUE="x"/></BaseLang>
  </Word>
</Dictionary>
"""


@pytest.fixture(autouse=True)
def keep_caplog_handlers(monkeypatch):
    """configure_logging replaces root handlers, which hides records from caplog."""
    monkeypatch.setattr(cli, "configure_logging", lambda verbose=False: None)


def _words(db_path):
    conn = sqlite3.connect(db_path)
    try:
        return [r[0] for r in conn.execute("SELECT value FROM words ORDER BY id")]
    finally:
        conn.close()


class TestArguments:
    """Tests for argument handling."""

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--version"])
        assert exc.value.code == 0
        assert "lexin-sqlite version 0.1.0" in capsys.readouterr().out

    def test_parser_defaults(self):
        args = cli.create_parser().parse_args([])
        assert args.file is None
        assert args.db is None
        assert args.target is None
        assert args.verbose is False

    def test_short_flags(self, tmp_path):
        args = cli.create_parser().parse_args(["-f", "x.xml", "-t", "en", "-v"])
        assert str(args.file) == "x.xml"
        assert args.target == "en"
        assert args.verbose is True

    def test_missing_target(self, hus_file, tmp_path, caplog):
        db = tmp_path / "out.db"
        assert cli.main(["--file", str(hus_file), "--db", str(db)]) == 1
        assert not db.exists()
        assert "target language code is required" in caplog.text

    def test_missing_file_argument(self, tmp_path):
        assert cli.main(["--target", "en", "--db", str(tmp_path / "out.db")]) == 1

    def test_empty_file_argument(self, tmp_path, caplog):
        """An empty --file fails at startup without creating the store."""
        db = tmp_path / "out.db"
        assert cli.main(["--file", "", "--target", "en", "--db", str(db)]) == 1
        assert "XML file path is required" in caplog.text
        assert not db.exists()

    def test_nonexistent_xml(self, tmp_path):
        args = ["--file", str(tmp_path / "nope.xml"), "--target", "en",
                "--db", str(tmp_path / "out.db")]
        assert cli.main(args) == 1


class TestImport:
    """Tests for complete runs."""

    def test_successful_import(self, hus_file, tmp_path, caplog):
        db = tmp_path / "out.db"
        with caplog.at_level(logging.INFO):
            code = cli.main(["--file", str(hus_file), "--db", str(db), "--target", "en"])

        assert code == 0
        assert _words(db) == ["hus"]
        assert "Successfully imported 1 entries" in caplog.text
        assert "Dictionary from sv to en is now available" in caplog.text

    def test_reimport_reports_total_entries(self, hus_file, tmp_path, caplog):
        db = tmp_path / "out.db"
        args = ["--file", str(hus_file), "--db", str(db), "--target", "en"]
        assert cli.main(args) == 0
        with caplog.at_level(logging.INFO):
            assert cli.main(args) == 0

        assert _words(db) == ["hus", "hus"]
        assert "Successfully imported 2 entries" in caplog.text

    def test_target_mismatch_warns(self, hus_file, tmp_path, caplog):
        """A differing target language is reported but not fatal."""
        db = tmp_path / "out.db"
        code = cli.main(["--file", str(hus_file), "--db", str(db), "--target", "ar"])

        assert code == 0
        assert "XML file has target language 'en', but you specified 'ar'" in caplog.text
        assert _words(db) == ["hus"]

    def test_malformed_xml(self, tmp_path, caplog):
        xml = tmp_path / "bad.xml"
        xml.write_text("<Dictionary><Word></Dictionary>", encoding="utf-8")
        db = tmp_path / "out.db"

        assert cli.main(["--file", str(xml), "--db", str(db), "--target", "en"]) == 1
        assert "Error parsing XML file" in caplog.text

    def test_load_failure_rolls_back(self, tmp_path, caplog):
        xml = tmp_path / "ref.xml"
        xml.write_text(BAD_REFERENCE_XML, encoding="utf-8")
        db = tmp_path / "out.db"

        assert cli.main(["--file", str(xml), "--db", str(db), "--target", "en"]) == 1
        assert "Error storing dictionary" in caplog.text
        assert "'b'" in caplog.text
        assert _words(db) == []

    def test_incompatible_database(self, hus_file, tmp_path, caplog):
        db = tmp_path / "old.db"
        conn = sqlite3.connect(db)
        conn.execute("CREATE TABLE meta (key TEXT NOT NULL, value TEXT, UNIQUE (key))")
        conn.execute("INSERT INTO meta VALUES ('schema_version', '0.1')")
        conn.commit()
        conn.close()

        assert cli.main(["--file", str(hus_file), "--db", str(db), "--target", "en"]) == 1
        assert "Incompatible schema version" in caplog.text

    def test_values_from_config_file(self, hus_file, tmp_path):
        db = tmp_path / "cfg.db"
        cfg = tmp_path / "lexin.yaml"
        cfg.write_text(f"file: {hus_file}\ndb: {db}\ntarget: en\n", encoding="utf-8")

        assert cli.main(["--config", str(cfg)]) == 0
        assert _words(db) == ["hus"]

