"""Shared test fixtures for lexin-sqlite."""

from pathlib import Path

import pytest

from lexin_sqlite import db
from lexin_sqlite.parser import parse_xml_file

FIXTURES = Path(__file__).parent / "fixtures"

HUS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Dictionary BaseLang="sv" TargetLang="en" Version="1.0">
  <Word Value="hus" Type="noun" ID="1" VariantID="1">
    <BaseLang>
      <Meaning>house (building)</Meaning>
    </BaseLang>
    <TargetLang>
      <Translation>house</Translation>
    </TargetLang>
  </Word>
</Dictionary>
"""


@pytest.fixture
def conn():
    """In-memory database with the schema created."""
    connection = db.connect(":memory:")
    db.init_db(connection)
    yield connection
    connection.close()


@pytest.fixture
def full_dictionary():
    """Dictionary decoded from the fixture exercising every element."""
    return parse_xml_file(FIXTURES / "swedish-english.xml")


@pytest.fixture
def hus_file(tmp_path):
    """Minimal sv->en document on disk with a single word."""
    path = tmp_path / "hus.xml"
    path.write_text(HUS_XML, encoding="utf-8")
    return path
