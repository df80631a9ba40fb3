from datetime import date

import pytest

from place_enrichment.application.services.refresh_tiers import ALL_TIERS
from place_enrichment.bootstrap import build_places_client, build_translator
from place_enrichment.cli import DEFAULT_WORK_LIST, build_parser, main, resolve_tiers
from place_enrichment.core.config import Settings
from place_enrichment.shared.constants.attribute_constants import UpdateTier
from place_enrichment.shared.exceptions.domain import ConfigurationException


def test_parser_defaults():
    args = build_parser().parse_args(["scan"])

    assert args.command == "scan"
    assert args.work_list == DEFAULT_WORK_LIST


def test_enrich_with_date_computes_tiers_once():
    args = build_parser().parse_args(["enrich", "ids.json", "--date", "2026-10-12"])

    assert args.work_list == "ids.json"
    assert args.date == date(2026, 10, 12)
    assert resolve_tiers(args) == {UpdateTier.EVERY_RUN, UpdateTier.WEEKLY}


def test_all_tiers_flag():
    args = build_parser().parse_args(["enrich", "--all-tiers"])

    assert resolve_tiers(args) == ALL_TIERS


def test_invalid_date_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["enrich", "--date", "12/10/2026"])


def test_empty_work_list_exits_cleanly(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("[]", encoding="utf-8")

    assert main(["scan", str(path)]) == 0


def test_bootstrap_requires_google_api_key():
    with pytest.raises(ConfigurationException):
        build_places_client(Settings(_env_file=None, GOOGLE_API_KEY=""))


def test_bootstrap_without_openai_key_disables_translation():
    assert build_translator(Settings(_env_file=None, OPENAI_API_KEY="")) is None
