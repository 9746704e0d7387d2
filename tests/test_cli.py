"""Tests for the sigilgen command-line interface."""

from __future__ import annotations

import json
import logging

import pytest

from sigilgen.cli import main
from sigilgen.config import get_breeding_config


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch):
    """Default economics and a clean logger tree for every CLI run."""
    for name in ("SIGIL_BASE_COST", "SIGIL_COST_PER_SUMMON", "SIGIL_GEN0_MAX_SUMMONS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    get_breeding_config.cache_clear()
    yield
    get_breeding_config.cache_clear()
    root = logging.getLogger("sigilgen")
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)


class TestCli:
    """Tests for main()."""

    def test_preview(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["preview", "ember", "veil", "--seed", "7"]) == 0

        out = capsys.readouterr().out
        assert "Summoning Preview" in out
        assert "Cost: 2000 $SIGIL" in out
        assert "Offspring Generation: Gen1" in out

    def test_summon_text(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["summon", "thorn", "hollow", "--seed", "3", "--name", "Bramble"]) == 0

        out = capsys.readouterr().out
        assert "Bramble" in out
        assert "Gen1" in out
        assert "Cost: 2000 $SIGIL" in out

    def test_summon_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["summon", "ember", "ember", "--seed", "11", "--json", "--owner", "me"]) == 0

        payload = json.loads(capsys.readouterr().out)
        offspring = payload["offspring"]
        assert offspring["generation"] == 1
        assert offspring["owner"] == "me"
        assert offspring["rarity"] in {"common", "uncommon", "rare", "legendary", "mythic"}
        assert payload["cost"] == 2000
        assert payload["receipt"]["offspring_id"] == offspring["id"]

    def test_seed_is_reproducible(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["summon", "veil", "sparkwright", "--seed", "99", "--json"])
        first = json.loads(capsys.readouterr().out)["offspring"]
        main(["summon", "veil", "sparkwright", "--seed", "99", "--json"])
        second = json.loads(capsys.readouterr().out)["offspring"]

        assert first["stats"] == second["stats"]
        assert first["genome"] == second["genome"]

    def test_unknown_archetype(self) -> None:
        with pytest.raises(SystemExit):
            main(["preview", "ember", "dragon"])

    def test_logger_is_namespaced(self) -> None:
        """CLI records flow through the sigilgen logger tree."""
        from sigilgen import cli

        assert cli.logger.name == "sigilgen.cli"
        assert cli.logger.parent is logging.getLogger("sigilgen")
