"""Tests for configuration defaults and result helpers."""

import logging

from import_cycles.models import AnalysisConfig, CycleKind, ImportChain


class TestAnalysisConfig:
    def test_explicit_workers(self, monkeypatch):
        monkeypatch.setenv("IMPORT_CYCLES_WORKERS", "16")
        assert AnalysisConfig(max_workers=2).max_workers == 2

    def test_workers_from_env(self, monkeypatch):
        monkeypatch.setenv("IMPORT_CYCLES_WORKERS", "3")
        assert AnalysisConfig().max_workers == 3

    def test_default_workers(self, monkeypatch):
        monkeypatch.delenv("IMPORT_CYCLES_WORKERS", raising=False)
        assert AnalysisConfig().max_workers == 4

    def test_invalid_env_falls_back(self, monkeypatch, caplog):
        monkeypatch.setenv("IMPORT_CYCLES_WORKERS", "many")
        with caplog.at_level(logging.WARNING, logger="import_cycles"):
            config = AnalysisConfig()
        assert config.max_workers == 4
        assert "IMPORT_CYCLES_WORKERS" in caplog.text

    def test_workers_at_least_one(self, monkeypatch):
        monkeypatch.setenv("IMPORT_CYCLES_WORKERS", "-2")
        assert AnalysisConfig().max_workers == 1


class TestImportChain:
    def test_is_cycle(self):
        assert ImportChain(files=["a", "b", "a"], kind=CycleKind.CLOSED).is_cycle
        assert not ImportChain(files=["a", "b"], kind=CycleKind.TERMINATED).is_cycle
