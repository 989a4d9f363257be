import logging

import services.logging_setup as logging_setup
from services.logging_setup import get_logger, resolve_level
from services.projection_settings import DEFAULT_POLICY, build_policy, load_policy


def test_default_policy_values():
    assert DEFAULT_POLICY.spend_ratio == 0.8
    assert DEFAULT_POLICY.save_ratio == 0.2
    assert DEFAULT_POLICY.lookahead_days == 30
    assert DEFAULT_POLICY.history_months == 3
    assert DEFAULT_POLICY.max_instances_per_group == 50


def test_build_policy_clamps_values():
    policy = build_policy(spend_ratio=1.7, lookahead_days=0, history_months=-2)
    assert policy.spend_ratio == 1.0
    assert policy.save_ratio == 0.0
    assert policy.lookahead_days == 1
    assert policy.history_months == 0


def test_load_policy_reads_environment(monkeypatch):
    monkeypatch.setenv("CASHFLOW_SPEND_RATIO", "0.6")
    monkeypatch.setenv("CASHFLOW_LOOKAHEAD_DAYS", "14")
    monkeypatch.setenv("CASHFLOW_HISTORY_MONTHS", "oops")
    policy = load_policy()
    assert policy.spend_ratio == 0.6
    assert policy.save_ratio == 0.4
    assert policy.lookahead_days == 14
    assert policy.history_months == 3


def test_load_policy_without_environment(monkeypatch):
    for name in ("CASHFLOW_SPEND_RATIO", "CASHFLOW_LOOKAHEAD_DAYS", "CASHFLOW_HISTORY_MONTHS"):
        monkeypatch.delenv(name, raising=False)
    assert load_policy() == DEFAULT_POLICY


def test_log_level_parsing(monkeypatch):
    monkeypatch.delenv("CASHFLOW_LOG_LEVEL", raising=False)
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" 30 ") == 30
    assert resolve_level(None) == logging.INFO

    monkeypatch.setenv("CASHFLOW_LOG_LEVEL", "warning")
    assert resolve_level(None) == logging.WARNING
    assert resolve_level("nonsense") == logging.WARNING

    monkeypatch.setenv("CASHFLOW_LOG_LEVEL", "nonsense")
    assert resolve_level(None) == logging.INFO


def test_get_logger_is_namespaced_under_services():
    logger = get_logger("services.recurrence")
    assert logger.name == "services.recurrence"
    assert logging.getLogger("services").handlers


def test_configure_logging_installs_a_single_stderr_handler(monkeypatch):
    pkg_logger = logging.getLogger("services")
    monkeypatch.setattr(logging_setup, "_configured", False)
    monkeypatch.setattr(pkg_logger, "handlers", [logging.NullHandler()])
    monkeypatch.setattr(pkg_logger, "level", pkg_logger.level)
    monkeypatch.setattr(pkg_logger, "propagate", True)

    logging_setup.configure_logging("debug")
    logging_setup.configure_logging("error")

    assert [type(h) for h in pkg_logger.handlers] == [logging.StreamHandler]
    assert pkg_logger.level == logging.DEBUG
    assert pkg_logger.propagate is False
