"""Tests for config commands in main.py."""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest

from grafana_collector.main import (
    config_add,
    config_delete,
    config_list,
    config_set,
    config_show,
    config_use,
)


def add_args(**overrides):
    args = dict(
        name="test-ctx",
        server="https://grafana.test",
        token=None,
        user="admin",
        password="secret",
        org_id=1,
        use_context=False,
    )
    args.update(overrides)
    return SimpleNamespace(**args)


class TestConfigAdd:
    """Tests for config_add."""

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_add_with_use_flag(self, mock_manager_class, capsys):
        mock_manager = Mock()
        mock_manager.config_path = "/fake/path/config.yaml"
        mock_manager.get_current_context.return_value = "other"
        mock_manager_class.return_value = mock_manager

        config_add(add_args(use_context=True))

        mock_manager.add_context.assert_called_once_with(
            "test-ctx", "https://grafana.test", token=None, user="admin", password="secret", org_id=1
        )
        mock_manager.use_context.assert_called_once_with("test-ctx")
        assert "Context 'test-ctx' added" in capsys.readouterr().out

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_add_token_context(self, mock_manager_class):
        mock_manager = Mock()
        mock_manager.get_current_context.return_value = "other"
        mock_manager_class.return_value = mock_manager

        config_add(add_args(token="tok", user=None, password=None))

        assert mock_manager.add_context.call_args[1]["token"] == "tok"
        mock_manager.use_context.assert_not_called()

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_first_context_becomes_current(self, mock_manager_class):
        mock_manager = Mock()
        mock_manager.get_current_context.return_value = None
        mock_manager_class.return_value = mock_manager

        config_add(add_args())

        mock_manager.use_context.assert_called_once_with("test-ctx")

    def test_credentials_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            config_add(add_args(user=None, password=None))
        assert exc_info.value.code == 1
        assert "--token or --user/--password" in capsys.readouterr().out


class TestConfigList:
    """Tests for config_list."""

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_lists_contexts_with_current_marked(self, mock_manager_class, capsys):
        mock_manager = Mock()
        mock_manager.list_contexts.return_value = ["ctx1", "ctx2"]
        mock_manager.get_current_context.return_value = "ctx1"
        mock_manager.load.return_value = {
            "contexts": {
                "ctx1": {"grafana": {"server": "https://server1.com"}},
                "ctx2": {"grafana": {"server": "https://server2.com"}},
            }
        }
        mock_manager_class.return_value = mock_manager

        config_list(SimpleNamespace())

        out = capsys.readouterr().out
        assert "* ctx1" in out
        assert "  ctx2" in out
        assert "https://server2.com" in out

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_no_contexts(self, mock_manager_class, capsys):
        mock_manager = Mock()
        mock_manager.list_contexts.return_value = []
        mock_manager_class.return_value = mock_manager

        config_list(SimpleNamespace())

        assert "No contexts configured" in capsys.readouterr().out


class TestConfigShow:
    """Tests for config_show."""

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_secrets_are_masked(self, mock_manager_class, capsys):
        mock_manager = Mock()
        mock_manager.get_current_context.return_value = "prod"
        mock_manager.load.return_value = {
            "contexts": {"prod": {"grafana": {"server": "https://g.example.com", "token": "abcd", "org-id": 1}}}
        }
        mock_manager_class.return_value = mock_manager

        config_show(SimpleNamespace(name=None))

        out = capsys.readouterr().out
        assert "Context: prod" in out
        assert "Token:    ****" in out
        assert "abcd" not in out

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_unknown_context(self, mock_manager_class):
        mock_manager = Mock()
        mock_manager.load.return_value = {"contexts": {}}
        mock_manager_class.return_value = mock_manager

        with pytest.raises(SystemExit) as exc_info:
            config_show(SimpleNamespace(name="missing"))
        assert exc_info.value.code == 1


class TestConfigEdits:
    """Tests for use, delete and set."""

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_use(self, mock_manager_class, capsys):
        config_use(SimpleNamespace(name="prod"))
        mock_manager_class.return_value.use_context.assert_called_once_with("prod")
        assert "Switched to context 'prod'" in capsys.readouterr().out

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_delete(self, mock_manager_class, capsys):
        config_delete(SimpleNamespace(name="prod"))
        mock_manager_class.return_value.delete_context.assert_called_once_with("prod")
        assert "Context 'prod' deleted" in capsys.readouterr().out

    @patch("grafana_collector.main.GrafanaConfigManager")
    def test_set(self, mock_manager_class, capsys):
        config_set(SimpleNamespace(key="contexts.prod.grafana.token", value="tok"))
        mock_manager_class.return_value.set_value.assert_called_once_with("contexts.prod.grafana.token", "tok")
        assert "Set contexts.prod.grafana.token = tok" in capsys.readouterr().out
