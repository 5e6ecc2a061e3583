import sys
import os
from unittest.mock import MagicMock, patch

# Add backend to path so we can import modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import check_service
from check_service import main, parse_parameters


class TestParseParameters:

    def test_key_value_pairs(self):
        assert parse_parameters(["port=2121", "userid=bob"]) == {"port": "2121", "userid": "bob"}

    def test_value_may_contain_equals(self):
        assert parse_parameters(["password=a=b"]) == {"password": "a=b"}

    def test_argument_without_equals(self):
        assert parse_parameters(["port=21", "verbose"]) is None

    def test_empty_key(self):
        assert parse_parameters(["=21"]) is None


class TestMain:

    def test_missing_host_prints_usage(self, capsys):
        assert main(["ftp"]) == 1
        assert "usage:" in capsys.readouterr().out

    def test_malformed_parameter_prints_usage(self, capsys):
        with patch.object(check_service, "check_service", new_callable=MagicMock) as mock_check:
            assert main(["ftp", "127.0.0.1", "retry"]) == 1

        mock_check.assert_not_called()
        out = capsys.readouterr().out
        assert "'retry'" in out
        assert "usage:" in out

    def test_runs_check_with_parsed_parameters(self):
        with patch.object(check_service, "asyncio") as mock_asyncio, \
                patch.object(check_service, "check_service", new_callable=MagicMock) as mock_check:
            assert main(["smtp", "mail.example.com", "port=2525"]) == 0

        mock_check.assert_called_once_with("smtp", "mail.example.com", {"port": "2525"})
        mock_asyncio.run.assert_called_once_with(mock_check.return_value)
