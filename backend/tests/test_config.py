import json
import pytest
import sys
import os
from pydantic import ValidationError

# Add backend to path so we can import modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import ProbeParameters, load_app_config, monitor_defaults


class TestProbeParameters:

    def test_defaults(self):
        params = ProbeParameters.from_parameters("10.0.0.1", {}, default_port=21)
        assert params.port == 21
        assert params.timeout == 3000
        assert params.timeout_seconds == 3.0
        assert params.retry == 0
        assert params.userid is None
        assert params.password is None
        assert params.rrd_repository is None
        assert params.ds_name == "response-time"

    def test_keyed_values(self):
        params = ProbeParameters.from_parameters("10.0.0.1", {
            "port": "2121",
            "timeout": 500,
            "retry": "2",
            "userid": "bob",
            "password": "secret",
            "rrd-repository": "/var/latency",
            "ds-name": "ftp",
        }, default_port=21)
        assert params.port == 2121
        assert params.timeout_seconds == 0.5
        assert params.retry == 2
        assert params.userid == "bob"
        assert params.rrd_repository == "/var/latency"
        assert params.ds_name == "ftp"

    def test_unparsable_integers_fall_back_to_defaults(self):
        params = ProbeParameters.from_parameters("10.0.0.1", {"retry": "many", "timeout": "slow"}, default_port=25)
        assert params.retry == 0
        assert params.timeout == 3000

    @pytest.mark.parametrize("parameters", [{"port": 0}, {"port": 65536}, {"timeout": 0}, {"retry": -1}])
    def test_out_of_range_values_rejected(self, parameters):
        with pytest.raises(ValidationError):
            ProbeParameters.from_parameters("10.0.0.1", parameters, default_port=21)

    def test_parameters_are_immutable(self):
        params = ProbeParameters.from_parameters("10.0.0.1", {}, default_port=21)
        with pytest.raises(ValidationError):
            params.port = 22


class TestAppConfig:

    def test_missing_file(self, tmp_path):
        assert load_app_config(str(tmp_path / "missing.json")) == {}

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert load_app_config(str(path)) == {}

    def test_monitor_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"monitors": {"ftp": {"timeout": 5000, "retry": 1}}}))

        app_config = load_app_config(str(path))
        assert monitor_defaults(app_config, "ftp") == {"timeout": 5000, "retry": 1}
        assert monitor_defaults(app_config, "smtp") == {}
