"""
Configuration Manager Tests
"""

import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from traffic_engine.config import ConfigManager, get_config, init_config
from traffic_engine.exceptions import ConfigurationError

CONFIG_DIR = os.path.join(os.path.dirname(__file__), '..', 'config')


class TestConfigManager:
    """Test config loading and access"""

    def test_shipped_config(self):
        """Test the shipped files load under their file stems"""
        config = ConfigManager(CONFIG_DIR)

        assert config.get('detection.inputSize') == 640
        assert config.get('traffic.defaultJunction.maxGreenTime') == 90
        assert config.get('traffic.density.roadCapacity') == 50
        assert config.get('emergency.vehicleTtl') == 120

    def test_missing_key_default(self):
        config = ConfigManager(CONFIG_DIR)

        assert config.get('traffic.nothing.here', 42) == 42
        assert config.get('detection.inputSize.deeper') is None

    def test_missing_directory_uses_defaults(self, tmp_path):
        config = ConfigManager(str(tmp_path / 'absent'))

        assert config.configs == {}
        assert config.get_traffic_config() == {}

    def test_yaml_and_json_files(self, tmp_path):
        (tmp_path / 'traffic.yaml').write_text("density:\n  roadCapacity: 80\n")
        (tmp_path / 'emergency.json').write_text('{"vehicleTtl": 60}')

        config = ConfigManager(str(tmp_path))

        assert config.get('traffic.density.roadCapacity') == 80
        assert config.get_emergency_config() == {'vehicleTtl': 60}

    def test_empty_yaml_is_empty_section(self, tmp_path):
        (tmp_path / 'detection.yaml').write_text("")

        assert ConfigManager(str(tmp_path)).get_detection_config() == {}

    def test_invalid_yaml_raises(self, tmp_path):
        (tmp_path / 'traffic.yaml').write_text("density: [unclosed\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(str(tmp_path))

    def test_invalid_json_raises(self, tmp_path):
        (tmp_path / 'traffic.json').write_text("{not json")

        with pytest.raises(ConfigurationError):
            ConfigManager(str(tmp_path))

    def test_non_mapping_raises(self, tmp_path):
        (tmp_path / 'traffic.yaml').write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError):
            ConfigManager(str(tmp_path))

    def test_set_and_reload(self, tmp_path):
        (tmp_path / 'traffic.yaml').write_text("density:\n  roadCapacity: 80\n")
        config = ConfigManager(str(tmp_path))

        config.set('traffic.density.roadCapacity', 10)
        config.set('custom.nested.value', True)
        assert config.get('traffic.density.roadCapacity') == 10
        assert config.get('custom.nested.value') is True

        config.reload()
        assert config.get('traffic.density.roadCapacity') == 80
        assert config.get('custom') is None

    def test_env_directory(self, tmp_path, monkeypatch):
        (tmp_path / 'emergency.yaml').write_text("alertWindow: 30\n")
        monkeypatch.setenv('TRAFFIC_ENGINE_CONFIG_DIR', str(tmp_path))

        assert ConfigManager().get('emergency.alertWindow') == 30

    def test_init_config_sets_global(self, tmp_path):
        config = init_config(str(tmp_path))

        assert get_config() is config
        init_config(CONFIG_DIR)
