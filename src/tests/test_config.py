import os

import pytest

from music_remote.utils.config import load_config
from music_remote.utils.exceptions import ConfigError

ENV_VARS = [
    'MUSIC_REMOTE_ORIGIN', 'MUSIC_REMOTE_WS_PATH', 'NEXT_PUBLIC_WEBSOCKET_URL',
    'MUSIC_REMOTE_USER_ID', 'MUSIC_REMOTE_USER_IMAGE_URL', 'MUSIC_REMOTE_ACCESS_TOKEN',
    'MUSIC_REMOTE_REQUIRE_TOKEN', 'MUSIC_REMOTE_RECONNECT_DELAY', 'MUSIC_REMOTE_TICK_INTERVAL',
    'LOG_LEVEL', 'MUSIC_REMOTE_LOG_DIR', 'DEBUG', 'MUSIC_REMOTE_CONFIG',
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def load(tmp_path, yaml_text=None):
    config_path = tmp_path / "config.yaml"
    if yaml_text is not None:
        config_path.write_text(yaml_text, encoding="utf-8")
    return load_config(str(config_path), env_path=str(tmp_path / ".env"))


def test_defaults(clean_env):
    config = load(clean_env)
    assert config['origin'] == 'http://localhost:3000'
    assert config['ws_path'] == '/api/ws'
    assert config['reconnect_delay'] == 5.0
    assert config['tick_interval'] == 1.0
    assert config['require_access_token'] is True
    assert config['user_id'] is None
    assert config['log_level'] == 'INFO'


def test_environment_values(clean_env, monkeypatch):
    monkeypatch.setenv('MUSIC_REMOTE_ORIGIN', 'https://music.example.com')
    monkeypatch.setenv('MUSIC_REMOTE_RECONNECT_DELAY', '2.5')
    monkeypatch.setenv('MUSIC_REMOTE_REQUIRE_TOKEN', 'false')
    config = load(clean_env)
    assert config['origin'] == 'https://music.example.com'
    assert config['reconnect_delay'] == 2.5
    assert config['require_access_token'] is False


def test_dotenv_file_is_loaded(clean_env):
    (clean_env / ".env").write_text("MUSIC_REMOTE_USER_ID=77\n", encoding="utf-8")
    try:
        config = load(clean_env)
    finally:
        # load_dotenv writes straight into os.environ
        os.environ.pop('MUSIC_REMOTE_USER_ID', None)
    assert config['user_id'] == '77'


def test_yaml_overrides_environment(clean_env, monkeypatch):
    monkeypatch.setenv('MUSIC_REMOTE_ORIGIN', 'http://from-env:3000')
    config = load(clean_env, "origin: https://from-yaml.example.com\nuser_id: 1234\ndebug: true\n")
    assert config['origin'] == 'https://from-yaml.example.com'
    # Numeric ids from YAML are normalised to strings
    assert config['user_id'] == '1234'
    assert config['log_level'] == 'DEBUG'


@pytest.mark.parametrize("yaml_text", [
    "reconnect_delay: soon\n",
    "tick_interval: 0\n",
    "origin: ftp://example.com\n",
    "- just\n- a list\n",
    "origin: [unclosed\n",
])
def test_invalid_configuration_is_rejected(clean_env, yaml_text):
    with pytest.raises(ConfigError):
        load(clean_env, yaml_text)
