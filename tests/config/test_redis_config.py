from unittest.mock import MagicMock

import requests

from config.redis_config import UpstashRedisSync


def _client_returning(result):
    client = UpstashRedisSync("https://example.upstash.io/", "secret")
    response = MagicMock()
    response.json.return_value = {"result": result}
    client.session = MagicMock()
    client.session.post.return_value = response
    return client


def test_not_configured_is_disabled():
    client = UpstashRedisSync(None, None)

    assert client.enabled is False
    assert client.get("k") is None
    assert client.set("k", "v") is False
    assert client.delete("k") == 0
    assert client.keys("*") == []
    assert client.is_available() is False


def test_commands_are_posted_as_json_arrays():
    client = _client_returning("OK")

    assert client.set("k", "v", ttl=60) is True

    client.session.post.assert_called_once_with(
        "https://example.upstash.io",
        headers={"Authorization": "Bearer secret"},
        json=["SET", "k", "v", "EX", 60],
        timeout=2.0,
    )


def test_ping():
    assert _client_returning("PONG").is_available() is True


def test_delete_returns_count():
    assert _client_returning(2).delete("a", "b") == 2


def test_network_errors_degrade_to_miss():
    client = _client_returning(None)
    client.session.post.side_effect = requests.ConnectionError("down")

    assert client.get("k") is None
    assert client.set("k", "v") is False
    assert client.keys("*") == []
    assert client.is_available() is False
