from levelforge import get_synthesizer


def _extract(event_name, received):
    return [p["args"][0] for p in received if p["name"] == event_name]


def test_level_generated_is_broadcast(socket_client, client):
    socket_client.get_received()
    client.get("/api/level?type=Caves&depth=2&seed=77")
    msgs = _extract("level_generated", socket_client.get_received())
    assert len(msgs) == 1
    msg = msgs[0]
    assert msg["key"] == "Caves-2-77"
    assert msg["source"] == "procedural"
    assert (msg["width"], msg["height"]) == (40, 40)
    assert msg["rooms"] >= 1
    assert msg["entities"] == msg["rooms"] - 1
    assert "grid" not in msg


def test_cache_hits_do_not_notify(socket_client):
    synth = get_synthesizer()
    synth.generate("Hell", 6, 1)
    socket_client.get_received()
    synth.generate("Hell", 6, 1)
    assert _extract("level_generated", socket_client.get_received()) == []


def test_invalid_requests_do_not_notify(socket_client, client):
    socket_client.get_received()
    client.get("/api/level?type=Nowhere&depth=1")
    assert _extract("level_generated", socket_client.get_received()) == []
