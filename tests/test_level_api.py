from level_test_utils import EXIT, assert_playable, solid_rows, walled_rows


def test_get_level(client):
    r = client.get("/api/level?type=cathedral&depth=1&seed=42")
    assert r.status_code == 200
    data = r.get_json()
    assert data["key"] == "Cathedral-1-42"
    assert data["source"] == "procedural"
    assert len(data["grid"]) == 40 and len(data["grid"][0]) == 40
    assert data["rooms"] and {"x", "y", "width", "height"} <= set(data["rooms"][0])
    assert all(e["type"] == "MONSTER_SPAWN" for e in data["entities"])
    assert "runtime_ms" in data["metrics"]
    assert_playable(data["grid"])


def test_get_level_is_cached(client):
    g1 = client.get("/api/level?type=2&depth=3&seed=abc").get_json()["grid"]
    g2 = client.get("/api/level?type=Catacombs&depth=3&seed=abc").get_json()["grid"]
    assert g1 == g2
    info = client.get("/api/level/cache").get_json()
    assert info["size"] == 1
    assert info["capacity"] == 5
    assert info["keys"][0].startswith("Catacombs-3-")


def test_get_level_rejects_bad_keys(client):
    for query in ("type=Swamp&depth=1", "type=Hell&depth=-2", "type=Hell&depth=deep"):
        r = client.get(f"/api/level?{query}")
        assert r.status_code == 400, query
        assert r.get_json()["code"] == "invalid_key"
    assert client.get("/api/level/cache").get_json()["size"] == 0


def test_heal_endpoint(client):
    rows = solid_rows(7, 6)
    rows[2][1] = 3
    rows[2][2] = 0
    rows[2][4] = EXIT
    r = client.post("/api/level/heal", json={"grid": rows})
    assert r.status_code == 200
    data = r.get_json()
    assert data["complete"] is True
    assert data["reason"] is None
    assert data["carved"] == 1
    assert data["unreachable"] == 0
    assert_playable(data["grid"])


def test_heal_endpoint_reports_degenerate_grid(client):
    rows = solid_rows(6, 6)
    data = client.post("/api/level/heal", json={"grid": rows}).get_json()
    assert data["complete"] is False
    assert data["reason"]
    assert data["grid"] == rows


def test_heal_endpoint_rejects_bad_payloads(client):
    bad = [{"grid": "nope"}, {"grid": [[1, 9]]}, {"grid": [[1, 1], [1]]}, {"nogrid": []}, [1, 2]]
    for body in bad:
        r = client.post("/api/level/heal", json=body)
        assert r.status_code == 400, body
        assert r.get_json()["code"] == "invalid_grid"
    r = client.post("/api/level/heal", data="not json", content_type="text/plain")
    assert r.status_code == 400


def test_validate_endpoint(client):
    healed = client.post("/api/level/heal", json={"grid": walled_rows(8, 8)}).get_json()["grid"]
    data = client.post("/api/level/validate", json={"grid": healed}).get_json()
    assert data["valid"] is True
    assert data["violations"] == []
    assert data["stats"]["reachable"] == data["stats"]["walkable"]

    data = client.post("/api/level/validate", json={"grid": walled_rows(8, 8)}).get_json()
    assert data["valid"] is False
    assert len(data["violations"]) == 2
    assert data["stats"]["tiles"]["floor"] == 36


def test_clear_cache_endpoint(client):
    client.get("/api/level?type=Hell&depth=1&seed=1")
    client.get("/api/level?type=Hell&depth=1&seed=2")
    r = client.delete("/api/level/cache")
    assert r.get_json() == {"cleared": 2}
    assert client.get("/api/level/cache").get_json()["size"] == 0


def test_get_level_accepts_non_ascii_seed(client):
    r = client.get("/api/level?type=Hell&depth=1&seed=%C2%B2")
    assert r.status_code == 200
    assert r.get_json()["key"].startswith("Hell-1-")


def test_get_level_rejects_odd_type_and_depth(client):
    for query in ("type=%C2%B2&depth=1", "type=Hell&depth=%C2%B2", "type=Hell&depth=" + "9" * 5000):
        r = client.get(f"/api/level?{query}")
        assert r.status_code == 400, query
        assert r.get_json()["code"] == "invalid_key"


def test_level_output_parses_back_as_candidate(client):
    from levelforge.level import GenerationConfig
    from levelforge.level.providers import parse_candidate

    data = client.get("/api/level?type=Caves&depth=4&seed=9").get_json()
    cand = parse_candidate(data, GenerationConfig().constraints)
    assert len(cand.rooms) == len(data["rooms"])
    assert [e.to_dict() for e in cand.entities] == data["entities"]
