import pytest

from levelforge.level import GenerationConfig
from levelforge.level.providers import ProviderSettings, create_provider


def test_defaults():
    cfg = GenerationConfig()
    assert (cfg.width, cfg.height) == (40, 40)
    assert (cfg.min_rooms, cfg.max_rooms) == (3, 8)
    assert (cfg.min_room_size, cfg.max_room_size) == (4, 12)
    assert cfg.max_heal_iterations == 100
    assert cfg.cache_size == 5
    assert cfg.validate() is cfg


@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 4},
        {"min_rooms": 5, "max_rooms": 2},
        {"min_room_size": 9, "max_room_size": 4},
        {"width": 12, "height": 12, "max_room_size": 10},
        {"corridor_width": 0},
        {"max_heal_iterations": 0},
        {"cache_size": 0},
    ],
)
def test_validate_rejects_impossible_configs(kwargs):
    with pytest.raises(ValueError):
        GenerationConfig(**kwargs).validate()


def test_from_env_overrides():
    cfg = GenerationConfig.from_env(
        {"LEVELFORGE_GRID_WIDTH": "30", "LEVELFORGE_GRID_HEIGHT": "20", "LEVELFORGE_CACHE_SIZE": "2", "LEVELFORGE_MAX_ROOM_SIZE": ""}
    )
    assert (cfg.width, cfg.height, cfg.cache_size) == (30, 20, 2)
    assert cfg.max_room_size == 12


def test_constraints_shape():
    assert GenerationConfig().constraints == {
        "width": 40,
        "height": 40,
        "min_rooms": 3,
        "max_rooms": 8,
        "min_room_size": 4,
        "max_room_size": 12,
    }


def test_provider_needs_api_key():
    assert create_provider(ProviderSettings.from_env({})) is None
    assert create_provider(ProviderSettings.from_env({"LEVELFORGE_PROVIDER_API_KEY": "k", "LEVELFORGE_PROVIDER_ENABLED": "0"})) is None
    settings = ProviderSettings.from_env(
        {"LEVELFORGE_PROVIDER_API_KEY": "k", "LEVELFORGE_PROVIDER_MODEL": "m", "LEVELFORGE_PROVIDER_TIMEOUT": "5"}
    )
    assert settings.configured and settings.model == "m" and settings.timeout == 5.0
    assert create_provider(settings) is not None
