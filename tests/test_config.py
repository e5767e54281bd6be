import json

import pytest
from pydantic import ValidationError

from comp_directory.config import Settings, default_config, load_config
from comp_directory.models import DirectoryConfig


def test_default_config_is_valid():
    cfg = default_config()
    assert cfg.field_map["title"][0] == "comp name"
    assert cfg.untitled == "Untitled competition"
    assert any(e.visibility == "admin" for e in cfg.sections["Procedures"])


@pytest.mark.parametrize(
    "bad",
    [
        {"field_map": {"title": []}},
        {"field_map": {"title": ["  "]}},
        {"field_map": {"title": ["Name"]}, "sections": {"Rules": [{"label": "", "header": "Tees"}]}},
        {"field_map": {"title": ["Name"]}, "detail_fallbacks": [{"label": "Summary", "header": ""}]},
        {"field_map": {"title": ["Name"]}, "sections": {"Rules": [{"label": "T", "header": "T", "visibility": "secret"}]}},
    ],
)
def test_invalid_config_rejected(bad):
    with pytest.raises(ValidationError):
        DirectoryConfig.model_validate(bad)


def test_load_config_partial_file_keeps_defaults(tmp_path):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps({"untitled": "TBC"}), encoding="utf-8")
    cfg = load_config(str(p))
    assert cfg.untitled == "TBC"
    assert cfg.field_map == default_config().field_map


def test_load_config_from_env(tmp_path, monkeypatch):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps({"field_map": {"title": ["Event"]}}), encoding="utf-8")
    monkeypatch.setenv("DIRECTORY_CONFIG", str(p))
    assert load_config().field_map == {"title": ["Event"]}


def test_settings_fall_back_on_bad_values(monkeypatch):
    monkeypatch.setenv("PAGE_SIZE", "abc")
    monkeypatch.setenv("SEARCH_MODE", "EXACT")
    monkeypatch.delenv("LINK_BASE_URL", raising=False)
    s = Settings()
    assert s.page_size == 10
    assert s.search_mode == "exact"
    assert s.link_base_url is None
