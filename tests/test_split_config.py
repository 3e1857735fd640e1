import json

import pytest

from splitter import (
    DEFAULT_TARGETS,
    ClassificationTable,
    Destination,
    SplitConfig,
    load_config,
)
from splitter.tables import config_from_dict


def test_default_table_routes_members():
    table = ClassificationTable()

    assert table.classify("createElement") is Destination.CORE
    assert table.classify("render") is Destination.DOM
    assert table.classify("renderToStaticMarkup") is Destination.DOM_SERVER
    assert table.classify("somethingElse") is None


def test_overlapping_tables_are_rejected():
    with pytest.raises(ValueError, match="render"):
        ClassificationTable(core={"render"}, dom={"render"}, dom_server=set())


def test_default_targets_cover_both_spellings():
    assert [target.module_name for target in DEFAULT_TARGETS] == ["React", "react"]
    modern = DEFAULT_TARGETS[1]
    assert modern.namespace(Destination.DOM).module_path == "react-dom"
    assert modern.namespace(Destination.DOM_SERVER).module_path == "react-dom/server"
    with pytest.raises(ValueError):
        modern.namespace(Destination.CORE)


def test_unknown_quote_style_is_rejected():
    with pytest.raises(ValueError):
        SplitConfig(quote="backtick")
    assert SplitConfig().with_quote(None).quote == "single"
    assert SplitConfig().with_quote("double").quote == "double"


def test_config_from_dict_keeps_defaults():
    config = config_from_dict({"dom": ["render", "hydrate"]})

    assert config.table.classify("hydrate") is Destination.DOM
    assert config.table.classify("createElement") is Destination.CORE
    assert config.targets == DEFAULT_TARGETS


def test_load_config_reads_targets(tmp_path):
    path = tmp_path / "split.json"
    path.write_text(
        json.dumps(
            {
                "quote": "double",
                "targets": [
                    {
                        "module": "core",
                        "dom_module": "namespace-a",
                        "dom_identifier": "SplitA",
                        "dom_server_module": "namespace-b",
                    }
                ],
            }
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.quote == "double"
    (target,) = config.targets
    assert target.module_name == "core"
    assert target.dom.identifier == "SplitA"
    assert target.dom_server.identifier == "ReactDOMServer"


def test_load_config_rejects_incomplete_target(tmp_path):
    path = tmp_path / "split.json"
    path.write_text(json.dumps({"targets": [{"module": "core"}]}), encoding="utf-8")

    with pytest.raises(ValueError, match="dom_module"):
        load_config(path)


def test_load_config_rejects_non_object(tmp_path):
    path = tmp_path / "split.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(path)
