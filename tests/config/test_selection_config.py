"""
Tests for YAML selection configuration (selection_config/).

Verifies:
- Loading builds one SelectorRegistry per resource, in document order
- Validation errors block loading and are all reported
- Warnings do not block loading
- Checksums are deterministic
"""

import textwrap

import pytest

from selection_config import build_registries, load_selection_file
from selection_config.loader import compute_checksum, parse_document
from selection_config.validator import validate_selection_document
from selection_kernel.domain.request_input import RequestInput
from selection_kernel.services.selection_resolver import SelectionResolver

VALID_YAML = """
version: 1
resources:
  articles:
    selection:
      paginate: 2
      order:
        default: latest
        columns:
          date: id
      filter:
        columns: [name]
    paginate_limit: 5
  drafts:
    selection:
      paginate: 10
    selection_can_be_empty: true
    primary_key: name
"""


def _write(tmp_path, content: str):
    path = tmp_path / "selection.yaml"
    path.write_text(textwrap.dedent(content))
    return path


class TestLoadSelectionFile:

    def test_registries_built(self, tmp_path):
        registries = load_selection_file(_write(tmp_path, VALID_YAML))

        assert list(registries) == ["articles", "drafts"]
        articles = registries["articles"]
        assert articles.names == ("paginate", "order", "filter")
        assert articles.paginate_limit == 5
        assert articles.resolve_option("order.columns.date") == "id"

        drafts = registries["drafts"]
        assert drafts.selection_can_be_empty is True
        assert drafts.primary_key == "name"

    def test_loaded_registry_resolves(self, tmp_path, articles, ids_of):
        registry = load_selection_file(_write(tmp_path, VALID_YAML))["articles"]
        result = SelectionResolver(registry).select(articles, RequestInput({"paginate": "5"}))
        assert ids_of(result) == [11, 10, 9, 8, 7]

    def test_load_logged(self, tmp_path, captured_logs):
        load_selection_file(_write(tmp_path, VALID_YAML))
        loaded = [r for r in captured_logs() if r["message"] == "selection_config_loaded"]
        assert len(loaded) == 1
        assert loaded[0]["resource_count"] == 2
        assert len(loaded[0]["checksum"]) == 64

    def test_validation_failure(self, tmp_path):
        path = _write(
            tmp_path,
            """
            version: 1
            resources:
              articles:
                selection:
                  search: x
                paginate_limit: 0
            """,
        )
        with pytest.raises(ValueError) as exc_info:
            load_selection_file(path)
        message = str(exc_info.value)
        assert "unknown selector 'search'" in message
        assert "'paginate_limit' must be a positive integer" in message

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_selection_file(tmp_path / "missing.yaml")

    def test_warning_logged_but_loaded(self, tmp_path, captured_logs):
        path = _write(
            tmp_path,
            """
            version: 1
            resources:
              articles:
                selection:
                  paginate: 50
                paginate_limit: 10
            """,
        )
        registries = load_selection_file(path)
        assert registries["articles"].default_for("paginate") == 50
        warnings = [r for r in captured_logs() if r["message"] == "selection_config_warning"]
        assert "exceeds paginate_limit" in warnings[0]["detail"]


class TestValidator:

    def test_valid_document(self):
        import yaml

        result = validate_selection_document(yaml.safe_load(VALID_YAML))
        assert result.is_valid
        assert result.warnings == []

    def test_not_a_mapping(self):
        result = validate_selection_document(["version", 1])
        assert result.errors == ["Selection config must be a dictionary"]

    def test_missing_version_and_resources(self):
        result = validate_selection_document({})
        assert "Selection config must have 'version' field" in result.errors
        assert "Selection config must have a 'resources' mapping" in result.errors

    def test_version_type(self):
        result = validate_selection_document({"version": "1", "resources": {}})
        assert not result.is_valid

    @pytest.mark.parametrize(
        "entry, fragment",
        [
            ("not a mapping", "must be a dictionary"),
            ({"selection": ["paginate"]}, "'selection' must be a dictionary"),
            ({"selection": {}, "unique_date_selector": "yes"}, "must be a boolean"),
            ({"selection": {}, "selection_can_be_empty": 1}, "must be a boolean"),
            ({"selection": {}, "paginate_limit": True}, "positive integer"),
            ({"selection": {"filter": {"columns": "name"}}}, "list of column names"),
            ({"selection": {"filter": {"columns": [1]}}}, "list of column names"),
            ({"selection": {"paginate": 0}}, "default page size"),
        ],
    )
    def test_resource_errors(self, entry, fragment):
        result = validate_selection_document({"version": 1, "resources": {"articles": entry}})
        assert not result.is_valid
        assert any(fragment in error for error in result.errors)

    def test_date_defaults_warned_under_uniqueness(self):
        document = {"version": 1, "resources": {"articles": {"selection": {"month": "2024-01-01"}}}}
        result = validate_selection_document(document)
        assert result.is_valid
        assert any("default of 'month' is ignored" in w for w in result.warnings)

    def test_date_defaults_accepted_without_uniqueness(self):
        document = {
            "version": 1,
            "resources": {
                "articles": {
                    "selection": {"month": "2024-01-01"},
                    "unique_date_selector": False,
                }
            },
        }
        assert validate_selection_document(document).warnings == []


class TestParsing:

    def test_checksum_deterministic(self):
        document = {"version": 1, "resources": {"articles": {"selection": {"paginate": 2}}}}
        assert compute_checksum(document) == compute_checksum(dict(document))

    def test_checksum_depends_on_selector_order(self):
        first = {"version": 1, "resources": {"a": {"selection": {"paginate": 2, "order": "latest"}}}}
        second = {"version": 1, "resources": {"a": {"selection": {"order": "latest", "paginate": 2}}}}
        assert compute_checksum(first) != compute_checksum(second)

    def test_parse_and_build(self):
        document = {"version": 3, "resources": {"notes": None}}
        config_set = parse_document(document)
        assert config_set.version == 3
        assert config_set.get("notes").selection == {}
        assert config_set.get("missing") is None

        registries = build_registries(config_set)
        assert registries["notes"].names == ()
        assert registries["notes"].unique_date_selector is True
