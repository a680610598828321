"""Tests for example value extraction and sort field enumeration."""

from node_schema.examples import build_field_enum_values, extract_field_examples


class TestExtractFieldExamples:
    """Tests for extract_field_examples."""

    def test_first_non_null_value_wins(self):
        nodes = [{"a": None}, {"a": 1}, {"a": 2}]
        assert extract_field_examples(nodes) == {"a": 1}

    def test_union_of_keys(self):
        """A field present on any record appears in the example."""
        nodes = [{"a": 1}, {"b": "x"}]
        assert extract_field_examples(nodes) == {"a": 1, "b": "x"}

    def test_keys_keep_first_seen_order(self):
        nodes = [{"b": 1, "a": 2}, {"c": 3, "a": 4}]
        assert list(extract_field_examples(nodes)) == ["b", "a", "c"]

    def test_nested_objects_are_merged(self):
        nodes = [
            {"frontmatter": {"title": "One"}},
            {"frontmatter": {"title": None, "draft": True}},
        ]
        assert extract_field_examples(nodes) == {
            "frontmatter": {"title": "One", "draft": True}
        }

    def test_lists_collapse_to_merged_first_element(self):
        nodes = [
            {"authors": [{"name": "Ann"}, {"email": "ann@example.com"}]},
            {"authors": [{"name": "Bob", "age": 40}]},
        ]
        assert extract_field_examples(nodes) == {
            "authors": [{"name": "Ann", "email": "ann@example.com", "age": 40}]
        }

    def test_list_skips_null_elements(self):
        nodes = [{"tags": [None, "python"]}]
        assert extract_field_examples(nodes) == {"tags": ["python"]}

    def test_all_null_fields_are_excluded(self):
        nodes = [{"a": None, "b": 1}, {"a": None}]
        assert extract_field_examples(nodes) == {"b": 1}

    def test_empty_containers_are_excluded(self):
        nodes = [{"tags": [], "meta": {}, "deep": {"x": None}}, {"tags": []}]
        assert extract_field_examples(nodes) == {}

    def test_first_shape_wins_on_conflict(self):
        """Values of a different kind than the first observation are ignored."""
        nodes = [{"f": {"x": 1}}, {"f": "text"}, {"f": {"y": 2}}]
        assert extract_field_examples(nodes) == {"f": {"x": 1, "y": 2}}

    def test_does_not_mutate_records(self):
        nodes = [{"f": {"x": 1}}, {"f": {"y": 2}}]
        extract_field_examples(nodes)
        assert nodes == [{"f": {"x": 1}}, {"f": {"y": 2}}]


class TestBuildFieldEnumValues:
    """Tests for build_field_enum_values."""

    def test_flat_fields(self):
        nodes = [{"a": 1, "b": "x"}, {"a": 2, "b": "y"}]
        assert build_field_enum_values(nodes) == {"a": "a", "b": "b"}

    def test_nested_fields_joined_with_triple_underscore(self):
        nodes = [{"frontmatter": {"title": "Hi", "date": "2019-01-01"}}]
        assert build_field_enum_values(nodes) == {
            "frontmatter___title": "frontmatter.title",
            "frontmatter___date": "frontmatter.date",
        }

    def test_depth_is_limited_to_three(self):
        nodes = [{"f": {"x": {"y": {"z": 1}}}}]
        assert build_field_enum_values(nodes) == {"f___x___y": "f.x.y"}

    def test_lists_are_leaves(self):
        nodes = [{"authors": [{"name": "Ann"}]}]
        assert build_field_enum_values(nodes) == {"authors": "authors"}

    def test_invalid_characters_are_replaced(self):
        nodes = [{"first-name": "Ann", "2nd": 1}]
        assert build_field_enum_values(nodes) == {
            "first_name": "first-name",
            "_2nd": "2nd",
        }

    def test_null_fields_are_not_sortable(self):
        nodes = [{"a": None, "b": 1}]
        assert build_field_enum_values(nodes) == {"b": "b"}
