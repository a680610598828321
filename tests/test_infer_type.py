"""Tests for output object type inference."""

import pytest

from node_schema.context import InferenceContext, ResolveInfo
from node_schema.errors import WarningKind
from node_schema.infer_type import (
    infer_field_type,
    infer_node_object_type,
    infer_object_structure_from_nodes,
)
from node_schema.printer import print_types
from node_schema.resolvers import DateResolver
from node_schema.types import (
    BOOLEAN,
    FLOAT,
    INT,
    STRING,
    ListTypeDefinition,
    ObjectTypeDefinition,
)


def _infer(nodes, context=None):
    context = context or InferenceContext.from_nodes(nodes)
    return infer_object_structure_from_nodes(nodes, context)


class TestFlatRecords:
    """Records with scalar fields."""

    def test_scalar_fields(self):
        """Scenario: two Things with an int and a string field."""
        nodes = [
            {"id": "1", "type": "Thing", "a": 1, "b": "x"},
            {"id": "2", "type": "Thing", "a": 2, "b": "y"},
        ]
        fields = _infer(nodes)
        assert list(fields) == ["a", "b"]
        assert fields["a"].type_def is INT
        assert fields["b"].type_def is STRING
        assert fields["a"].resolve is None

    def test_all_scalar_kinds(self):
        nodes = [{"type": "Thing", "flag": True, "name": "n", "count": 3, "ratio": 0.25}]
        fields = _infer(nodes)
        assert fields["flag"].type_def is BOOLEAN
        assert fields["name"].type_def is STRING
        assert fields["count"].type_def is INT
        assert fields["ratio"].type_def is FLOAT

    def test_reserved_root_fields_are_skipped(self):
        nodes = [{"id": "1", "type": "Thing", "parent": "p", "children": ["c"], "a": 1}]
        assert list(_infer(nodes)) == ["a"]

    def test_null_fields_are_omitted(self):
        nodes = [{"type": "Thing", "a": None, "b": 1}, {"type": "Thing", "a": None}]
        assert list(_infer(nodes)) == ["b"]

    def test_fields_from_any_record(self):
        nodes = [{"type": "Thing", "a": 1}, {"type": "Thing", "b": "x"}]
        assert list(_infer(nodes)) == ["a", "b"]

    def test_whole_number_floats_are_ints(self):
        nodes = [{"type": "Thing", "price": 2.0}]
        assert _infer(nodes)["price"].type_def is INT

    def test_first_representative_decides_number_kind(self):
        """Int vs Float comes from the record that supplied the example."""
        assert _infer([{"type": "T", "n": 1}, {"type": "T", "n": 1.5}])["n"].type_def is INT
        assert _infer([{"type": "T", "n": 1.5}, {"type": "T", "n": 1}])["n"].type_def is FLOAT

    def test_untypeable_values_are_omitted(self):
        nodes = [{"type": "Thing", "blob": b"raw", "handle": object(), "a": 1}]
        assert list(_infer(nodes)) == ["a"]


class TestLists:
    """List-valued fields."""

    def test_list_of_scalars(self):
        fields = _infer([{"type": "Post", "tags": ["a", "b"]}])
        tags = fields["tags"].type_def
        assert isinstance(tags, ListTypeDefinition)
        assert tags.of_type is STRING

    def test_empty_list_is_omitted(self):
        assert _infer([{"type": "Post", "tags": [], "a": 1}]) == _infer([{"type": "Post", "a": 1}])
        assert "tags" not in _infer([{"type": "Post", "tags": [], "a": 1}])

    def test_list_of_objects(self):
        fields = _infer([{"type": "Post", "authors": [{"name": "Ann"}, {"age": 3}]}])
        authors = fields["authors"].type_def
        assert isinstance(authors, ListTypeDefinition)
        element = authors.of_type
        assert isinstance(element, ObjectTypeDefinition)
        assert element.name == "PostAuthors"
        assert element.fields["name"].type_def is STRING
        assert element.fields["age"].type_def is INT

    def test_list_of_lists(self):
        fields = _infer([{"type": "Grid", "rows": [[1, 2], [3]]}])
        rows = fields["rows"].type_def
        assert rows.name == "[[Int]]"

    def test_list_of_dates_is_list_of_strings(self):
        fields = _infer([{"type": "Post", "dates": ["2019-01-01"]}])
        assert fields["dates"].type_def.of_type is STRING
        assert fields["dates"].resolve is None


class TestNestedObjects:
    """Nested objects become their own types."""

    def test_nested_object_type(self):
        nodes = [
            {"id": "1", "type": "MarkdownRemark", "frontmatter": {"title": "Hi", "draft": False}},
            {"id": "2", "type": "MarkdownRemark", "frontmatter": {"title": "Yo", "tags": ["x"]}},
        ]
        fields = _infer(nodes)
        frontmatter = fields["frontmatter"].type_def
        assert isinstance(frontmatter, ObjectTypeDefinition)
        assert frontmatter.name == "MarkdownRemarkFrontmatter"
        assert list(frontmatter.fields) == ["title", "draft", "tags"]

    def test_deep_nesting_names_follow_selector(self):
        nodes = [{"type": "Article", "frontmatter": {"seo": {"title": "x"}}}]
        seo = _infer(nodes)["frontmatter"].type_def.fields["seo"].type_def
        assert seo.name == "ArticleFrontmatterSeo"

    def test_reserved_names_allowed_below_root(self):
        nodes = [{"type": "Thing", "meta": {"id": "m1", "type": "kind"}}]
        meta = _infer(nodes)["meta"].type_def
        assert list(meta.fields) == ["id", "type"]

    def test_object_without_typeable_fields_is_omitted(self):
        nodes = [{"type": "Thing", "meta": {"handle": object()}, "a": 1}]
        assert list(_infer(nodes)) == ["a"]


class TestDates:
    """Date detection on output fields."""

    def test_date_field(self):
        fields = _infer([{"type": "Post", "date": "2019-01-01"}])
        date = fields["date"]
        assert date.type_def is STRING
        assert list(date.args) == ["formatString", "fromNow", "difference"]
        assert date.args["fromNow"].type_def is BOOLEAN
        assert date.resolve == DateResolver(field_name="date")

    def test_format_string(self, make_context):
        """Scenario: formatString "YYYY" on 2019-01-01 gives "2019"."""
        record = {"type": "Post", "date": "2019-01-01"}
        context = make_context([record])
        date = infer_object_structure_from_nodes([record], context)["date"]
        info = ResolveInfo(context=context)
        assert date.resolve(record, {"formatString": "YYYY"}, info) == "2019"
        assert record["date"] == "2019-01-01"

    def test_no_arguments_returns_raw_value(self, make_context):
        record = {"type": "Post", "date": "2019-01-01T10:00:00Z"}
        context = make_context([record])
        date = infer_object_structure_from_nodes([record], context)["date"]
        info = ResolveInfo(context=context)
        assert date.resolve(record, {}, info) == "2019-01-01T10:00:00Z"

    def test_from_now_and_difference(self, make_context):
        record = {"type": "Post", "date": "2020-01-07"}
        context = make_context([record])
        date = infer_object_structure_from_nodes([record], context)["date"]
        info = ResolveInfo(context=context)
        assert date.resolve(record, {"fromNow": True}, info) == "3 days ago"
        assert date.resolve(record, {"difference": "days"}, info) == 3

    def test_non_date_value_on_other_record(self, make_context):
        records = [{"type": "Post", "date": "2019-01-01"}, {"type": "Post", "date": "soon"}]
        context = make_context(records)
        date = infer_object_structure_from_nodes(records, context)["date"]
        info = ResolveInfo(context=context)
        assert date.resolve(records[1], {"formatString": "YYYY"}, info) == "soon"

    def test_nested_date_reads_nested_key(self, make_context):
        record = {"type": "Post", "frontmatter": {"published": "2019-06-01"}}
        context = make_context([record])
        frontmatter = infer_object_structure_from_nodes([record], context)["frontmatter"]
        published = frontmatter.type_def.fields["published"]
        info = ResolveInfo(context=context)
        assert published.resolve(record["frontmatter"], {"formatString": "MMMM YYYY"}, info) == "June 2019"

    def test_numbers_are_not_dates(self):
        assert _infer([{"type": "Post", "year": 2019}])["year"].type_def is INT


class TestInferFieldType:
    """Direct calls to infer_field_type."""

    def test_null_and_empty(self):
        context = InferenceContext.from_nodes([])
        nodes = [{"type": "Thing"}]
        assert infer_field_type(None, "a", nodes, context) is None
        assert infer_field_type([], "a", nodes, context) is None
        assert infer_field_type([None], "a", nodes, context) is None

    def test_field_name_defaults_to_last_segment(self):
        context = InferenceContext.from_nodes([])
        field = infer_field_type("2019-01-01", "frontmatter.date", [{"type": "Post"}], context)
        assert field.resolve.field_name == "date"


class TestIdempotence:
    """Building twice gives the same schema."""

    NODES = [
        {"id": "1", "type": "Post", "title": "a", "frontmatter": {"tags": ["x"], "date": "2019-01-01"}},
        {"id": "2", "type": "Post", "authors": [{"name": "Ann"}], "score": 1.5},
    ]

    def test_same_context(self):
        context = InferenceContext.from_nodes(self.NODES)
        first = infer_object_structure_from_nodes(self.NODES, context)
        second = infer_object_structure_from_nodes(self.NODES, context)
        assert list(first) == list(second)
        assert print_types([ObjectTypeDefinition("Post", first)]) == print_types(
            [ObjectTypeDefinition("Post", second)]
        )

    def test_fresh_contexts(self):
        first = _infer(self.NODES)
        second = _infer(self.NODES)
        assert first == second


class TestFieldIsolation:
    """A failing field never aborts the build."""

    def test_store_error_is_recorded(self):
        class BrokenStore:
            def get_node(self, node_id):
                raise RuntimeError("store unavailable")

            def get_nodes(self):
                return []

        nodes = [{"id": "1", "type": "Post", "author___NODE": "a1", "title": "t"}]
        context = InferenceContext(store=BrokenStore())
        fields = infer_object_structure_from_nodes(nodes, context)
        assert list(fields) == ["title"]
        assert len(context.warnings) == 1
        warning = context.warnings[0]
        assert warning.kind is WarningKind.FIELD_ERROR
        assert warning.selector == "Post.author___NODE"
        assert "store unavailable" in warning.message


class TestInferNodeObjectType:
    """Registering a record type."""

    def test_registers_type(self):
        nodes = [{"id": "1", "type": "Author", "name": "Ann"}]
        context = InferenceContext.from_nodes(nodes)
        processed = infer_node_object_type(nodes, context)
        assert context.registry.get("Author") is processed
        assert processed.node_object_type.name == "Author"
        assert list(processed.node_object_type.fields) == ["name"]
        assert processed.nodes == nodes

    def test_self_reference(self):
        nodes = [
            {"id": "p1", "type": "Person", "name": "Ann", "friend___NODE": "p2"},
            {"id": "p2", "type": "Person", "name": "Bob"},
        ]
        context = InferenceContext.from_nodes(nodes)
        processed = infer_node_object_type(nodes, context)
        friend = processed.node_object_type.fields["friend"]
        assert friend.type_def is processed.node_object_type

    def test_nested_names_avoid_record_type_names(self):
        context = InferenceContext.from_nodes([])
        infer_node_object_type([{"id": "r", "type": "MarkdownRemark", "a": 1}], context)
        fields = infer_object_structure_from_nodes(
            [{"id": "m", "type": "Markdown", "remark": {"b": 1}}], context
        )
        assert fields["remark"].type_def.name == "MarkdownRemark_2"

    def test_rebuild_with_new_build(self):
        authors = [{"id": "a1", "type": "Author", "name": "Ann", "meta": {"city": "Oslo"}}]
        posts = [{"id": "p1", "type": "Post", "author___NODE": "a1"}]
        context = InferenceContext.from_nodes(authors + posts)
        author = infer_node_object_type(authors, context)
        post = infer_node_object_type(posts, context)
        before = print_types([post.node_object_type])

        fresh = context.new_build()
        rebuilt = infer_node_object_type(authors, fresh)
        assert rebuilt is author
        assert list(rebuilt.node_object_type.fields) == ["name", "meta"]
        assert rebuilt.node_object_type.fields["meta"].type_def.name == "AuthorMeta"
        assert infer_node_object_type(posts, fresh) is post
        assert print_types([post.node_object_type]) == before
        assert post.node_object_type.fields["author"].type_def is author.node_object_type
        assert fresh.warnings == []

    def test_rebuild_picks_up_changed_records(self):
        context = InferenceContext.from_nodes([])
        infer_node_object_type([{"id": "1", "type": "Thing", "a": 1}], context)
        changed = [{"id": "1", "type": "Thing", "b": "x"}]
        processed = infer_node_object_type(changed, context.new_build())
        assert list(processed.node_object_type.fields) == ["b"]
        assert processed.nodes == changed

    @pytest.mark.parametrize("repeat", [1, 2])
    def test_new_build_keeps_reserved_names(self, repeat):
        context = InferenceContext.from_nodes([])
        infer_node_object_type([{"id": "r", "type": "MarkdownRemark", "a": 1}], context)
        for _ in range(repeat):
            context = context.new_build()
        fields = infer_object_structure_from_nodes(
            [{"id": "m", "type": "Markdown", "remark": {"b": 1}}], context
        )
        assert fields["remark"].type_def.name == "MarkdownRemark_2"
