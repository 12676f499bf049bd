"""Tests for metadata normalisation and display inlining."""

import pytest

from specimen_viewer.core.metadata import (
    PATH_SEPARATOR,
    Shape,
    build_display_tree,
    classify,
    extract_metadata_values,
    extract_title,
    get_dataset_files,
    humanize_label,
    normalize_field,
    normalize_metadata,
    normalize_metadata_blocks,
    stringify,
)


def _walk(nodes):
    for node in nodes:
        yield node
        yield from _walk(node.children)


def _author_field():
    return {
        "typeName": "author",
        "multiple": True,
        "typeClass": "compound",
        "value": [
            {
                "authorName": {
                    "typeName": "authorName",
                    "typeClass": "primitive",
                    "value": "Doe, Jane",
                },
                "authorAffiliation": {
                    "typeName": "authorAffiliation",
                    "typeClass": "primitive",
                    "value": "IPHES",
                },
            }
        ],
    }


class TestHumanizeLabel:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("dwcCatalogNumber", "Catalog Number"),
            ("dcterms:bibliographicCitation", "Bibliographic Citation"),
            ("dc.title", "Title"),
            ("author_name", "Author name"),
            ("  spaced   out ", "Spaced out"),
            ("description", "Description"),
        ],
    )
    def test_labels(self, raw, expected):
        assert humanize_label(raw) == expected

    def test_empty(self):
        assert humanize_label("") == ""
        assert humanize_label(None) == ""


class TestValues:
    def test_stringify(self):
        assert stringify(True) == "true"
        assert stringify(False) == "false"
        assert stringify(3.0) == "3"
        assert stringify(2.5) == "2.5"
        assert stringify(12) == "12"

    def test_classify(self):
        assert classify(None) is Shape.EMPTY
        assert classify("  ") is Shape.EMPTY
        assert classify([]) is Shape.EMPTY
        assert classify({}) is Shape.EMPTY
        assert classify("x") is Shape.PRIMITIVE
        assert classify([1, "a"]) is Shape.PRIMITIVE_ARRAY
        assert classify([{"a": 1}]) is Shape.OBJECT_ARRAY
        assert classify({"a": 1}) is Shape.OBJECT

    def test_extract_metadata_values_flattens_compound(self):
        assert extract_metadata_values(_author_field()) == ["Doe, Jane", "IPHES"]


class TestNormalizeField:
    """Test one declared field at a time."""

    def test_primitive_leaf(self):
        node = normalize_field({"typeName": "title", "typeClass": "primitive", "value": "Femur"})

        assert node.label == "Title"
        assert node.breadcrumb_path == "Title"
        assert node.values == ["Femur"]
        assert node.children == []

    def test_display_name_preferred(self):
        node = normalize_field(
            {"typeName": "x", "displayName": "Shown", "typeClass": "primitive", "value": 1}
        )
        assert node.label == "Shown"

    def test_controlled_vocabulary_expands_list(self):
        node = normalize_field(
            {"typeName": "subject", "typeClass": "controlledVocabulary", "value": ["A", "B"]}
        )
        assert node.values == ["A", "B"]

    def test_controlled_vocabulary_skips_missing_entries(self):
        node = normalize_field(
            {"typeName": "s", "typeClass": "controlledVocabulary", "value": ["a", "b", None]}
        )
        assert node.values == ["a", "b"]

    def test_primitive_list_is_joined(self):
        node = normalize_field(
            {"typeName": "keyword", "typeClass": "primitive", "value": ["bone", 3, True]}
        )
        assert node.values == ["bone, 3, true"]

    def test_empty_values_produce_no_node(self):
        assert normalize_field({"typeName": "t", "typeClass": "primitive", "value": ""}) is None
        assert normalize_field({"typeName": "t", "typeClass": "compound", "value": []}) is None
        assert normalize_field({"typeClass": "primitive", "value": "no label"}) is None

    def test_empty_object_value_is_pruned(self):
        assert normalize_field({"typeName": "x", "typeClass": "compound", "value": {}}) is None
        assert normalize_field({"typeName": "x", "typeClass": "primitive", "value": {}}) is None

    def test_compound_items(self):
        node = normalize_field(_author_field())

        assert node.label == "Author"
        assert [child.label for child in node.children] == ["Item 1"]
        item = node.children[0]
        assert item.breadcrumb_path == f"Author{PATH_SEPARATOR}Item 1"
        assert [child.label for child in item.children] == ["Author Name", "Author Affiliation"]
        value_node = item.children[0].children[0]
        assert value_node.label == "Value"
        assert value_node.values == ["Doe, Jane"]

    def test_nested_fields(self):
        node = normalize_field(
            {
                "typeName": "specimen",
                "fields": [{"typeName": "bone", "typeClass": "primitive", "value": "femur"}],
            }
        )
        assert node.children[0].breadcrumb_path == f"Specimen{PATH_SEPARATOR}Bone"
        assert node.children[0].values == ["femur"]


class TestNormalizeMetadata:
    """Test whole graphs, including untyped objects."""

    def test_accepts_bare_field_list(self):
        nodes = normalize_metadata([{"typeName": "a", "typeClass": "primitive", "value": "1"}])
        assert [n.label for n in nodes] == ["A"]

    def test_untyped_object_becomes_labelled_node(self):
        nodes = normalize_metadata({"fields": [], "extra": {"a": 1, "b": [1, 2]}})

        assert len(nodes) == 1
        extra = nodes[0]
        assert extra.label == "Extra"
        assert [(c.label, c.values) for c in extra.children] == [("A", ["1"]), ("B", ["1, 2"])]

    def test_untyped_object_array(self):
        nodes = normalize_metadata({"specimens": [{"id": "x"}, {"id": "y"}, "skip"]})

        specimens = nodes[0]
        assert [c.label for c in specimens.children] == ["Item 1", "Item 2"]
        assert specimens.children[1].children[0].values == ["y"]

    def test_unusable_input(self):
        assert normalize_metadata(None) == []
        assert normalize_metadata("text") == []

    def test_no_empty_nodes(self, sample_detail):
        for section in normalize_metadata_blocks(sample_detail, inline=False):
            for node in _walk(section.fields):
                assert node.has_values or node.has_children


class TestDisplayTree:
    """Test folding of Value, Item N and Expanded value children."""

    def test_compound_is_inlined(self):
        tree = build_display_tree([normalize_field(_author_field())])

        author = tree[0]
        assert author.values == []
        assert [(c.label, c.values) for c in author.children] == [
            ("Author Name", ["Doe, Jane"]),
            ("Author Affiliation", ["IPHES"]),
        ]

    def test_expanded_value_is_merged(self):
        nodes = normalize_metadata(
            {"term": {"value": "Femur", "expandedValue": {"scheme": "uberon"}}}
        )
        term = build_display_tree(nodes)[0]

        assert term.values == ["Femur"]
        assert [(c.label, c.values) for c in term.children] == [("Scheme", ["uberon"])]

    def test_sections(self, sample_detail):
        sections = normalize_metadata_blocks(sample_detail)

        assert [s.title for s in sections] == ["Citation Metadata", "Darwin Core"]
        citation = sections[0]
        assert [f.label for f in citation.fields] == ["Title", "Author", "Subject"]
        for section in sections:
            for node in _walk(section.fields):
                assert node.has_values or node.has_children

    def test_block_without_fields_skipped(self):
        detail = {"metadataBlocks": {"geospatial": {"displayName": "Geo", "fields": []}}}
        assert normalize_metadata_blocks(detail) == []

    def test_serialised_section(self, sample_detail):
        data = normalize_metadata_blocks(sample_detail)[0].model_dump(by_alias=True)
        assert data["fields"][0]["breadcrumbPath"] == "Title"


class TestDetailHelpers:
    def test_extract_title(self, sample_detail):
        assert extract_title(sample_detail) == "Ursus spelaeus femur"

    def test_extract_title_from_list(self):
        detail = {
            "metadataBlocks": {
                "citation": {"fields": [{"typeName": "title", "value": [{"value": "Listed"}]}]}
            }
        }
        assert extract_title(detail) == "Listed"

    def test_extract_title_missing(self):
        assert extract_title({}) is None
        assert extract_title({"metadataBlocks": {"citation": {"fields": []}}}) is None

    def test_get_dataset_files(self, sample_detail):
        assert len(get_dataset_files(sample_detail)) == 6
        assert get_dataset_files({"data": {}}) == []
