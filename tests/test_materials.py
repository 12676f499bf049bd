"""Tests for OBJ mtllib extraction and MTL parsing."""

from conftest import FEMUR_MTL

from specimen_viewer.core.materials import extract_mtllib_references, parse_map_spec, parse_mtl


class TestMtllib:
    def test_references(self):
        obj = "# obj\nv 0 0 0\nmtllib femur.mtl\n  MTLLIB other lib.mtl  \nf 1 1 1\n"
        assert extract_mtllib_references(obj) == ["femur.mtl", "other lib.mtl"]

    def test_no_references(self):
        assert extract_mtllib_references("v 0 0 0") == []
        assert extract_mtllib_references(None) == []


class TestParseMapSpec:
    """Test texture option parsing."""

    def test_plain_path(self):
        spec = parse_map_spec("textures/a.png")
        assert spec.path == "textures/a.png"
        assert spec.scale == (1.0, 1.0)
        assert spec.offset == (0.0, 0.0)
        assert spec.clamp is False

    def test_scale_and_clamp(self):
        spec = parse_map_spec("-s 2 3 1 -clamp on tex/a.png")
        assert spec.scale == (2.0, 3.0)
        assert spec.clamp is True
        assert spec.path == "tex/a.png"

    def test_single_scale_value_is_uniform(self):
        assert parse_map_spec("-s 2 a.png").scale == (2.0, 2.0)

    def test_offset_keeps_path_with_spaces(self):
        spec = parse_map_spec("-o 0.5 0.25 file with space.png")
        assert spec.offset == (0.5, 0.25)
        assert spec.path == "file with space.png"

    def test_unknown_numeric_option_skipped(self):
        assert parse_map_spec("-bm 0.5 normal.png").path == "normal.png"

    def test_clamp_off(self):
        assert parse_map_spec("-clamp off a.png").clamp is False

    def test_empty(self):
        assert parse_map_spec("").path is None
        assert parse_map_spec(None).path is None


class TestParseMtl:
    """Test material library parsing."""

    def test_sample_library(self):
        materials = parse_mtl(FEMUR_MTL)

        assert list(materials) == ["bone", "marrow"]
        bone = materials["bone"]
        assert bone.kd == (0.8, 0.7, 0.6)
        assert bone.map_kd.path == "textures/femur_diffuse.jpg"
        assert bone.map_normal.path == "textures/missing_normal.png"
        assert bone.map_roughness is None

    def test_black_diffuse_is_kept(self):
        assert parse_mtl(FEMUR_MTL)["marrow"].kd == (0.0, 0.0, 0.0)

    def test_keyword_aliases(self):
        materials = parse_mtl(
            "newmtl m\nmap_Pr rough.png\nnorm n.png\nmap_ao ao.png\n"
        )
        material = materials["m"]
        assert material.map_roughness.path == "rough.png"
        assert material.map_normal.path == "n.png"
        assert material.map_ao.path == "ao.png"

    def test_statements_before_newmtl_ignored(self):
        materials = parse_mtl("Kd 0 0 0\nmap_Kd x.png\nnewmtl m\n")
        assert materials["m"].kd == (1.0, 1.0, 1.0)
        assert materials["m"].map_kd is None

    def test_empty(self):
        assert parse_mtl("") == {}
        assert parse_mtl(None) == {}
