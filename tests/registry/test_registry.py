import logging
import warnings

import pytest

from inscripta.coordmap.coord_system import CoordSystem, CoordSystemAttribute
from inscripta.coordmap.exc import (
    InvalidArgumentError,
    ConfigurationError,
    MalformedMappingError,
    InvalidReferenceError,
    DuplicateConflictError,
    NoDefaultVersionWarning,
    DidYouMeanAliasWarning,
    AlreadyStoredWarning,
)
from inscripta.coordmap.registry import CoordSystemRegistry, Advisory
from inscripta.coordmap.store import InMemoryCoordSystemStore, CoordSystemRow, FeatureTableRow


def _names(coord_systems):
    return [str(cs) for cs in coord_systems]


class TestConstruction:
    def test_load(self, ncbi33_registry):
        assert len(ncbi33_registry) == 6
        assert len(ncbi33_registry.mapping_graph) == 4
        assert len(ncbi33_registry.mapping_path_cache) == 0

    def test_attributes_parsed(self, ncbi33_registry):
        contig = ncbi33_registry.fetch_by_dbID(3)
        assert contig.is_sequence_level
        assert contig.is_default_version
        ncbi34 = ncbi33_registry.fetch_by_dbID(5)
        assert not ncbi34.is_sequence_level
        assert not ncbi34.is_default_version

    def test_null_version_is_versionless(self, ncbi33_registry):
        assert ncbi33_registry.fetch_by_dbID(4).version == ""

    def test_unknown_attribute_logged(self, caplog):
        store = InMemoryCoordSystemStore(
            [CoordSystemRow(coord_system_id=1, name="contig", rank=1, attrib="sequence_level,frozen")]
        )
        with caplog.at_level(logging.WARNING):
            registry = CoordSystemRegistry(store)
        assert "frozen" in caplog.text
        assert registry.fetch_sequence_level() == CoordSystem("contig", 1)

    def test_empty_store(self):
        registry = CoordSystemRegistry(InMemoryCoordSystemStore())
        assert len(registry) == 0
        assert registry.fetch_all() == []
        assert registry.fetch_top_level().is_top_level

    def test_feature_table_unknown_reference(self):
        store = InMemoryCoordSystemStore(
            [CoordSystemRow(coord_system_id=1, name="contig", rank=1)],
            [FeatureTableRow(table_name="gene", coord_system_id=99)],
        )
        with pytest.raises(InvalidReferenceError):
            CoordSystemRegistry(store)

    @pytest.mark.parametrize("mapping", ["chromosome", "chromosome|", "|contig", "chromosome|clone|contig"])
    def test_malformed_mapping(self, ncbi33_store, mapping):
        ncbi33_store.assembly_mappings.append(mapping)
        with pytest.raises(MalformedMappingError):
            CoordSystemRegistry(ncbi33_store)

    @pytest.mark.parametrize(
        "mapping",
        ["chromosome:NCBI99|contig", "scaffold|contig", "toplevel|contig", "clone|contig:v2", "chromosome:|contig"],
    )
    def test_mapping_unknown_reference(self, ncbi33_store, mapping):
        ncbi33_store.assembly_mappings.append(mapping)
        with pytest.raises(InvalidReferenceError):
            CoordSystemRegistry(ncbi33_store)

    def test_mapping_sides(self, ncbi33_store):
        ncbi33_store.assembly_mappings = ["chromosome|clone:", "Clone|SEQLEVEL"]
        registry = CoordSystemRegistry(ncbi33_store)
        assert list(registry.mapping_graph) == [(1, 2), (2, 3)]

    def test_mapping_without_default_version(self, make_registry, caplog):
        with caplog.at_level(logging.WARNING):
            registry = make_registry(
                [("scaffold", "v1", None), ("scaffold", "v2", None), ("contig", "", None)], ["scaffold|contig"]
            )
        assert "No default version" in caplog.text
        assert list(registry.mapping_graph) == [(1, 3)]


class TestFetch:
    def test_fetch_all(self, ncbi33_registry):
        assert [cs.rank for cs in ncbi33_registry.fetch_all()] == [1, 2, 3, 4, 5, 6]
        assert ncbi33_registry.fetch_top_level() not in ncbi33_registry.fetch_all()

    def test_fetch_all_returns_copy(self, ncbi33_registry):
        ncbi33_registry.fetch_all().clear()
        assert len(ncbi33_registry.fetch_all()) == 6

    def test_fetch_by_rank(self, ncbi33_registry):
        assert str(ncbi33_registry.fetch_by_rank(1)) == "chromosome:NCBI33"
        assert str(ncbi33_registry.fetch_by_rank(3)) == "contig"
        assert ncbi33_registry.fetch_by_rank(99) is None

    def test_fetch_by_rank_zero_is_top_level(self, ncbi33_registry):
        assert ncbi33_registry.fetch_by_rank(0) is ncbi33_registry.fetch_top_level()

    @pytest.mark.parametrize("rank", [-1, "1", 1.0, None, True])
    def test_fetch_by_invalid_rank(self, ncbi33_registry, rank):
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.fetch_by_rank(rank)

    def test_top_level_singleton(self, ncbi33_registry):
        top_level = ncbi33_registry.fetch_top_level()
        assert top_level.is_top_level
        assert top_level.rank == 0
        assert top_level.dbID is None
        assert ncbi33_registry.fetch_top_level() is top_level

    @pytest.mark.parametrize(
        "name,version,expected",
        [
            ("chromosome", None, "chromosome:NCBI33"),
            ("CHROMOSOME", None, "chromosome:NCBI33"),
            ("chromosome", "NCBI34", "chromosome:NCBI34"),
            ("chromosome", "ncbi34", "chromosome:NCBI34"),
            ("chromosome", "NCBI35", None),
            ("chromosome", "", None),
            ("clone", "", "clone"),
            ("Contig", None, "contig"),
            ("scaffold", None, None),
            ("seqlevel", None, "contig"),
            ("SeqLevel", None, "contig"),
        ],
    )
    def test_fetch_by_name(self, ncbi33_registry, name, version, expected):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            cs = ncbi33_registry.fetch_by_name(name, version)
        if expected is None:
            assert cs is None
        else:
            assert str(cs) == expected

    @pytest.mark.parametrize("version", [None, "NCBI33", ""])
    def test_fetch_by_name_top_level(self, ncbi33_registry, version):
        assert ncbi33_registry.fetch_by_name("TopLevel", version) is ncbi33_registry.fetch_top_level()

    @pytest.mark.parametrize("version", [34, 33.0, b"NCBI33"])
    def test_fetch_by_name_non_string_version(self, ncbi33_registry, version):
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.fetch_by_name("chromosome", version)
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.resolve_by_name("chromosome", version)

    @pytest.mark.parametrize("name", ["", None])
    def test_fetch_by_name_required(self, ncbi33_registry, name):
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.fetch_by_name(name)

    @pytest.mark.parametrize(
        "name,advisory",
        [("top", Advisory.DID_YOU_MEAN_TOPLEVEL), ("seq_level", Advisory.DID_YOU_MEAN_SEQLEVEL)],
    )
    def test_did_you_mean_alias(self, ncbi33_registry, name, advisory):
        with pytest.warns(DidYouMeanAliasWarning):
            assert ncbi33_registry.fetch_by_name(name) is None
        resolution = ncbi33_registry.resolve_by_name(name)
        assert resolution.coord_system is None
        assert resolution.advisory is advisory

    def test_no_default_version(self, make_registry):
        registry = make_registry([("scaffold", "v1", None), ("scaffold", "v2", None)])
        with pytest.warns(NoDefaultVersionWarning, match=r"Using version \[v1\] arbitrarily"):
            cs = registry.fetch_by_name("scaffold")
        assert str(cs) == "scaffold:v1"

    def test_resolve_by_name_does_not_warn(self, make_registry):
        registry = make_registry([("scaffold", "v1", None), ("scaffold", "v2", None)])
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            resolution = registry.resolve_by_name("scaffold")
        assert str(resolution.coord_system) == "scaffold:v1"
        assert resolution.advisory is Advisory.NO_DEFAULT_VERSION
        assert "scaffold" in resolution.message
        assert registry.resolve_by_name("scaffold", "v2").advisory is None

    def test_fetch_all_by_name(self, ncbi33_registry):
        assert _names(ncbi33_registry.fetch_all_by_name("Chromosome")) == ["chromosome:NCBI33", "chromosome:NCBI34"]
        assert ncbi33_registry.fetch_all_by_name("scaffold") == []
        assert ncbi33_registry.fetch_all_by_name("seqlevel") == [ncbi33_registry.fetch_by_dbID(3)]
        assert ncbi33_registry.fetch_all_by_name("toplevel") == [ncbi33_registry.fetch_top_level()]
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.fetch_all_by_name("")

    @pytest.mark.parametrize(
        "attribute,expected",
        [
            ("sequence_level", ["contig"]),
            (CoordSystemAttribute.SEQUENCE_LEVEL, ["contig"]),
            ("default_version", ["chromosome:NCBI33", "clone", "contig", "supercontig", "est"]),
        ],
    )
    def test_fetch_all_by_attribute(self, ncbi33_registry, attribute, expected):
        assert _names(ncbi33_registry.fetch_all_by_attribute(attribute)) == expected

    def test_fetch_all_by_invalid_attribute(self, ncbi33_registry):
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.fetch_all_by_attribute("top_level")

    def test_fetch_by_dbID(self, ncbi33_registry):
        assert str(ncbi33_registry.fetch_by_dbID(2)) == "clone"
        assert ncbi33_registry.fetch_by_dbID(99) is None
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.fetch_by_dbID(None)

    def test_fetch_sequence_level(self, ncbi33_registry):
        assert str(ncbi33_registry.fetch_sequence_level()) == "contig"

    def test_no_sequence_level(self, make_registry):
        registry = make_registry([("chromosome", "NCBI33", "default_version")])
        with pytest.raises(ConfigurationError):
            registry.fetch_sequence_level()
        with pytest.raises(ConfigurationError):
            registry.fetch_by_name("seqlevel")

    def test_multiple_sequence_level(self, make_registry):
        registry = make_registry([("contig", "", "sequence_level"), ("clone", "", "sequence_level")])
        assert len(registry) == 2
        with pytest.raises(ConfigurationError):
            registry.fetch_sequence_level()

    def test_fetch_all_by_feature_table(self, ncbi33_registry):
        assert _names(ncbi33_registry.fetch_all_by_feature_table("GENE")) == ["chromosome:NCBI33", "chromosome:NCBI34"]
        assert _names(ncbi33_registry.fetch_all_by_feature_table("repeat_feature")) == ["contig"]

    def test_fetch_all_by_undeclared_feature_table(self, ncbi33_registry):
        with pytest.raises(ConfigurationError):
            ncbi33_registry.fetch_all_by_feature_table("transcript")
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.fetch_all_by_feature_table("")


class TestAddFeatureTable:
    def test_add(self, ncbi33_registry):
        clone = ncbi33_registry.fetch_by_name("clone")
        ncbi33_registry.add_feature_table(clone, "Transcript")
        assert ncbi33_registry.fetch_all_by_feature_table("transcript") == [clone]
        row = FeatureTableRow(table_name="transcript", coord_system_id=2)
        assert row in ncbi33_registry.backing_store.feature_tables

    def test_add_to_existing_table(self, ncbi33_registry):
        clone = ncbi33_registry.fetch_by_name("clone")
        ncbi33_registry.add_feature_table(clone, "exon")
        assert _names(ncbi33_registry.fetch_all_by_feature_table("exon")) == ["chromosome:NCBI33", "clone"]

    def test_idempotent(self, ncbi33_registry, ncbi33_store):
        chromosome = ncbi33_registry.fetch_by_name("chromosome")
        rows = list(ncbi33_store.feature_tables)
        ncbi33_registry.add_feature_table(chromosome, "Gene")
        ncbi33_registry.add_feature_table(chromosome, "gene")
        assert ncbi33_store.feature_tables == rows
        assert len(ncbi33_registry.fetch_all_by_feature_table("gene")) == 2

    @pytest.mark.parametrize(
        "cs",
        [
            CoordSystem("scaffold", 7),
            CoordSystem("clone", 2),
            CoordSystem("scaffold", 7, dbID=2),
            CoordSystem.top_level(),
        ],
    )
    @pytest.mark.parametrize("table", ["transcript", "gene"])
    def test_not_stored(self, ncbi33_registry, ncbi33_store, cs, table):
        rows = list(ncbi33_store.feature_tables)
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.add_feature_table(cs, table)
        assert ncbi33_store.feature_tables == rows

    def test_lookalike_of_associated_coord_system(self, ncbi33_registry):
        lookalike = CoordSystem("chromosome", 99, "NCBI33")
        assert lookalike == ncbi33_registry.fetch_by_name("chromosome")
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.add_feature_table(lookalike, "gene")

    @pytest.mark.parametrize("table", ["", None])
    def test_table_required(self, ncbi33_registry, table):
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.add_feature_table(ncbi33_registry.fetch_by_name("clone"), table)

    def test_not_a_coord_system(self, ncbi33_registry):
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.add_feature_table("clone", "gene")


class TestStore:
    def test_store(self, ncbi33_registry, ncbi33_store):
        scaffold = CoordSystem("Scaffold", 7, "v1", is_default_version=True)
        assert ncbi33_registry.store(scaffold) is scaffold
        assert scaffold.dbID == 7
        assert ncbi33_registry.fetch_by_dbID(7) is scaffold
        assert ncbi33_registry.fetch_by_rank(7) is scaffold
        assert ncbi33_registry.fetch_by_name("scaffold") is scaffold
        assert ncbi33_registry.fetch_all_by_name("SCAFFOLD") == [scaffold]
        assert ncbi33_registry.fetch_all()[-1] is scaffold
        assert scaffold in ncbi33_registry.fetch_all_by_attribute("default_version")
        assert ncbi33_store.coord_systems[-1] == CoordSystemRow(
            coord_system_id=7, name="Scaffold", rank=7, version="v1", attrib="default_version"
        )

    def test_store_updates_rank_order(self, ncbi33_registry):
        ncbi33_registry.fetch_all()
        ncbi33_registry.store(CoordSystem("scaffold", 10))
        ncbi33_registry.store(CoordSystem("ditag", 8))
        assert [cs.rank for cs in ncbi33_registry.fetch_all()] == [1, 2, 3, 4, 5, 6, 8, 10]

    def test_store_sequence_level(self, make_registry):
        registry = make_registry([("chromosome", "NCBI33", "default_version")])
        contig = registry.store(CoordSystem("contig", 2, is_sequence_level=True))
        assert registry.fetch_sequence_level() is contig
        assert registry.backing_store.coord_systems[-1].attrib == "sequence_level"

    def test_store_into_empty_store(self):
        registry = CoordSystemRegistry(InMemoryCoordSystemStore())
        chromosome = registry.store(CoordSystem("chromosome", 1, "NCBI33", is_default_version=True))
        assert chromosome.dbID == 1
        with pytest.raises(DuplicateConflictError):
            registry.store(CoordSystem("chromosome", 1, "NCBI34"))
        assert len(registry) == 1

    def test_store_top_level(self, ncbi33_registry):
        with pytest.raises(InvalidArgumentError):
            ncbi33_registry.store(ncbi33_registry.fetch_top_level())

    def test_store_already_stored(self, ncbi33_registry, ncbi33_store):
        contig = ncbi33_registry.fetch_by_name("contig")
        with pytest.warns(AlreadyStoredWarning):
            assert ncbi33_registry.store(contig) is contig
        assert len(ncbi33_store.coord_systems) == 6

    def test_store_same_name_and_version(self, ncbi33_registry, ncbi33_store):
        duplicate = CoordSystem("Chromosome", 9, "ncbi33")
        with pytest.warns(AlreadyStoredWarning):
            assert ncbi33_registry.store(duplicate) is ncbi33_registry.fetch_by_dbID(1)
        assert duplicate.dbID is None
        assert len(ncbi33_store.coord_systems) == 6

    @pytest.mark.parametrize(
        "cs,exception",
        [
            (CoordSystem("", 7), InvalidArgumentError),
            (CoordSystem("toplevel", 7), InvalidArgumentError),
            (CoordSystem("SeqLevel", 7), InvalidArgumentError),
            (CoordSystem("scaffold", 7, is_sequence_level=True), DuplicateConflictError),
            (CoordSystem("chromosome", 7, "NCBI35", is_default_version=True), DuplicateConflictError),
            (CoordSystem("scaffold", 0), InvalidArgumentError),
            (CoordSystem("scaffold", -1), InvalidArgumentError),
            (CoordSystem("scaffold", "7"), InvalidArgumentError),
            (CoordSystem("scaffold", 7.0), InvalidArgumentError),
            (CoordSystem("scaffold", None), InvalidArgumentError),
            (CoordSystem("scaffold", 3), DuplicateConflictError),
            (CoordSystem("chromosome", 1, "NCBI36"), DuplicateConflictError),
            ("scaffold", InvalidArgumentError),
        ],
    )
    def test_store_rejected(self, ncbi33_registry, ncbi33_store, cs, exception):
        with pytest.raises(exception):
            ncbi33_registry.store(cs)
        assert len(ncbi33_registry) == 6
        assert len(ncbi33_store.coord_systems) == 6
        assert [cs.rank for cs in ncbi33_registry.fetch_all()] == [1, 2, 3, 4, 5, 6]
        if isinstance(cs, CoordSystem):
            assert cs.dbID is None

    def test_stored_coord_system_usable_in_mapping_path(self, ncbi33_registry):
        scaffold = ncbi33_registry.store(CoordSystem("scaffold", 7))
        chromosome = ncbi33_registry.fetch_by_name("chromosome")
        assert ncbi33_registry.get_mapping_path(chromosome, scaffold) == []
