# -*- coding: utf-8 -*-
from __future__ import annotations

import pytest

from seriesmint.constants import ZERO_HASH
from seriesmint.errors import InvalidArgument, NotFound
from seriesmint.registry import SeriesRegistry

from .conftest import leaf_hash

ROOT = leaf_hash(1, salt="root")
REF = leaf_hash(1, salt="ref")


@pytest.fixture
def reg(kv):
    return SeriesRegistry(kv)


def test_ids_are_dense_and_start_at_zero(reg):
    assert reg.series_count() == 0
    assert reg.add_series(ROOT, "a", REF, 10) == 0
    assert reg.add_series(leaf_hash(2, salt="root"), "b", REF, 5) == 1
    assert reg.series_count() == 2


def test_new_series_record(reg):
    sid = reg.add_series(ROOT, "genesis", REF, 3)
    s = reg.get_series(sid)
    assert s.merkle_root == ROOT
    assert s.name == "genesis"
    assert s.declared_capacity == 3
    assert s.metadata_refs == (REF,)
    assert s.issued_asset_ids == ()
    assert s.issued_count == 0
    assert reg.get_root(sid) == ROOT
    assert reg.catalogue_size(sid) == 0


def test_existence_is_presence_not_root_value(reg):
    assert not reg.exists(0)
    reg.add_series(ROOT, "a", REF, 1)
    assert reg.exists(0)
    assert not reg.exists(1)
    assert not reg.exists(-1)
    assert not reg.exists(True)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "root,name,ref,cap,field",
    [
        (ZERO_HASH, "a", REF, 1, "root"),
        (b"\x01" * 31, "a", REF, 1, "root"),
        (ROOT, "", REF, 1, "name"),
        (ROOT, None, REF, 1, "name"),
        (ROOT, "a", ZERO_HASH, 1, "metadata_ref"),
        (ROOT, "a", b"", 1, "metadata_ref"),
        (ROOT, "a", REF, 0, "declared_capacity"),
        (ROOT, "a", REF, -5, "declared_capacity"),
        (ROOT, "a", REF, True, "declared_capacity"),
    ],
)
def test_add_series_rejects_bad_input(reg, root, name, ref, cap, field):
    with pytest.raises(InvalidArgument) as ei:
        reg.add_series(root, name, ref, cap)
    assert ei.value.details["field"] == field
    assert reg.series_count() == 0


def test_any_non_empty_name_is_kept_verbatim(reg):
    sid = reg.add_series(ROOT, "  ", REF, 1)
    assert reg.get_series(sid).name == "  "


def test_add_metadata_ref_appends(reg):
    sid = reg.add_series(ROOT, "a", REF, 1)
    r2 = leaf_hash(2, salt="ref")
    assert reg.add_metadata_ref(sid, r2) == 1
    assert reg.metadata_refs(sid) == [REF, r2]


def test_add_metadata_ref_unknown_series(reg):
    with pytest.raises(NotFound):
        reg.add_metadata_ref(0, REF)


def test_add_metadata_ref_rejects_zero(reg):
    sid = reg.add_series(ROOT, "a", REF, 1)
    with pytest.raises(InvalidArgument):
        reg.add_metadata_ref(sid, ZERO_HASH)
    assert reg.metadata_refs(sid) == [REF]


def test_record_issuance_keeps_count_and_list_in_step(reg):
    sid = reg.add_series(ROOT, "a", REF, 2)
    assert reg.record_issuance(sid, 40) == 0
    assert reg.record_issuance(sid, 41) == 1
    s = reg.get_series(sid)
    assert s.issued_asset_ids == (40, 41)
    assert reg.catalogue_size(sid) == len(reg.issued_asset_ids(sid)) == 2


def test_capacity_is_not_enforced_by_registry(reg):
    sid = reg.add_series(ROOT, "a", REF, 1)
    reg.record_issuance(sid, 0)
    reg.record_issuance(sid, 1)
    assert reg.catalogue_size(sid) == 2


def test_series_are_isolated(reg):
    a = reg.add_series(ROOT, "a", REF, 5)
    b = reg.add_series(leaf_hash(9, salt="root"), "b", REF, 5)
    reg.record_issuance(a, 7)
    reg.add_metadata_ref(a, leaf_hash(3, salt="ref"))
    assert reg.catalogue_size(b) == 0
    assert reg.metadata_refs(b) == [REF]


@pytest.mark.parametrize("op", ["get_root", "catalogue_size", "get_series", "declared_capacity"])
def test_reads_on_unknown_series(reg, op):
    with pytest.raises(NotFound) as ei:
        getattr(reg, op)(3)
    assert ei.value.details["series_id"] == 3


def test_to_dict_is_json_friendly(reg):
    sid = reg.add_series(ROOT, "a", REF, 2)
    reg.record_issuance(sid, 5)
    d = reg.get_series(sid).to_dict()
    assert d["merkleRoot"] == "0x" + ROOT.hex()
    assert d["issuedCount"] == 1
    assert d["issuedAssetIds"] == [5]
