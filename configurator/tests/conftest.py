"""Shared fixtures for the configurator test suite."""

from pathlib import Path
from typing import Any, List, Sequence

import pytest

from configurator.canon import canon
from configurator.models import Catalog, Option, Product, Row
from configurator.sheets import rows_from_records

OPTION_HEADERS = [
    "model_id", "group", "option_name", "price_delta", "price_type", "is_default",
    "sort", "visible", "dep_group", "dep_value", "panel", "panel_sort", "panel_open", "ui_type",
]

PRODUCTS_CSV = """key,title,series,base_price,sale_price,sale_label,sale_active,image_count,video_url,notes,visible,description
LEGACY35-LB-3,LB-3,Legacy '35 Series,3200,,,,6,,,TRUE,Flathead banjo.
LEGACY54-LB-1,LB-1,Legacy '54 Series,2000,1800,Spring Sale,TRUE,5,,,TRUE,
OLDTIME-OT-1,OT-1,Old Time Series,1500,,,,3,,,FALSE,
"""

OPTIONS_CSV = """model_id,group,option_name,price_delta,price_type,is_default,sort,visible,dep_group,dep_value,panel,panel_sort,panel_open,ui_type
LEGACY35-LB-3,Tone Ring,Brass,0,add,TRUE,1,TRUE,,,,,,
LEGACY35-LB-3,Tone Ring,Bronze,200,add,FALSE,2,TRUE,,,,,,
LEGACY35-LB-3,Engraving,Custom,75,add,FALSE,1,TRUE,Tone Ring,Bronze,,,,
LEGACY54-LB-1,Case,Hardshell,50,add,TRUE,1,TRUE,,,,,,
LEGACY54-LB-1,Case,Gig Bag,-50,add,FALSE,2,TRUE,,,,,,
"""

SPECS_CSV = """model_id,section,label,value,sort
LEGACY35-LB-3,Construction,Rim,3-ply maple,2
LEGACY35-LB-3,Construction,Tone Ring,Flathead,1
"""

NECKS_CSV = """key,title,series,base_price,sale_price,sale_label,sale_active,image_count,video_url,notes,visible,description
NECK-LB3,LB-3 Style,Replacement Necks,950,,,,3,,,,
"""

NECK_OPTIONS_CSV = """model_id,group,option_name,price_delta,price_type,is_default,sort,visible,dep_group,dep_value,panel,panel_sort,panel_open,ui_type
NECK-LB3,Name Block,None,0,flat,TRUE,1,TRUE,,,,,,
NECK-LB3,Name Block,Custom Text,60,flat,FALSE,2,TRUE,,,,,,text
"""


def _option_rows(*records: Sequence[Any]) -> List[Row]:
    padded = [list(r) + [""] * (len(OPTION_HEADERS) - len(r)) for r in records]
    return rows_from_records(padded, OPTION_HEADERS)


def _make_option(name: str, group: str = "Finish", **kwargs: Any) -> Option:
    """Build an Option directly, visible unless told otherwise."""
    kwargs.setdefault("visible", True)
    return Option(name=name, group_key=canon(group), group_name=group, **kwargs)


def _make_catalog(groups: Sequence[Sequence[Option]], base_price: float = 1000.0, **product_kwargs: Any) -> Catalog:
    """Catalog from lists of options, one list per group, in order."""
    product = Product(model_id="TEST-1", title="Test", base_price=base_price, **product_kwargs)
    catalog = Catalog(product=product)
    for options in groups:
        key = options[0].group_key
        catalog.groups[key] = list(options)
        catalog.group_names[key] = options[0].group_name
    return catalog


@pytest.fixture
def tone_ring_catalog():
    """Provider "Tone Ring" and dependent "Engraving" gated on Bronze."""
    return _make_catalog([
        [
            _make_option("Brass", "Tone Ring", is_default=True, sort=1),
            _make_option("Bronze", "Tone Ring", price_delta=200, sort=2),
        ],
        [
            _make_option("Custom", "Engraving", price_delta=75, dep_group="tonering", dep_value="Bronze"),
        ],
    ])


@pytest.fixture
def finish_catalog():
    """Provider "Finish" and dependent "Inlay" whose only option needs Natural."""
    return _make_catalog([
        [
            _make_option("Natural", "Finish", is_default=True, sort=1),
            _make_option("Sunburst", "Finish", price_delta=150, sort=2),
        ],
        [
            _make_option("Flying Eagle", "Inlay", dep_group="finish", dep_value="Natural"),
        ],
    ])


@pytest.fixture
def sheet_dir(tmp_path) -> Path:
    """Directory of CSV sheet exports for the banjo and neck variants."""
    (tmp_path / "Products.csv").write_text(PRODUCTS_CSV)
    (tmp_path / "Options.csv").write_text(OPTIONS_CSV)
    (tmp_path / "Specs.csv").write_text(SPECS_CSV)
    (tmp_path / "Necks.csv").write_text(NECKS_CSV)
    (tmp_path / "Neck_Options.csv").write_text(NECK_OPTIONS_CSV)
    return tmp_path


@pytest.fixture
def option_rows():
    """Factory for header-addressed option rows; short records are padded with blanks."""
    return _option_rows


@pytest.fixture
def make_option():
    """Factory for Options, visible unless told otherwise."""
    return _make_option


@pytest.fixture
def make_catalog():
    """Factory for a Catalog from lists of options, one list per group."""
    return _make_catalog
