import string
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from copd import textdb


def _placeholders(template):
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


def test_block_ids_match_keys():
    for key, blk in textdb.ALL_BLOCKS.items():
        assert blk.id == key
        assert blk.title


def test_list_blocks_by_prefix():
    ids = [b.id for b in textdb.list_blocks("T-E-")]
    assert ids == ["T-E-CONDITIONAL", "T-E-LOW", "T-E-STRONG"]
    assert len(textdb.list_blocks("W-")) == len(textdb.W_BLOCKS)
    assert textdb.get_block("nope") is None


def test_template_placeholders_are_known():
    allowed = {"strong_ge", "conditional_ge", "eos", "ratio_cut", "grade"}
    for blk in textdb.ALL_BLOCKS.values():
        assert _placeholders(blk.template) <= allowed
        for text in blk.variants.values():
            assert _placeholders(text) <= allowed


def test_treatment_blocks_have_report_variant():
    for blk in textdb.T_BLOCKS.values():
        assert "report" in blk.variants
        assert "note" in blk.variants
